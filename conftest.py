"""Global pytest configuration."""

import os

# Keep tests offline and on the in-memory store regardless of a local .env
os.environ["GOOGLE_MAPS_API_KEY"] = ""
os.environ["NAVITIME_API_KEY"] = ""
os.environ.pop("TRIP_DATA_PATH", None)
