"""Async executor for external provider calls.

Wraps travel-time, places and geocoding calls with:
- Hard timeout per attempt
- Bounded retries with jitter
- Per-provider circuit breaker (shared state via registry)
- Optional TTL cache keyed by the request payload
- Metrics and structured logging
"""

import asyncio
import hashlib
import json
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from tripboard.app.config import Settings

T = TypeVar("T")
P = TypeVar("P", bound=BaseModel)


class ProviderTimeoutError(Exception):
    """Provider call exceeded its timeout on every attempt."""


class ProviderCircuitOpenError(Exception):
    """Circuit breaker is open for this provider."""


class ProviderExecutionError(Exception):
    """Provider call failed on every attempt."""


@dataclass(frozen=True)
class ProviderContext:
    """Context for one provider call, used for logs and metrics."""

    trace_id: str
    provider: str


@dataclass
class ProviderConfig:
    """Execution knobs for a provider."""

    hard_timeout_ms: int
    retry_count: int
    retry_jitter_min_ms: int
    retry_jitter_max_ms: int
    breaker_failure_threshold: int = 5
    breaker_window_seconds: int = 60
    breaker_half_open_seconds: int = 30
    cache_ttl_seconds: int = 0

    @classmethod
    def from_settings(cls, settings: Settings, *, cache_ttl_seconds: int = 0) -> "ProviderConfig":
        return cls(
            hard_timeout_ms=settings.provider_hard_timeout_ms,
            retry_count=settings.provider_retry_count,
            retry_jitter_min_ms=settings.retry_jitter_min_ms,
            retry_jitter_max_ms=settings.retry_jitter_max_ms,
            breaker_failure_threshold=settings.circuit_breaker_failures,
            breaker_window_seconds=settings.circuit_breaker_window_sec,
            breaker_half_open_seconds=settings.circuit_breaker_half_open_sec,
            cache_ttl_seconds=cache_ttl_seconds,
        )


class BreakerState(str, Enum):
    """Circuit breaker state."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreaker:
    """Per-provider circuit breaker.

    Opens after failure_threshold failures within window_seconds and lets a
    trial call through after half_open_seconds.
    """

    provider: str
    failure_threshold: int
    window_seconds: int
    half_open_seconds: int
    state: BreakerState = BreakerState.CLOSED
    failure_times: list[datetime] = field(default_factory=list)
    opened_at: datetime | None = None

    def record_success(self) -> None:
        if self.state == BreakerState.HALF_OPEN:
            self.state = BreakerState.CLOSED
            self.failure_times.clear()
            self.opened_at = None

    def record_failure(self, now: datetime) -> None:
        cutoff = now - timedelta(seconds=self.window_seconds)
        self.failure_times = [t for t in self.failure_times if t > cutoff]
        self.failure_times.append(now)

        if len(self.failure_times) >= self.failure_threshold:
            self.state = BreakerState.OPEN
            self.opened_at = now

    def is_open(self, now: datetime) -> bool:
        """Check if breaker is currently rejecting calls."""
        if self.state == BreakerState.OPEN and self.opened_at is not None:
            if (now - self.opened_at).total_seconds() >= self.half_open_seconds:
                self.state = BreakerState.HALF_OPEN
        return self.state == BreakerState.OPEN


class BreakerRegistry:
    """Registry of per-provider circuit breakers with shared state."""

    def __init__(self) -> None:
        self._by_provider: dict[str, CircuitBreaker] = {}

    def get_or_create(self, provider: str, config: ProviderConfig) -> CircuitBreaker:
        if provider not in self._by_provider:
            self._by_provider[provider] = CircuitBreaker(
                provider=provider,
                failure_threshold=config.breaker_failure_threshold,
                window_seconds=config.breaker_window_seconds,
                half_open_seconds=config.breaker_half_open_seconds,
            )
        return self._by_provider[provider]

    def clear(self) -> None:
        """Clear all breakers (useful for testing)."""
        self._by_provider.clear()


_global_breaker_registry = BreakerRegistry()


def get_breaker_registry() -> BreakerRegistry:
    return _global_breaker_registry


@dataclass
class CacheEntry(Generic[T]):
    value: T
    cached_at: datetime
    ttl_seconds: int

    def is_fresh(self, now: datetime) -> bool:
        return (now - self.cached_at).total_seconds() < self.ttl_seconds


class ProviderCache:
    """In-memory cache for provider results."""

    def __init__(self) -> None:
        self._cache: dict[str, CacheEntry[Any]] = {}

    def make_key(self, provider: str, payload: BaseModel) -> str:
        """Generate deterministic cache key from payload."""
        data = payload.model_dump(mode="json")
        digest = hashlib.sha256(json.dumps(data, sort_keys=True).encode()).hexdigest()
        return f"{provider}:{digest}"

    def get(self, key: str, now: datetime) -> Any | None:
        entry = self._cache.get(key)
        if entry and entry.is_fresh(now):
            return entry.value
        if entry:
            del self._cache[key]
        return None

    def set(self, key: str, value: Any, ttl_seconds: int, now: datetime) -> None:
        self._cache[key] = CacheEntry(value=value, cached_at=now, ttl_seconds=ttl_seconds)


class ProviderMetrics:
    """No-op metrics interface."""

    def record_latency(self, provider: str, outcome: str, latency_ms: float) -> None:
        pass

    def inc_error(self, provider: str, reason: str) -> None:
        pass

    def inc_cache_hit(self, provider: str) -> None:
        pass


class ProviderLogger:
    """No-op structured logging interface."""

    def log_attempt(
        self,
        ctx: ProviderContext,
        attempt: int,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        pass


class ProviderExecutor:
    """Runs provider calls with timeout, retry, breaker and cache."""

    def __init__(
        self,
        metrics: ProviderMetrics | None = None,
        logger: ProviderLogger | None = None,
        cache: ProviderCache | None = None,
        breakers: BreakerRegistry | None = None,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            metrics: Metrics recorder (defaults to no-op)
            logger: Structured logger (defaults to no-op)
            cache: Result cache shared across calls (defaults to a fresh one)
            breakers: Breaker registry (defaults to the process-wide one)
            sleep_fn: Injectable sleep function (default: asyncio.sleep)
        """
        self._metrics = metrics or ProviderMetrics()
        self._logger = logger or ProviderLogger()
        self._cache = cache or ProviderCache()
        self._breakers = breakers or get_breaker_registry()
        self._sleep = sleep_fn or asyncio.sleep

    async def execute(
        self,
        ctx: ProviderContext,
        config: ProviderConfig,
        fn: Callable[[P], Awaitable[T]],
        payload: P,
    ) -> T:
        """Execute a provider call.

        Returns:
            Whatever fn returns (``None`` is a valid "not found" result)

        Raises:
            ProviderTimeoutError: Every attempt timed out
            ProviderCircuitOpenError: Breaker is open for ctx.provider
            ProviderExecutionError: Every attempt raised
        """
        start = time.monotonic()
        now = datetime.now()
        breaker = self._breakers.get_or_create(ctx.provider, config)

        cache_key: str | None = None
        if config.cache_ttl_seconds > 0:
            cache_key = self._cache.make_key(ctx.provider, payload)
            cached = self._cache.get(cache_key, now)
            if cached is not None:
                elapsed_ms = (time.monotonic() - start) * 1000
                self._metrics.record_latency(ctx.provider, "cache_hit", elapsed_ms)
                self._metrics.inc_cache_hit(ctx.provider)
                self._logger.log_attempt(ctx, 0, "cache_hit", elapsed_ms)
                return cached

        if breaker.is_open(now):
            self._metrics.inc_error(ctx.provider, "breaker_open")
            self._logger.log_attempt(ctx, 0, "breaker_open", 0.0, error_reason="breaker_open")
            raise ProviderCircuitOpenError(f"Circuit breaker open for {ctx.provider}")

        last_error: Exception | None = None
        for attempt in range(config.retry_count + 1):
            attempt_start = time.monotonic()
            try:
                result = await asyncio.wait_for(fn(payload), timeout=config.hard_timeout_ms / 1000)
            except TimeoutError as e:
                last_error = e
                reason = "timeout"
            except Exception as e:
                last_error = e
                reason = type(e).__name__
            else:
                elapsed_ms = (time.monotonic() - attempt_start) * 1000
                breaker.record_success()
                self._metrics.record_latency(ctx.provider, "success", elapsed_ms)
                self._logger.log_attempt(ctx, attempt + 1, "success", elapsed_ms)
                if cache_key is not None and result is not None:
                    self._cache.set(cache_key, result, config.cache_ttl_seconds, datetime.now())
                return result

            elapsed_ms = (time.monotonic() - attempt_start) * 1000
            self._metrics.inc_error(ctx.provider, "timeout" if reason == "timeout" else "execution_error")
            self._logger.log_attempt(ctx, attempt + 1, "error", elapsed_ms, error_reason=reason)
            breaker.record_failure(datetime.now())

            if attempt < config.retry_count:
                jitter_ms = random.uniform(config.retry_jitter_min_ms, config.retry_jitter_max_ms)
                await self._sleep(jitter_ms / 1000)

        if isinstance(last_error, TimeoutError):
            raise ProviderTimeoutError(f"Provider {ctx.provider} timed out after all retries")
        raise ProviderExecutionError(f"Provider {ctx.provider} failed after all retries") from last_error
