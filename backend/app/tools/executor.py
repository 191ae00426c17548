"""Async executor for vendor provider calls.

Each call runs with:
- Hard timeout per attempt
- Bounded retries with jitter
- Per-category circuit breaker (shared state via registry)
- Metrics and structured logging hooks

All terminal failures surface as ``ProviderError`` so discovery has a single
exception type to degrade on.
"""

import asyncio
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import TypeVar

from backend.app.config import Settings
from backend.app.errors import ProviderError

T = TypeVar("T")


@dataclass(frozen=True)
class ProviderCallContext:
    """Context for one provider call, used for logs and metrics."""

    session_id: str
    category: str
    provider: str


@dataclass
class ProviderCallConfig:
    """Configuration for provider execution."""

    hard_timeout_ms: int
    retry_count: int
    retry_jitter_min_ms: int
    retry_jitter_max_ms: int
    breaker_failure_threshold: int = 5
    breaker_window_seconds: int = 60
    breaker_half_open_seconds: int = 30

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderCallConfig":
        return cls(
            hard_timeout_ms=settings.provider_timeout_ms,
            retry_count=settings.provider_retry_count,
            retry_jitter_min_ms=settings.retry_jitter_min_ms,
            retry_jitter_max_ms=settings.retry_jitter_max_ms,
            breaker_failure_threshold=settings.circuit_breaker_failures,
            breaker_window_seconds=settings.circuit_breaker_window_sec,
            breaker_half_open_seconds=settings.circuit_breaker_half_open_sec,
        )


class BreakerState(str, Enum):
    """Circuit breaker state."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreaker:
    """Per-category circuit breaker.

    Tracks failures within a time window and opens after threshold.
    """

    name: str
    failure_threshold: int
    window_seconds: int
    half_open_seconds: int
    state: BreakerState = BreakerState.CLOSED
    failure_times: list[datetime] = field(default_factory=list)
    opened_at: datetime | None = None

    def record_success(self) -> None:
        """Record successful execution."""
        if self.state == BreakerState.HALF_OPEN:
            self.state = BreakerState.CLOSED
            self.failure_times.clear()
            self.opened_at = None

    def record_failure(self, now: datetime) -> None:
        """Record failed execution."""
        cutoff = now - timedelta(seconds=self.window_seconds)
        self.failure_times = [t for t in self.failure_times if t > cutoff]
        self.failure_times.append(now)

        if self.state == BreakerState.HALF_OPEN or (
            len(self.failure_times) >= self.failure_threshold
        ):
            self.state = BreakerState.OPEN
            self.opened_at = now

    def check_and_update_state(self, now: datetime) -> BreakerState:
        """Move OPEN to HALF_OPEN once the cool-down elapsed."""
        if self.state == BreakerState.OPEN:
            if self.opened_at and (now - self.opened_at).total_seconds() >= self.half_open_seconds:
                self.state = BreakerState.HALF_OPEN

        return self.state

    def is_open(self, now: datetime) -> bool:
        """Check if breaker is currently open (rejecting calls)."""
        return self.check_and_update_state(now) == BreakerState.OPEN


class BreakerRegistry:
    """Registry of per-provider circuit breakers with shared state."""

    def __init__(self) -> None:
        self._by_name: dict[str, CircuitBreaker] = {}

    def get_or_create(self, name: str, config: ProviderCallConfig) -> CircuitBreaker:
        """Get existing breaker or create one with the given config."""
        if name not in self._by_name:
            self._by_name[name] = CircuitBreaker(
                name=name,
                failure_threshold=config.breaker_failure_threshold,
                window_seconds=config.breaker_window_seconds,
                half_open_seconds=config.breaker_half_open_seconds,
            )
        return self._by_name[name]

    def clear(self) -> None:
        """Clear all breakers (useful for testing)."""
        self._by_name.clear()


class ProviderMetrics:
    """Interface for provider call metrics (no-op default)."""

    def record_latency(self, category: str, outcome: str, latency_ms: float) -> None:
        pass

    def inc_error(self, category: str, reason: str) -> None:
        pass


class ProviderLogger:
    """Interface for structured provider logging (no-op default)."""

    def log_attempt(
        self,
        ctx: ProviderCallContext,
        attempt: int,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        pass


class ProviderExecutor:
    """Runs provider calls with timeout, retry and circuit breaking."""

    def __init__(
        self,
        config: ProviderCallConfig,
        metrics: ProviderMetrics | None = None,
        logger: ProviderLogger | None = None,
        breakers: BreakerRegistry | None = None,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            config: Timeout/retry/breaker configuration
            metrics: Metrics recorder (optional, defaults to no-op)
            logger: Structured logger (optional, defaults to no-op)
            breakers: Breaker registry (optional, one per executor by default)
            sleep_fn: Injectable sleep function (default: asyncio.sleep)
        """
        self._config = config
        self._metrics = metrics or ProviderMetrics()
        self._logger = logger or ProviderLogger()
        self._breakers = breakers or BreakerRegistry()
        self._sleep = sleep_fn or asyncio.sleep

    @property
    def breakers(self) -> BreakerRegistry:
        return self._breakers

    async def execute(
        self,
        ctx: ProviderCallContext,
        fn: Callable[[], Awaitable[T]],
    ) -> T:
        """Execute a provider call.

        Args:
            ctx: Call context
            fn: Zero-argument coroutine factory, invoked once per attempt

        Returns:
            Whatever ``fn`` returns on the first successful attempt

        Raises:
            ProviderError: Breaker open, or every attempt timed out/failed
        """
        config = self._config
        breaker = self._breakers.get_or_create(ctx.provider, config)

        now = datetime.now()
        if breaker.is_open(now):
            self._metrics.record_latency(ctx.category, "breaker_open", 0.0)
            self._metrics.inc_error(ctx.category, "breaker_open")
            self._logger.log_attempt(ctx, 0, "breaker_open", 0.0, error_reason="breaker_open")
            raise ProviderError(ctx.category, "circuit breaker open")

        last_reason = "unknown"
        attempts = 0
        for attempt in range(config.retry_count + 1):
            attempt_start = time.monotonic()
            attempts = attempt + 1

            try:
                result = await asyncio.wait_for(fn(), timeout=config.hard_timeout_ms / 1000)

                elapsed_ms = (time.monotonic() - attempt_start) * 1000
                breaker.record_success()
                self._metrics.record_latency(ctx.category, "success", elapsed_ms)
                self._logger.log_attempt(ctx, attempt + 1, "success", elapsed_ms)
                return result

            except asyncio.CancelledError:
                raise

            except TimeoutError:
                elapsed_ms = (time.monotonic() - attempt_start) * 1000
                last_reason = "timeout"
                self._metrics.inc_error(ctx.category, "timeout")
                self._logger.log_attempt(
                    ctx, attempt + 1, "timeout", elapsed_ms, error_reason="timeout"
                )

            except Exception as e:
                elapsed_ms = (time.monotonic() - attempt_start) * 1000
                last_reason = type(e).__name__
                self._metrics.inc_error(ctx.category, "execution_error")
                self._logger.log_attempt(
                    ctx, attempt + 1, "error", elapsed_ms, error_reason=last_reason
                )

            breaker.record_failure(datetime.now())
            if breaker.is_open(datetime.now()):
                break

            if attempt < config.retry_count:
                jitter_ms = random.uniform(config.retry_jitter_min_ms, config.retry_jitter_max_ms)
                await self._sleep(jitter_ms / 1000)

        raise ProviderError(ctx.category, f"{last_reason} after {attempts} attempt(s)")
