"""Unit tests for the provider executor.

Tests cover:
1. Circuit breaker state transitions
2. Timeout and retry behavior
3. Breaker-open short circuit
4. Metrics and logging hooks
"""

import asyncio
from datetime import datetime, timedelta

import pytest
from prometheus_client import REGISTRY

from backend.app.errors import ProviderError
from backend.app.tools.executor import (
    BreakerRegistry,
    BreakerState,
    CircuitBreaker,
    ProviderCallConfig,
    ProviderCallContext,
    ProviderExecutor,
)
from backend.app.utils.metrics import PrometheusProviderMetrics

CTX = ProviderCallContext(session_id="sess_1", category="hotels", provider="static.hotels")


def make_config(**overrides: int) -> ProviderCallConfig:
    values = {
        "hard_timeout_ms": 50,
        "retry_count": 1,
        "retry_jitter_min_ms": 200,
        "retry_jitter_max_ms": 500,
        "breaker_failure_threshold": 5,
    }
    values.update(overrides)
    return ProviderCallConfig(**values)


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class RecordingLogger:
    def __init__(self) -> None:
        self.outcomes: list[tuple[int, str]] = []

    def log_attempt(
        self,
        ctx: ProviderCallContext,
        attempt: int,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        self.outcomes.append((attempt, outcome))


class TestCircuitBreaker:
    """Test CircuitBreaker state transitions."""

    def test_breaker_starts_closed(self) -> None:
        breaker = CircuitBreaker(name="t", failure_threshold=5, window_seconds=60, half_open_seconds=30)
        assert breaker.state == BreakerState.CLOSED

    def test_breaker_opens_after_threshold_failures(self) -> None:
        now = datetime.now()
        breaker = CircuitBreaker(name="t", failure_threshold=3, window_seconds=60, half_open_seconds=30)

        for _ in range(3):
            breaker.record_failure(now)

        assert breaker.check_and_update_state(now) == BreakerState.OPEN

    def test_breaker_ignores_failures_outside_window(self) -> None:
        now = datetime.now()
        breaker = CircuitBreaker(name="t", failure_threshold=3, window_seconds=60, half_open_seconds=30)

        old = now - timedelta(seconds=65)
        breaker.record_failure(old)
        breaker.record_failure(old)
        breaker.record_failure(now)

        assert breaker.check_and_update_state(now) == BreakerState.CLOSED
        assert len(breaker.failure_times) == 1

    def test_half_open_then_success_closes(self) -> None:
        now = datetime.now()
        breaker = CircuitBreaker(name="t", failure_threshold=2, window_seconds=60, half_open_seconds=30)
        breaker.record_failure(now)
        breaker.record_failure(now)

        assert breaker.check_and_update_state(now + timedelta(seconds=31)) == BreakerState.HALF_OPEN

        breaker.record_success()
        assert breaker.state == BreakerState.CLOSED
        assert breaker.failure_times == []

    def test_half_open_failure_reopens(self) -> None:
        now = datetime.now()
        breaker = CircuitBreaker(name="t", failure_threshold=2, window_seconds=60, half_open_seconds=30)
        breaker.record_failure(now)
        breaker.record_failure(now)
        later = now + timedelta(seconds=31)
        breaker.check_and_update_state(later)

        breaker.record_failure(later)

        assert breaker.state == BreakerState.OPEN
        assert breaker.opened_at == later

    def test_registry_shares_breaker_by_name(self) -> None:
        registry = BreakerRegistry()
        config = make_config()

        assert registry.get_or_create("a", config) is registry.get_or_create("a", config)
        assert registry.get_or_create("a", config) is not registry.get_or_create("b", config)


class TestProviderExecutor:
    """Test ProviderExecutor retry/timeout/breaker behavior."""

    @pytest.mark.asyncio
    async def test_returns_first_success(self) -> None:
        executor = ProviderExecutor(make_config(), sleep_fn=RecordingSleep())

        async def fetch() -> list[int]:
            return [1, 2]

        assert await executor.execute(CTX, fetch) == [1, 2]

    @pytest.mark.asyncio
    async def test_retries_once_then_succeeds(self) -> None:
        sleep = RecordingSleep()
        executor = ProviderExecutor(make_config(), sleep_fn=sleep)
        calls = {"n": 0}

        async def flaky() -> str:
            calls["n"] += 1
            if calls["n"] == 1:
                raise ConnectionError("reset")
            return "ok"

        assert await executor.execute(CTX, flaky) == "ok"
        assert calls["n"] == 2
        assert len(sleep.calls) == 1
        assert 0.2 <= sleep.calls[0] <= 0.5

    @pytest.mark.asyncio
    async def test_timeout_on_every_attempt_raises_provider_error(self) -> None:
        logger = RecordingLogger()
        executor = ProviderExecutor(make_config(), logger=logger, sleep_fn=RecordingSleep())

        async def slow() -> None:
            await asyncio.sleep(1)

        with pytest.raises(ProviderError) as exc_info:
            await executor.execute(CTX, slow)

        assert exc_info.value.category == "hotels"
        assert exc_info.value.reason == "timeout after 2 attempt(s)"
        assert logger.outcomes == [(1, "timeout"), (2, "timeout")]

    @pytest.mark.asyncio
    async def test_open_breaker_short_circuits(self) -> None:
        executor = ProviderExecutor(
            make_config(breaker_failure_threshold=1, retry_count=0), sleep_fn=RecordingSleep()
        )
        calls = {"n": 0}

        async def failing() -> None:
            calls["n"] += 1
            raise RuntimeError("boom")

        with pytest.raises(ProviderError, match="RuntimeError"):
            await executor.execute(CTX, failing)

        with pytest.raises(ProviderError, match="circuit breaker open"):
            await executor.execute(CTX, failing)

        assert calls["n"] == 1

    @pytest.mark.asyncio
    async def test_breaker_opening_stops_retries(self) -> None:
        sleep = RecordingSleep()
        executor = ProviderExecutor(
            make_config(breaker_failure_threshold=1, retry_count=3), sleep_fn=sleep
        )

        async def failing() -> None:
            raise RuntimeError("boom")

        with pytest.raises(ProviderError, match="after 1 attempt"):
            await executor.execute(CTX, failing)

        assert sleep.calls == []

    @pytest.mark.asyncio
    async def test_metrics_recorded(self) -> None:
        executor = ProviderExecutor(
            make_config(retry_count=0),
            metrics=PrometheusProviderMetrics(),
            sleep_fn=RecordingSleep(),
        )
        ctx = ProviderCallContext(session_id="s", category="catering", provider="metrics.test")
        before = (
            REGISTRY.get_sample_value(
                "provider_errors_total", {"category": "catering", "reason": "execution_error"}
            )
            or 0.0
        )

        async def failing() -> None:
            raise ValueError("bad payload")

        with pytest.raises(ProviderError):
            await executor.execute(ctx, failing)

        after = REGISTRY.get_sample_value(
            "provider_errors_total", {"category": "catering", "reason": "execution_error"}
        )
        assert after == before + 1
