"""SimulationManager: latency and failure injection for simulated operations.

Holds the configuration read by every simulated operation (delay bounds,
error rate, network condition, current pattern) and exposes the async
operations that wait, report progress, and inject classified failures.

The manager is an explicitly constructed context object. Tests create a
fresh instance per case with a seeded ``random.Random`` and a fake sleep
function; applications share one through ``get_simulation_manager()``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
import string
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Mapping,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

from pydantic import ValidationError

from resilience_sim.core.errors.base import SimulationConfigError
from resilience_sim.core.errors.simulation import ErrorType, SimulationError
from resilience_sim.core.observability.audit import audit_log
from resilience_sim.core.simulation.classifier import generate_simulation_error
from resilience_sim.core.simulation.models import (
    NetworkCondition,
    SimulationConfig,
    SimulationPattern,
    SleepFunc,
)
from resilience_sim.core.simulation.registry import (
    DEFAULT_PATTERN,
    SIMULATION_PATTERNS,
    get_available_patterns,
    get_network_preset,
    get_pattern,
    parse_network_condition,
    pattern_bounds,
)
from resilience_sim.core.simulation.seasonal import seasonal_multiplier

logger = logging.getLogger(__name__)

T = TypeVar("T")

UPLOAD_STEPS = 10
UPLOAD_FAILURE_AFTER_STEP = 5

PROCESSING_SUB_STEPS = 20
PROCESSING_FAILURE_AFTER_SUB_STEP = 10
PROCESSING_STEP_MIN_MS = 2000.0
PROCESSING_STEP_MAX_MS = 10000.0

DOWNLOAD_MIN_MS = 500.0
DOWNLOAD_MAX_MS = 3000.0
DEFAULT_DOWNLOAD_SIZE = 1024 * 1024
DOWNLOAD_FILE_TYPES = frozenset({"pdf", "csv", "xlsx"})

AUTH_MIN_MS = 1000.0
AUTH_SPREAD_MS = 2000.0
LOGIN_FAILURE_RATE = 0.05
AUTH_KINDS = frozenset({"login", "forgot-password", "set-password"})

EMAIL_MIN_MS = 1500.0
EMAIL_SPREAD_MS = 3000.0
EMAIL_KINDS = frozenset({"forgot-password", "user-created", "password-reset"})

DELAY_MULTIPLIER_MIN = 0.1
DELAY_MULTIPLIER_MAX = 10.0

_TOKEN_ALPHABET = string.digits + string.ascii_lowercase

ProgressCallback = Callable[[int], None]
StepCallback = Callable[[int, int], None]
Operation = Callable[[], Union[T, Awaitable[T]]]


@dataclass(frozen=True)
class UploadFile:
    """Minimal description of a file being uploaded."""

    name: str
    size: int


def _coerce_upload(file: Union[UploadFile, Mapping[str, Any]]) -> UploadFile:
    if isinstance(file, UploadFile):
        return file
    return UploadFile(name=str(file["name"]), size=int(file["size"]))


async def call_operation(operation: Callable[[], Any]) -> Any:
    """Call a sync or async zero-argument operation."""
    result = operation()
    if inspect.isawaitable(result):
        result = await result
    return result


class SimulationManager:
    """Latency and error simulator.

    Configuration calls (``set_config``, ``set_pattern``,
    ``set_network_condition``) replace the single active configuration;
    later calls win. A call in flight reads the configuration at the moment
    it computes its delay or failure check.

    Args:
        config: Initial configuration (defaults to ``SimulationConfig()``).
        rng: Injectable Random instance for deterministic testing.
        sleep_func: Injectable async sleep taking seconds.
        now_func: Wall-clock source for the seasonal multiplier.
        download_origin: Origin embedded in synthetic download locators.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        *,
        rng: Optional[random.Random] = None,
        sleep_func: Optional[SleepFunc] = None,
        now_func: Optional[Callable[[], datetime]] = None,
        download_origin: str = "http://localhost",
    ) -> None:
        self._config = config.model_copy() if config is not None else SimulationConfig()
        self._current_pattern = DEFAULT_PATTERN
        self._seasonal_multiplier = 1.0
        self._delay_multiplier = 1.0
        self._rng = rng or random.Random()
        self._sleep = sleep_func or asyncio.sleep
        self._now = now_func or datetime.now
        self.download_origin = download_origin.rstrip("/")
        self.enabled = True
        self.debug = False

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_config(self, **overrides: Any) -> SimulationConfig:
        """Merge ``overrides`` into the active configuration.

        Raises:
            SimulationConfigError: If the merged configuration is invalid.
        """
        try:
            self._config = SimulationConfig.model_validate(
                {**self._config.model_dump(), **overrides}
            )
        except ValidationError as e:
            raise SimulationConfigError(f"Invalid simulation config: {e}") from e
        return self.get_config()

    def get_config(self) -> SimulationConfig:
        """Return a copy of the active configuration."""
        return self._config.model_copy()

    def set_network_condition(self, condition: Union[str, NetworkCondition]) -> None:
        """Overlay a network condition preset onto the active configuration."""
        resolved = parse_network_condition(condition)
        self.set_config(**get_network_preset(resolved), network_condition=resolved)
        audit_log("config_change", subject="simulator", network_condition=resolved.value)
        self.log_debug("Network condition set to %s", resolved.value)

    def set_pattern(self, name: str) -> None:
        """Switch delay bounds and error rate to a named pattern.

        Raises:
            SimulationConfigError: If ``name`` is not a registered pattern.
        """
        pattern = get_pattern(name)
        min_delay, max_delay = pattern_bounds(pattern)
        self.set_config(
            min_delay_ms=min_delay,
            max_delay_ms=max_delay,
            error_rate=pattern.error_rate,
        )
        self._current_pattern = name
        audit_log("config_change", subject="simulator", pattern=name)
        self.log_debug("Simulation pattern changed to: %s", name)

    def get_current_pattern(self) -> SimulationPattern:
        return SIMULATION_PATTERNS.get(self._current_pattern) or SIMULATION_PATTERNS[DEFAULT_PATTERN]

    def get_available_patterns(self) -> Dict[str, SimulationPattern]:
        return get_available_patterns()

    @property
    def delay_multiplier(self) -> float:
        """Time scale applied to every wait (0.1 runs ten times faster)."""
        return self._delay_multiplier

    @delay_multiplier.setter
    def delay_multiplier(self, value: float) -> None:
        self._delay_multiplier = max(DELAY_MULTIPLIER_MIN, min(DELAY_MULTIPLIER_MAX, float(value)))

    @property
    def seasonal_multiplier(self) -> float:
        """Multiplier computed by the most recent delay calculation."""
        return self._seasonal_multiplier

    def update_seasonal_multiplier(self) -> float:
        """Recompute the load multiplier for the current instant."""
        self._seasonal_multiplier = seasonal_multiplier(self._now())
        return self._seasonal_multiplier

    def describe(self) -> Dict[str, Any]:
        """Snapshot of the simulator state for diagnostics."""
        return {
            "pattern": self._current_pattern,
            "config": self._config.model_dump(mode="json"),
            "enabled": self.enabled,
            "debug": self.debug,
            "delay_multiplier": self._delay_multiplier,
            "seasonal_multiplier": self._seasonal_multiplier,
        }

    # ------------------------------------------------------------------
    # Delay primitives
    # ------------------------------------------------------------------

    def compute_delay(self, pattern: Optional[str] = None) -> int:
        """Draw a wait time in milliseconds from the active bounds.

        ``uniform(min, max) x seasonal x uniform(0.9, 1.1)``, rounded and
        never negative. When ``pattern`` is given its bounds are used
        without touching the active configuration.
        """
        if pattern is not None:
            min_delay, max_delay = pattern_bounds(get_pattern(pattern))
        else:
            min_delay, max_delay = self._config.min_delay_ms, self._config.max_delay_ms

        multiplier = self.update_seasonal_multiplier()
        base_delay = min_delay + self._rng.random() * (max_delay - min_delay)
        jitter = 0.9 + self._rng.random() * 0.2
        return max(0, round(base_delay * multiplier * jitter))

    async def delay(
        self,
        custom_delay_ms: Optional[float] = None,
        pattern: Optional[str] = None,
    ) -> None:
        """Wait for a custom duration or one drawn from the active bounds."""
        wait_ms = custom_delay_ms if custom_delay_ms is not None else self.compute_delay(pattern)
        await self._sleep_ms(wait_ms)

    async def _sleep_ms(self, milliseconds: float) -> None:
        if not self.enabled:
            return
        await self._sleep(max(0.0, milliseconds) * self._delay_multiplier / 1000.0)

    def _should_fail(self, probability: float) -> bool:
        return self.enabled and self._rng.random() < probability

    def _error(self, error_type: Union[str, ErrorType], message: Optional[str] = None) -> SimulationError:
        error = generate_simulation_error(error_type, message, rng=self._rng)
        self.log_debug("Injected %s failure %s: %s", error.type.value, error.code, error.message)
        return error

    def log_debug(self, message: str, *args: Any) -> None:
        logger.log(logging.INFO if self.debug else logging.DEBUG, message, *args)

    # ------------------------------------------------------------------
    # Simulated operations
    # ------------------------------------------------------------------

    async def simulate_operation(
        self,
        operation: Operation[T],
        error_type: Union[str, ErrorType] = ErrorType.NETWORK,
        *,
        error_rate: Optional[float] = None,
    ) -> T:
        """Delay, then either inject a failure or run ``operation``.

        Args:
            operation: Sync or async zero-argument callable.
            error_type: Category of the injected failure.
            error_rate: Per-call override of the configured error rate.

        Raises:
            SimulationError: With probability ``error_rate``; ``operation``
                is not invoked in that case.
        """
        rate = self._config.error_rate if error_rate is None else error_rate
        await self.delay()
        if self._should_fail(rate):
            raise self._error(error_type)
        return await call_operation(operation)

    async def simulate_file_upload(
        self,
        file: Union[UploadFile, Mapping[str, Any]],
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        """Report upload progress in ten equal steps.

        ``on_progress`` receives 0, 10, ..., 100. Past the halfway mark each
        step may fail with twice the configured error rate.
        """
        upload = _coerce_upload(file)
        step_delay = self.compute_delay() / UPLOAD_STEPS
        failure_rate = min(1.0, self._config.error_rate * 2)
        self.log_debug("Uploading %s (%d bytes)", upload.name, upload.size)

        for step in range(UPLOAD_STEPS + 1):
            await self._sleep_ms(step_delay)
            if on_progress is not None:
                on_progress(step * 100 // UPLOAD_STEPS)
            if step > UPLOAD_FAILURE_AFTER_STEP and self._should_fail(failure_rate):
                raise self._error(ErrorType.UPLOAD)

    async def simulate_processing(
        self,
        steps: Sequence[str],
        on_step_update: Optional[StepCallback] = None,
    ) -> None:
        """Run each named step through twenty timed sub-steps.

        ``on_step_update`` receives ``(step_index, percent)``. Past sub-step
        ten each sub-step may fail with the configured error rate.
        """
        for index, step in enumerate(steps):
            duration = self._rng.uniform(PROCESSING_STEP_MIN_MS, PROCESSING_STEP_MAX_MS)
            sub_delay = duration / PROCESSING_SUB_STEPS
            for sub_step in range(PROCESSING_SUB_STEPS + 1):
                await self._sleep_ms(sub_delay)
                if on_step_update is not None:
                    on_step_update(index, sub_step * 100 // PROCESSING_SUB_STEPS)
                if sub_step > PROCESSING_FAILURE_AFTER_SUB_STEP and self._should_fail(
                    self._config.error_rate
                ):
                    raise self._error(ErrorType.PROCESSING, f"Processing failed at step '{step}'")

    async def simulate_download(
        self,
        file_type: str,
        size_bytes: int = DEFAULT_DOWNLOAD_SIZE,
    ) -> str:
        """Prepare a synthetic download and return its locator.

        Preparation takes ``size_bytes / 1000`` ms, clamped to [500, 3000].
        """
        if file_type not in DOWNLOAD_FILE_TYPES:
            raise SimulationConfigError(
                f"Unsupported download type '{file_type}'. "
                f"Valid options: {', '.join(sorted(DOWNLOAD_FILE_TYPES))}",
                field="file_type",
                value=file_type,
            )
        preparation_ms = min(DOWNLOAD_MAX_MS, max(DOWNLOAD_MIN_MS, size_bytes / 1000))
        await self.delay(preparation_ms)

        if self._should_fail(self._config.error_rate):
            raise self._error(ErrorType.DOWNLOAD)

        token = "".join(self._rng.choice(_TOKEN_ALPHABET) for _ in range(9))
        return f"blob:{self.download_origin}/{token}.{file_type}"

    async def simulate_auth(self, email: str, password: str, kind: str = "login") -> None:
        """Simulate an authentication round-trip.

        Logins additionally fail 5% of the time with a fixed
        "Invalid credentials" message.
        """
        if kind not in AUTH_KINDS:
            raise SimulationConfigError(
                f"Unknown auth kind '{kind}'", field="kind", value=kind
            )
        await self.delay(AUTH_MIN_MS + self._rng.random() * AUTH_SPREAD_MS)

        if kind == "login" and self._should_fail(LOGIN_FAILURE_RATE):
            raise self._error(ErrorType.AUTH, "Invalid credentials")
        if self._should_fail(self._config.error_rate):
            raise self._error(ErrorType.AUTH)

    async def simulate_email_send(self, kind: str = "forgot-password") -> None:
        """Simulate sending a notification email at half the configured error rate."""
        if kind not in EMAIL_KINDS:
            raise SimulationConfigError(
                f"Unknown email kind '{kind}'", field="kind", value=kind
            )
        await self.delay(EMAIL_MIN_MS + self._rng.random() * EMAIL_SPREAD_MS)

        if self._should_fail(self._config.error_rate * 0.5):
            raise self._error(ErrorType.NETWORK, "Failed to send email")

    async def simulate_api_call(
        self,
        operation: Operation[T],
        error_type: Union[str, ErrorType] = ErrorType.NETWORK,
    ) -> T:
        return await self.simulate_operation(operation, error_type)

    async def simulate_form_submission(
        self,
        form_data: Any,
        operation: Callable[[Any], Union[T, Awaitable[T]]],
    ) -> T:
        return await self.simulate_operation(lambda: operation(form_data), ErrorType.VALIDATION)

    async def simulate_data_fetch(self, fetcher: Operation[T]) -> T:
        return await self.simulate_operation(fetcher, ErrorType.NETWORK)


# Module-level singleton
_simulation_manager: Optional[SimulationManager] = None
_simulation_manager_lock = threading.Lock()


def get_simulation_manager() -> SimulationManager:
    """Get the process-wide SimulationManager instance.

    Thread-safe via double-checked locking.
    """
    global _simulation_manager
    if _simulation_manager is None:
        with _simulation_manager_lock:
            if _simulation_manager is None:
                _simulation_manager = SimulationManager()
    return _simulation_manager


def set_simulation_manager(manager: SimulationManager) -> None:
    """Install ``manager`` as the process-wide instance."""
    global _simulation_manager
    with _simulation_manager_lock:
        _simulation_manager = manager


def reset_simulation_manager_for_testing() -> None:
    """Reset the singleton manager for test isolation."""
    global _simulation_manager
    with _simulation_manager_lock:
        _simulation_manager = SimulationManager()
