"""SimulationService: composition of simulator, retry, breaker and monitor.

``execute_operation`` is the single place where a simulated operation is
timed, optionally retried, optionally shed by a per-operation circuit
breaker, reported to a notifier, and recorded as an error when it fails.
The specialized ``simulate_*`` methods are presets over it.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Literal,
    Mapping,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

from resilience_sim.core.observability.audit import audit_log
from resilience_sim.core.observability.monitor import (
    OperationMetricView,
    OperationMonitor,
    get_operation_monitor,
)
from resilience_sim.core.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerSnapshot,
)
from resilience_sim.core.resilience.retry import RetryConfig, with_retry
from resilience_sim.core.simulation.manager import (
    DEFAULT_DOWNLOAD_SIZE,
    ProgressCallback,
    SimulationManager,
    StepCallback,
    UploadFile,
    call_operation,
    get_simulation_manager,
)
from resilience_sim.core.simulation.models import SimulationPattern, SleepFunc

logger = logging.getLogger(__name__)

T = TypeVar("T")

NotifyLevel = Literal["loading", "success", "error"]
Notifier = Callable[[NotifyLevel, str], None]

DEFAULT_ERROR_MESSAGE = "Operation failed"
REPORT_BASE_MS = 1000.0
REPORT_PER_FILTER_MS = 500.0
USER_OPERATION_KINDS = frozenset({"create", "update", "delete"})

_USER_OPERATION_VERBS = {
    "create": ("Creating", "created", "create"),
    "update": ("Updating", "updated", "update"),
    "delete": ("Deleting", "deleted", "delete"),
}


@dataclass(frozen=True)
class OperationMessages:
    """User-facing messages for the stages of one operation."""

    loading: Optional[str] = None
    success: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class OperationOptions:
    """How ``execute_operation`` wraps an operation.

    Attributes:
        operation_name: Key for monitoring and for the circuit breaker map.
        pattern: Pattern to switch the simulator to before running.
        use_retry: Retry retryable failures with exponential backoff.
        use_circuit_breaker: Route the call through the breaker for
            ``operation_name``.
        notify: Deliver ``messages`` to the service notifier.
        messages: Loading, success and error messages.
    """

    operation_name: str
    pattern: Optional[str] = None
    use_retry: bool = True
    use_circuit_breaker: bool = False
    notify: bool = False
    messages: OperationMessages = field(default_factory=OperationMessages)


class SimulationService:
    """Facade running simulated operations with the full resilience stack.

    Args:
        manager: Simulator shared by every operation (default: process-wide).
        monitor: Metrics sink (default: process-wide).
        notifier: Receives ``(level, message)`` for operations with ``notify``.
        retry_config: Retry policy for operations with ``use_retry``.
        rng: Random source for retry jitter.
        sleep_func: Async sleep used for retry backoff.
        wall_clock: Epoch seconds used for report identifiers.
    """

    def __init__(
        self,
        manager: Optional[SimulationManager] = None,
        *,
        monitor: Optional[OperationMonitor] = None,
        notifier: Optional[Notifier] = None,
        retry_config: Optional[RetryConfig] = None,
        rng: Optional[random.Random] = None,
        sleep_func: Optional[SleepFunc] = None,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self.manager = manager or get_simulation_manager()
        self.monitor = monitor or get_operation_monitor()
        self.notifier = notifier
        self.retry_config = retry_config or RetryConfig()
        self._rng = rng
        self._sleep = sleep_func
        self._wall_clock = wall_clock
        self._circuit_breakers: Dict[str, CircuitBreaker] = {}

    def initialize(self, environment: str = "production") -> None:
        """Apply the default pattern for ``environment``.

        ``development`` selects the fast pattern and turns on debug logging;
        anything else selects the normal pattern.
        """
        if environment == "development":
            self.manager.set_pattern("fast")
            self.manager.debug = True
        else:
            self.manager.set_pattern("normal")
        self.manager.update_seasonal_multiplier()
        self.manager.log_debug("Simulation service initialized (%s)", environment)

    def _get_circuit_breaker(self, operation_name: str) -> CircuitBreaker:
        breaker = self._circuit_breakers.get(operation_name)
        if breaker is None:
            breaker = CircuitBreaker(name=operation_name)
            self._circuit_breakers[operation_name] = breaker
        return breaker

    def _notify(self, options: OperationOptions, level: NotifyLevel, message: Optional[str]) -> None:
        if not options.notify or self.notifier is None or not message:
            return
        try:
            self.notifier(level, message)
        except Exception as e:
            logger.debug("Notifier failed for %s: %s", options.operation_name, e)

    async def execute_operation(
        self,
        operation: Callable[[], Union[T, Awaitable[T]]],
        options: OperationOptions,
    ) -> T:
        """Run ``operation`` after a simulated delay, wrapped per ``options``.

        With both retry and breaker enabled, the breaker sees the retried
        call as one attempt.

        Raises:
            SimulationError: Injected failures, after retries are exhausted.
            CircuitBreakerError: When the operation's breaker is open.
        """
        name = options.operation_name
        if options.pattern:
            self.manager.set_pattern(options.pattern)

        end_monitoring = self.monitor.start_operation(name)
        self._notify(options, "loading", options.messages.loading)

        async def simulated() -> T:
            await self.manager.delay()
            return await call_operation(operation)

        async def retried() -> T:
            return await with_retry(
                simulated, self.retry_config, rng=self._rng, sleep_func=self._sleep
            )

        runner = retried if options.use_retry else simulated
        try:
            if options.use_circuit_breaker:
                result = await self._get_circuit_breaker(name).execute(runner)
            else:
                result = await runner()
        except Exception as e:
            end_monitoring()
            self.monitor.record_error(name)
            self._notify(options, "error", options.messages.error or DEFAULT_ERROR_MESSAGE)
            audit_log("operation_failed", subject=name, error_type=type(e).__name__, error=str(e))
            self.manager.log_debug("Operation %s failed: %s", name, e)
            raise

        end_monitoring()
        self._notify(options, "success", options.messages.success)
        self.manager.log_debug("Operation %s completed successfully", name)
        return result

    # ------------------------------------------------------------------
    # Specialized operations
    # ------------------------------------------------------------------

    async def simulate_auth(self, email: str, password: str, kind: str = "login") -> None:
        is_login = kind == "login"
        return await self.execute_operation(
            lambda: self.manager.simulate_auth(email, password, kind),
            OperationOptions(
                operation_name=f"auth_{kind}",
                pattern="normal",
                use_retry=True,
                notify=True,
                messages=OperationMessages(
                    loading="Signing in..." if is_login else "Processing...",
                    success="Signed in successfully" if is_login else "Operation completed",
                    error="Authentication error",
                ),
            ),
        )

    async def simulate_data_fetch(
        self,
        fetcher: Callable[[], Union[T, Awaitable[T]]],
        operation_name: str = "data_fetch",
    ) -> T:
        return await self.execute_operation(
            fetcher,
            OperationOptions(
                operation_name=operation_name,
                pattern="fast",
                use_retry=True,
                use_circuit_breaker=True,
            ),
        )

    async def simulate_file_upload(
        self,
        file: Union[UploadFile, Mapping[str, Any]],
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        file_name = file.name if isinstance(file, UploadFile) else str(file["name"])
        return await self.execute_operation(
            lambda: self.manager.simulate_file_upload(file, on_progress),
            OperationOptions(
                operation_name="file_upload",
                pattern="slow",
                use_retry=True,
                notify=True,
                messages=OperationMessages(
                    loading=f"Uploading {file_name}...",
                    success=f"{file_name} uploaded successfully",
                    error=f"Failed to upload {file_name}",
                ),
            ),
        )

    async def simulate_processing(
        self,
        steps: Sequence[str],
        on_step_update: Optional[StepCallback] = None,
    ) -> None:
        # Long-running processing is not retried.
        return await self.execute_operation(
            lambda: self.manager.simulate_processing(steps, on_step_update),
            OperationOptions(
                operation_name="data_processing",
                pattern="heavy",
                use_retry=False,
                notify=True,
                messages=OperationMessages(
                    loading="Processing data...",
                    success="Processing completed",
                    error="Processing error",
                ),
            ),
        )

    async def simulate_download(
        self,
        file_type: str,
        size_bytes: int = DEFAULT_DOWNLOAD_SIZE,
    ) -> str:
        label = file_type.upper()
        return await self.execute_operation(
            lambda: self.manager.simulate_download(file_type, size_bytes),
            OperationOptions(
                operation_name="file_download",
                pattern="normal",
                use_retry=True,
                notify=True,
                messages=OperationMessages(
                    loading=f"Preparing {label} download...",
                    success=f"{label} download ready",
                    error=f"Failed to generate {label} file",
                ),
            ),
        )

    async def simulate_email_send(
        self,
        kind: str = "forgot-password",
        recipient: Optional[str] = None,
    ) -> None:
        return await self.execute_operation(
            lambda: self.manager.simulate_email_send(kind),
            OperationOptions(
                operation_name="email_send",
                pattern="normal",
                use_retry=True,
                notify=True,
                messages=OperationMessages(
                    loading="Sending email...",
                    success=f"Email sent to {recipient}" if recipient else "Email sent successfully",
                    error="Failed to send email",
                ),
            ),
        )

    async def simulate_form_submission(
        self,
        form_data: Any,
        operation: Callable[[Any], Union[T, Awaitable[T]]],
        operation_name: str = "form_submit",
    ) -> T:
        # Form submissions are never retried automatically.
        return await self.execute_operation(
            lambda: operation(form_data),
            OperationOptions(
                operation_name=operation_name,
                pattern="normal",
                use_retry=False,
                notify=True,
                messages=OperationMessages(
                    loading="Saving...",
                    success="Data saved successfully",
                    error="Failed to save data",
                ),
            ),
        )

    async def simulate_user_operation(
        self,
        operation: Callable[[], Union[T, Awaitable[T]]],
        kind: str,
        user_name: Optional[str] = None,
    ) -> T:
        """Run a user-management operation; deletes are never retried."""
        if kind not in USER_OPERATION_KINDS:
            raise ValueError(
                f"Unknown user operation '{kind}'. "
                f"Valid options: {', '.join(sorted(USER_OPERATION_KINDS))}"
            )
        progressive, past, verb = _USER_OPERATION_VERBS[kind]
        subject = f"User {user_name}" if user_name else "User"
        return await self.execute_operation(
            operation,
            OperationOptions(
                operation_name=f"user_{kind}",
                pattern="normal",
                use_retry=kind != "delete",
                notify=True,
                messages=OperationMessages(
                    loading=f"{progressive} user...",
                    success=f"{subject} {past} successfully",
                    error=f"Failed to {verb} user",
                ),
            ),
        )

    async def simulate_report_generation(
        self,
        report_type: str,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Generate a report whose preparation time grows with its filters."""
        complexity = len(filters) if filters else 1

        async def generate() -> Dict[str, Any]:
            await self.manager.delay(REPORT_BASE_MS + complexity * REPORT_PER_FILTER_MS)
            return {"success": True, "report_id": f"report_{int(self._wall_clock() * 1000)}"}

        return await self.execute_operation(
            generate,
            OperationOptions(
                operation_name="report_generation",
                pattern="slow",
                use_retry=True,
                notify=True,
                messages=OperationMessages(
                    loading=f"Generating {report_type} report...",
                    success="Report generated successfully",
                    error="Failed to generate report",
                ),
            ),
        )

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------

    def get_operation_metrics(
        self, operation_name: Optional[str] = None
    ) -> Union[Optional[OperationMetricView], Dict[str, OperationMetricView]]:
        return self.monitor.get_metrics(operation_name)

    def reset_metrics(self, operation_name: Optional[str] = None) -> None:
        self.monitor.reset(operation_name)

    def get_circuit_breaker_status(self, operation_name: str) -> Optional[CircuitBreakerSnapshot]:
        """Snapshot of the breaker for ``operation_name``, or None if it never ran."""
        breaker = self._circuit_breakers.get(operation_name)
        return breaker.get_state() if breaker else None

    def reset_circuit_breaker(self, operation_name: str) -> None:
        breaker = self._circuit_breakers.get(operation_name)
        if breaker is not None:
            breaker.reset()

    def set_simulation_pattern(self, pattern: str) -> None:
        self.manager.set_pattern(pattern)

    def get_available_patterns(self) -> Dict[str, SimulationPattern]:
        return self.manager.get_available_patterns()

    def set_delay_multiplier(self, multiplier: float) -> float:
        """Scale every simulated wait; returns the clamped value in effect."""
        self.manager.delay_multiplier = multiplier
        self.manager.log_debug("Delay multiplier set to: %s", self.manager.delay_multiplier)
        return self.manager.delay_multiplier

    def enable_debug_mode(self) -> None:
        self.manager.debug = True

    def disable_debug_mode(self) -> None:
        self.manager.debug = False
