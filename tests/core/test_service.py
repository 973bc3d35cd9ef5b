"""Unit tests for SimulationService.

Tests cover:
- execute_operation composition (delay, retry, breaker, monitor, notifier)
- The specialized simulate_* presets and their retry policies
- Utility accessors and environment initialization
"""

import random

import pytest

from resilience_sim.core.errors import (
    CircuitBreakerError,
    ErrorType,
    SimulationConfigError,
    SimulationError,
)
from resilience_sim.core.observability.monitor import get_operation_monitor
from resilience_sim.core.resilience.circuit_breaker import CircuitState
from resilience_sim.core.service import (
    OperationMessages,
    OperationOptions,
    SimulationService,
)
from resilience_sim.core.simulation.manager import UploadFile, get_simulation_manager


class Flaky:
    """Operation that raises ``error`` on every call and counts calls."""

    def __init__(self, error_type=ErrorType.NETWORK):
        self.error = SimulationError(error_type, "simulated", f"SIM_{error_type.value.upper()}_1")
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        raise self.error


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def make_service(make_manager, monitor, fake_sleep, notifications, fixed_random):
    def _make(random_value=0.5):
        manager = make_manager(rng=fixed_random(random_value))
        return SimulationService(
            manager,
            monitor=monitor,
            notifier=lambda level, message: notifications.append((level, message)),
            rng=random.Random(0),
            sleep_func=fake_sleep,
            wall_clock=lambda: 1_700_000_000.5,
        )

    return _make


@pytest.fixture
def service(make_service):
    return make_service()


class TestExecuteOperation:
    """Tests for execute_operation."""

    @pytest.mark.asyncio
    async def test_success(self, service, notifications):
        result = await service.execute_operation(lambda: "value", OperationOptions("lookup"))
        assert result == "value"
        view = service.get_operation_metrics("lookup")
        assert (view.count, view.errors) == (1, 0)
        assert notifications == []

    @pytest.mark.asyncio
    async def test_simulated_delay_precedes_operation(self, service, fake_sleep):
        await service.execute_operation(lambda: None, OperationOptions("lookup"))
        assert len(fake_sleep.calls) == 1

    @pytest.mark.asyncio
    async def test_notifies_loading_and_success(self, service, notifications):
        options = OperationOptions(
            "save",
            notify=True,
            messages=OperationMessages(loading="Saving", success="Saved", error="Failed"),
        )
        await service.execute_operation(lambda: None, options)
        assert notifications == [("loading", "Saving"), ("success", "Saved")]

    @pytest.mark.asyncio
    async def test_retries_then_records_one_error(self, service, notifications):
        operation = Flaky()
        with pytest.raises(SimulationError) as exc_info:
            await service.execute_operation(operation, OperationOptions("sync", notify=True))

        assert exc_info.value is operation.error
        assert operation.calls == 3
        view = service.get_operation_metrics("sync")
        assert (view.count, view.errors) == (1, 1)
        assert notifications == [("error", "Operation failed")]

    @pytest.mark.asyncio
    async def test_without_retry_runs_once(self, service):
        operation = Flaky()
        with pytest.raises(SimulationError):
            await service.execute_operation(operation, OperationOptions("sync", use_retry=False))
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_pattern_switch(self, service):
        await service.execute_operation(lambda: None, OperationOptions("x", pattern="slow"))
        assert service.manager.get_current_pattern().key == "slow"

    @pytest.mark.asyncio
    async def test_unknown_pattern_is_not_monitored(self, service):
        with pytest.raises(SimulationConfigError):
            await service.execute_operation(lambda: None, OperationOptions("x", pattern="glacial"))
        assert service.get_operation_metrics("x") is None

    @pytest.mark.asyncio
    async def test_breaker_opens_after_five_failures(self, service):
        operation = Flaky(ErrorType.VALIDATION)
        options = OperationOptions("orders", use_circuit_breaker=True)
        for _ in range(5):
            with pytest.raises(SimulationError):
                await service.execute_operation(operation, options)

        with pytest.raises(CircuitBreakerError):
            await service.execute_operation(operation, options)

        assert operation.calls == 5
        assert service.get_circuit_breaker_status("orders").state is CircuitState.OPEN
        assert service.get_operation_metrics("orders").errors == 6

        service.reset_circuit_breaker("orders")
        assert service.get_circuit_breaker_status("orders").state is CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_breaker_counts_retried_call_once(self, service):
        operation = Flaky()
        options = OperationOptions("orders", use_retry=True, use_circuit_breaker=True)
        with pytest.raises(SimulationError):
            await service.execute_operation(operation, options)
        assert operation.calls == 3
        assert service.get_circuit_breaker_status("orders").failures == 1

    def test_unknown_breaker(self, service):
        assert service.get_circuit_breaker_status("nothing") is None
        service.reset_circuit_breaker("nothing")

    @pytest.mark.asyncio
    async def test_notifier_errors_are_contained(self, make_manager, monitor, fake_sleep):
        def broken_notifier(level, message):
            raise RuntimeError("toast failed")

        service = SimulationService(
            make_manager(), monitor=monitor, notifier=broken_notifier, sleep_func=fake_sleep
        )
        options = OperationOptions("x", notify=True, messages=OperationMessages(success="ok"))
        assert await service.execute_operation(lambda: 1, options) == 1


class TestSpecializedOperations:
    """Tests for the simulate_* presets."""

    @pytest.mark.asyncio
    async def test_auth(self, service, notifications):
        await service.simulate_auth("a@b.c", "pw")
        assert notifications == [("loading", "Signing in..."), ("success", "Signed in successfully")]
        assert service.get_operation_metrics("auth_login").count == 1
        assert service.manager.get_current_pattern().key == "normal"

    @pytest.mark.asyncio
    async def test_data_fetch(self, service):
        rows = await service.simulate_data_fetch(lambda: [1, 2, 3])
        assert rows == [1, 2, 3]
        assert service.manager.get_current_pattern().key == "fast"
        assert service.get_circuit_breaker_status("data_fetch").state is CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_file_upload(self, service, notifications):
        progress = []
        await service.simulate_file_upload(UploadFile("report.csv", 4096), progress.append)
        assert progress[-1] == 100
        assert len(progress) == 11
        assert ("loading", "Uploading report.csv...") in notifications
        assert service.manager.get_current_pattern().key == "slow"

    @pytest.mark.asyncio
    async def test_processing_is_not_retried(self, make_service, notifications):
        service = make_service(random_value=0.0)
        updates = []
        with pytest.raises(SimulationError) as exc_info:
            await service.simulate_processing(["load"], lambda i, p: updates.append(p))

        assert exc_info.value.type is ErrorType.PROCESSING
        assert len(updates) == 12
        assert service.get_operation_metrics("data_processing").errors == 1
        assert notifications[-1] == ("error", "Processing error")

    @pytest.mark.asyncio
    async def test_download(self, service, notifications):
        locator = await service.simulate_download("pdf", 5000)
        assert locator.endswith(".pdf")
        assert notifications[-1] == ("success", "PDF download ready")

    @pytest.mark.asyncio
    async def test_email_with_recipient(self, service, notifications):
        await service.simulate_email_send("user-created", recipient="ana@example.com")
        assert notifications[-1] == ("success", "Email sent to ana@example.com")

    @pytest.mark.asyncio
    async def test_form_submission_is_not_retried(self, service):
        calls = []

        def submit(data):
            calls.append(data)
            raise SimulationError(ErrorType.NETWORK, "Connection error", "SIM_NETWORK_2")

        with pytest.raises(SimulationError):
            await service.simulate_form_submission({"name": "x"}, submit)
        assert calls == [{"name": "x"}]

    @pytest.mark.asyncio
    async def test_user_delete_is_not_retried(self, service):
        delete = Flaky()
        with pytest.raises(SimulationError):
            await service.simulate_user_operation(delete, "delete", "ana")
        assert delete.calls == 1

        update = Flaky()
        with pytest.raises(SimulationError):
            await service.simulate_user_operation(update, "update")
        assert update.calls == 3

    @pytest.mark.asyncio
    async def test_user_operation_messages(self, service, notifications):
        await service.simulate_user_operation(lambda: None, "create", "ana")
        assert notifications[-1] == ("success", "User ana created successfully")

    @pytest.mark.asyncio
    async def test_unknown_user_operation(self, service):
        with pytest.raises(ValueError):
            await service.simulate_user_operation(lambda: None, "archive")

    @pytest.mark.asyncio
    async def test_report_generation(self, service, fake_sleep):
        report = await service.simulate_report_generation("sales", {"region": "eu", "year": 2024})
        assert report == {"success": True, "report_id": "report_1700000000500"}
        assert 2.0 in fake_sleep.calls

    @pytest.mark.asyncio
    async def test_report_without_filters(self, service, fake_sleep):
        await service.simulate_report_generation("sales")
        assert 1.5 in fake_sleep.calls


class TestUtilities:
    """Tests for the utility accessors."""

    def test_initialize_development(self, service):
        service.initialize("development")
        assert service.manager.get_current_pattern().key == "fast"
        assert service.manager.debug is True

    def test_initialize_production(self, service):
        service.initialize("production")
        assert service.manager.get_current_pattern().key == "normal"
        assert service.manager.debug is False

    def test_set_delay_multiplier_clamps(self, service):
        assert service.set_delay_multiplier(50) == 10.0
        assert service.manager.delay_multiplier == 10.0

    def test_debug_toggles(self, service):
        service.enable_debug_mode()
        assert service.manager.debug
        service.disable_debug_mode()
        assert not service.manager.debug

    def test_patterns(self, service):
        assert set(service.get_available_patterns()) == {"instant", "fast", "normal", "slow", "heavy"}
        service.set_simulation_pattern("heavy")
        assert service.manager.get_current_pattern().key == "heavy"

    @pytest.mark.asyncio
    async def test_reset_metrics(self, service):
        await service.execute_operation(lambda: None, OperationOptions("a"))
        await service.execute_operation(lambda: None, OperationOptions("b"))
        service.reset_metrics("a")
        assert set(service.get_operation_metrics()) == {"b"}
        service.reset_metrics()
        assert service.get_operation_metrics() == {}

    def test_defaults_use_process_wide_instances(self):
        service = SimulationService()
        assert service.manager is get_simulation_manager()
        assert service.monitor is get_operation_monitor()
