"""Tests for error classification."""

import random
import re

import pytest

from resilience_sim.core.errors import (
    NON_RETRYABLE_TYPES,
    RETRYABLE_TYPES,
    ErrorType,
    SimulationError,
)
from resilience_sim.core.simulation.classifier import (
    ERROR_MESSAGES,
    generate_simulation_error,
    is_retryable,
    resolve_error_type,
    to_simulation_error,
)


class TestErrorType:
    """Tests for the retryable verdict of each category."""

    def test_validation_and_auth_are_not_retryable(self):
        assert NON_RETRYABLE_TYPES == {ErrorType.VALIDATION, ErrorType.AUTH}
        assert not ErrorType.VALIDATION.retryable
        assert not ErrorType.AUTH.retryable

    def test_remaining_types_are_retryable(self):
        assert RETRYABLE_TYPES == {
            ErrorType.NETWORK,
            ErrorType.PROCESSING,
            ErrorType.UPLOAD,
            ErrorType.DOWNLOAD,
        }
        assert all(t.retryable for t in RETRYABLE_TYPES)


class TestGenerateSimulationError:
    """Tests for generate_simulation_error."""

    @pytest.mark.parametrize("error_type", list(ErrorType))
    def test_message_drawn_from_pool(self, error_type):
        error = generate_simulation_error(error_type, rng=random.Random(7))
        assert error.type is error_type
        assert error.message in ERROR_MESSAGES[error_type]
        assert error.retryable is error_type.retryable

    def test_every_pool_has_four_messages(self):
        assert all(len(messages) == 4 for messages in ERROR_MESSAGES.values())

    def test_code_format(self):
        error = generate_simulation_error("upload", rng=random.Random(3))
        assert re.fullmatch(r"SIM_UPLOAD_\d{1,3}", error.code)

    def test_custom_message_overrides_pool(self):
        error = generate_simulation_error(ErrorType.AUTH, "Invalid credentials")
        assert error.message == "Invalid credentials"
        assert str(error) == "Invalid credentials"
        assert error.retryable is False

    def test_unknown_category_falls_back_to_network(self):
        assert resolve_error_type("cosmic-ray") is ErrorType.NETWORK
        error = generate_simulation_error("cosmic-ray")
        assert error.type is ErrorType.NETWORK

    def test_seeded_rng_is_deterministic(self):
        first = generate_simulation_error("download", rng=random.Random(99))
        second = generate_simulation_error("download", rng=random.Random(99))
        assert (first.message, first.code) == (second.message, second.code)

    def test_to_dict(self):
        error = SimulationError(ErrorType.PROCESSING, "boom", "SIM_PROCESSING_1")
        assert error.to_dict() == {
            "type": "processing",
            "message": "boom",
            "code": "SIM_PROCESSING_1",
            "retryable": True,
        }


class TestToSimulationError:
    """Tests for normalizing arbitrary exceptions."""

    def test_simulation_error_returned_unchanged(self):
        error = generate_simulation_error("validation")
        assert to_simulation_error(error) is error

    def test_plain_exception_becomes_retryable_network_error(self):
        converted = to_simulation_error(RuntimeError("socket closed"))
        assert converted.type is ErrorType.NETWORK
        assert converted.message == "socket closed"
        assert converted.retryable is True
        assert converted.code.startswith("SIM_ERROR_")

    def test_empty_message_gets_placeholder(self):
        assert to_simulation_error(RuntimeError()).message == "Unknown error"


class TestIsRetryable:
    """Tests for is_retryable."""

    def test_unclassified_errors_are_not_retryable(self):
        assert is_retryable(ValueError("nope")) is False

    def test_truthy_non_bool_is_not_retryable(self):
        error = RuntimeError("odd")
        error.retryable = "yes"
        assert is_retryable(error) is False

    def test_classified_errors_follow_their_flag(self):
        assert is_retryable(generate_simulation_error("network")) is True
        assert is_retryable(generate_simulation_error("auth")) is False
