"""Tests for the pattern and network-condition registry."""

import pytest
from pydantic import ValidationError

from resilience_sim.core.errors import SimulationConfigError
from resilience_sim.core.simulation.models import NetworkCondition, SimulationPattern
from resilience_sim.core.simulation.registry import (
    DEFAULT_PATTERN,
    SIMULATION_PATTERNS,
    get_available_patterns,
    get_network_preset,
    get_pattern,
    parse_network_condition,
    pattern_bounds,
    register_pattern,
)


class TestPatternCatalog:
    """Tests for the built-in patterns."""

    @pytest.mark.parametrize(
        "key,base_delay,variability,error_rate",
        [
            ("instant", 100, 0.2, 0.001),
            ("fast", 300, 0.5, 0.01),
            ("normal", 800, 0.8, 0.02),
            ("slow", 2000, 1.2, 0.05),
            ("heavy", 5000, 2.0, 0.08),
        ],
    )
    def test_builtin_values(self, key, base_delay, variability, error_rate):
        """Each built-in pattern carries its published constants."""
        pattern = get_pattern(key)
        assert pattern.key == key
        assert pattern.base_delay_ms == base_delay
        assert pattern.variability == variability
        assert pattern.error_rate == error_rate

    def test_default_is_normal(self):
        assert DEFAULT_PATTERN == "normal"

    def test_unknown_pattern_raises(self):
        """Unknown names are a configuration error, also catchable as ValueError."""
        with pytest.raises(SimulationConfigError) as exc_info:
            get_pattern("glacial")
        assert isinstance(exc_info.value, ValueError)
        assert exc_info.value.field == "pattern"
        assert exc_info.value.value == "glacial"

    def test_available_patterns_is_a_copy(self):
        patterns = get_available_patterns()
        patterns.pop("normal")
        assert "normal" in SIMULATION_PATTERNS

    def test_patterns_are_immutable(self):
        with pytest.raises(ValidationError):
            get_pattern("fast").error_rate = 0.5


class TestPatternBounds:
    """Tests for pattern_bounds."""

    def test_normal_bounds(self):
        assert pattern_bounds(get_pattern("normal")) == pytest.approx((400, 1440))

    def test_zero_variability_keeps_base_as_max(self):
        pattern = SimulationPattern(
            key="flat", name="Flat", base_delay_ms=1000, variability=0, error_rate=0
        )
        assert pattern_bounds(pattern) == (500, 1000)


class TestRegisterPattern:
    """Tests for register_pattern."""

    @pytest.fixture
    def custom_pattern(self):
        pattern = SimulationPattern(
            key="sluggish", name="Sluggish", base_delay_ms=3000, variability=1.0, error_rate=0.03
        )
        yield pattern
        SIMULATION_PATTERNS.pop("sluggish", None)

    def test_register_new_pattern(self, custom_pattern):
        register_pattern(custom_pattern)
        assert get_pattern("sluggish") is custom_pattern

    def test_duplicate_key_rejected(self, custom_pattern):
        register_pattern(custom_pattern)
        with pytest.raises(SimulationConfigError):
            register_pattern(custom_pattern)

    def test_replace_allows_overwrite(self, custom_pattern):
        register_pattern(custom_pattern)
        replacement = custom_pattern.model_copy(update={"error_rate": 0.5})
        register_pattern(replacement, replace=True)
        assert get_pattern("sluggish").error_rate == 0.5


class TestNetworkConditions:
    """Tests for network condition presets."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("fast", {"min_delay_ms": 200, "max_delay_ms": 800, "error_rate": 0.01}),
            ("slow", {"min_delay_ms": 1000, "max_delay_ms": 3000, "error_rate": 0.05}),
            ("unstable", {"min_delay_ms": 500, "max_delay_ms": 5000, "error_rate": 0.1}),
        ],
    )
    def test_presets(self, name, expected):
        assert get_network_preset(name) == expected

    def test_parse_accepts_enum(self):
        assert parse_network_condition(NetworkCondition.SLOW) is NetworkCondition.SLOW

    def test_unknown_condition_raises(self):
        with pytest.raises(SimulationConfigError) as exc_info:
            parse_network_condition("satellite")
        assert exc_info.value.field == "network_condition"
