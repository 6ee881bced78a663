"""
Tests for the search configuration system.
"""

import json
import math

import pytest

from ismcts.config import SearchConfig, get_default_config, get_fast_config


class TestSearchConfig:
    """Tests for SearchConfig."""

    def test_defaults(self):
        config = SearchConfig()

        assert config.exploration_constant == pytest.approx(math.sqrt(2))
        assert config.default_capacity == 500_000
        assert config.time_budget_ms == 1000
        assert config.check_interval == 2048
        assert config.max_simulations is None
        assert config.validate() is True

    def test_dict_round_trip_ignores_unknown_keys(self):
        config = SearchConfig(exploration_constant=0.7, max_simulations=100)
        data = config.to_dict()
        data["unknown_field"] = "ignored"

        loaded = SearchConfig.from_dict(data)

        assert loaded == config

    def test_from_dict_missing_keys_keep_defaults(self):
        loaded = SearchConfig.from_dict({"time_budget_ms": 250})

        assert loaded.time_budget_ms == 250
        assert loaded.exploration_constant == math.sqrt(2)
        assert loaded.max_simulations is None

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "search.json"
        config = SearchConfig(time_budget_ms=250, check_interval=128)

        config.save(str(path))

        assert json.loads(path.read_text())["time_budget_ms"] == 250
        assert SearchConfig.from_file(str(path)) == config

    @pytest.mark.parametrize(
        "field_name, value",
        [
            ("exploration_constant", -0.1),
            ("exploration_constant", float("nan")),
            ("default_capacity", 0),
            ("time_budget_ms", -5),
            ("check_interval", 0),
            ("max_simulations", -1),
        ],
    )
    def test_validate_rejects_invalid_values(self, field_name, value):
        config = SearchConfig(**{field_name: value})
        with pytest.raises(ValueError, match=field_name):
            config.validate()

    def test_str(self):
        text = str(SearchConfig(max_simulations=10))
        assert "Search Configuration" in text
        assert "max simulations 10" in text
        assert "unlimited" in str(SearchConfig())

    def test_fast_config(self):
        config = get_fast_config()
        assert config.validate() is True
        assert config.time_budget_ms < get_default_config().time_budget_ms
        assert config.default_capacity < get_default_config().default_capacity
