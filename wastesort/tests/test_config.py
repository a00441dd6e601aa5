"""
Tests for session configuration.

Tests:
- Defaults
- Validation collects every error
- Environment overrides
- Default recycling config factory
"""

import pytest

from ..engine_core.errors import ConfigurationError
from ..engine_core.state import Bin, BinType, Category
from ..games.recycling import COMPOST_BIN, DEFAULT_BINS, create_default_config
from ..session import SessionConfig, SpawnMode


class TestDefaults:
    """Tests for the default configuration."""

    def test_defaults(self):
        config = SessionConfig()
        assert config.mode == SpawnMode.SINGLE_SLOT
        assert config.session_duration_seconds == 60
        assert config.pool_capacity == 10
        assert config.pool_low_water_mark == 10
        assert config.refill_batch_size == 2
        assert config.refill_interval_seconds == 3.0
        assert config.initial_pool_size == 8
        assert config.replacement_delay_seconds == 0.5
        assert config.categories == frozenset(Category)
        assert config.bins == DEFAULT_BINS
        assert config.points_per_correct == 100

    def test_defaults_validate(self):
        """The default config is playable."""
        rule_table = SessionConfig().validate()
        assert rule_table.bin_types == [b.bin_type for b in DEFAULT_BINS]

    def test_mode_from_string(self):
        assert SessionConfig(mode="pool").is_pool

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError) as exc_info:
            SessionConfig(mode="conveyor")
        assert exc_info.value.errors == ["Unknown mode 'conveyor'"]

    def test_category_names_coerced(self):
        """Category names in any iterable become Category members."""
        config = SessionConfig(categories=frozenset({"plastic", Category.GLASS}))
        assert config.categories == frozenset({Category.PLASTIC, Category.GLASS})
        config.validate()

    def test_unknown_category(self):
        with pytest.raises(ConfigurationError) as exc_info:
            SessionConfig(mode="conveyor", categories=frozenset({"bogus"}))
        assert exc_info.value.errors == [
            "Unknown mode 'conveyor'",
            "Unknown category 'bogus'",
        ]

    def test_with_overrides_ignores_none(self):
        config = SessionConfig().with_overrides(session_duration_seconds=30, pool_capacity=None)
        assert config.session_duration_seconds == 30
        assert config.pool_capacity == 10

    def test_to_dict(self):
        data = SessionConfig(categories={Category.PAPER}).to_dict()
        assert data["mode"] == "single_slot"
        assert data["categories"] == ["paper"]
        assert data["bins"][1] == {"bin_type": "compost", "accepted_categories": ["organic"]}


class TestValidation:
    """Tests for SessionConfig.validate."""

    def test_collects_all_errors(self):
        """Every problem is reported at once."""
        config = SessionConfig(
            mode="pool",
            session_duration_seconds=0,
            pool_capacity=4,
            pool_low_water_mark=6,
            refill_interval_seconds=0,
            points_per_correct=-1,
        )
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()
        errors = exc_info.value.errors
        assert "session_duration_seconds must be >= 1" in errors
        assert "pool_low_water_mark must be <= pool_capacity" in errors
        assert "refill_interval_seconds must be > 0" in errors
        assert "points_per_correct must be >= 0" in errors

    def test_pool_fields_ignored_in_single_slot(self):
        SessionConfig(pool_capacity=0, refill_batch_size=0).validate()

    def test_category_without_bin(self):
        config = SessionConfig(bins=(COMPOST_BIN,), categories={Category.ORGANIC, Category.GLASS})
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()
        assert exc_info.value.errors == ["Category 'glass' is not accepted by any bin"]

    def test_unused_bin_is_fine(self):
        """Bins may accept categories that are not spawned."""
        SessionConfig(categories={Category.ORGANIC}).validate()

    def test_duplicate_bins(self):
        config = SessionConfig(bins=DEFAULT_BINS + (Bin(BinType.LANDFILL),))
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()
        assert "Duplicate bin type 'landfill'" in exc_info.value.errors

    def test_empty_content(self):
        config = SessionConfig(categories=frozenset(), bins=())
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()
        assert "At least one category is required" in exc_info.value.errors
        assert "At least one bin is required" in exc_info.value.errors

    def test_error_message_lists_problems(self):
        error = ConfigurationError(["a", "b"])
        assert str(error) == "Invalid configuration (2 error(s)): a; b"


class TestFromEnv:
    """Tests for environment overrides."""

    def test_no_env_gives_defaults(self, monkeypatch):
        for name in ("MODE", "SESSION_DURATION", "CATEGORIES"):
            monkeypatch.delenv(f"WASTESORT_{name}", raising=False)
        assert SessionConfig.from_env() == SessionConfig()

    def test_reads_values(self, monkeypatch):
        monkeypatch.setenv("WASTESORT_MODE", "pool")
        monkeypatch.setenv("WASTESORT_SESSION_DURATION", "45")
        monkeypatch.setenv("WASTESORT_REFILL_INTERVAL", "2.5")
        monkeypatch.setenv("WASTESORT_CATEGORIES", "Plastic, organic")
        config = SessionConfig.from_env()
        assert config.mode == SpawnMode.POOL
        assert config.session_duration_seconds == 45
        assert config.refill_interval_seconds == 2.5
        assert config.categories == frozenset({Category.PLASTIC, Category.ORGANIC})

    def test_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("GAME_POINTS_PER_CORRECT", "10")
        assert SessionConfig.from_env(prefix="GAME_").points_per_correct == 10

    def test_bad_values(self, monkeypatch):
        monkeypatch.setenv("WASTESORT_POOL_CAPACITY", "lots")
        monkeypatch.setenv("WASTESORT_CATEGORIES", "plastic,styrofoam")
        with pytest.raises(ConfigurationError) as exc_info:
            SessionConfig.from_env()
        assert len(exc_info.value.errors) == 2


class TestDefaultConfigFactory:
    """Tests for create_default_config."""

    def test_single_slot(self):
        config = create_default_config()
        assert config.mode == SpawnMode.SINGLE_SLOT

    def test_pool_with_overrides(self):
        config = create_default_config("pool", random_seed=7, pool_capacity=12)
        assert config.is_pool
        assert config.random_seed == 7
        assert config.pool_capacity == 12

    def test_invalid_override(self):
        with pytest.raises(ConfigurationError):
            create_default_config(session_duration_seconds=-5)

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError) as exc_info:
            create_default_config(mode="conveyor")
        assert exc_info.value.errors == ["Unknown mode 'conveyor'"]
