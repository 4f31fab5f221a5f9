"""Tests for rng.py and game_profile.py"""

import json
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from handset_sim.services.rng import SeedBundle, derive_seed, make_rng, sample_subset
from handset_sim.services.game_profile import (
    ConfigurationError, Difficulty, DIFFICULTY_ORDER, SEGMENTS,
    load_profile, load_profile_file, preset_dict
)


class TestSeedDerivation:
    """Tests for per-subsystem seed fan-out."""

    def test_same_inputs_same_seed(self):
        """Seeds are a pure function of (root, round, subsystem)."""
        assert derive_seed("game-1", 3, "economy") == derive_seed("game-1", 3, "economy")

    def test_subsystems_are_independent(self):
        """Different subsystems, rounds and roots never share a seed."""
        seeds = {
            derive_seed("game-1", 3, "economy"),
            derive_seed("game-1", 3, "tariffs"),
            derive_seed("game-1", 4, "economy"),
            derive_seed("game-2", 3, "economy"),
        }
        assert len(seeds) == 4

    def test_stream_order_does_not_matter(self):
        """Drawing from one stream first leaves the others untouched."""
        a = SeedBundle.for_round("game-1", 2)
        b = SeedBundle.for_round("game-1", 2)

        for _ in range(50):
            a.economy.random()
        assert a.tariffs.random() == b.tariffs.random()

    def test_team_streams(self):
        """Each team gets its own reproducible stream."""
        bundle = SeedBundle.for_round("game-1", 1)
        first = bundle.for_team("supply_chain", "alpha").random()
        other = bundle.for_team("supply_chain", "beta").random()
        again = make_rng("game-1", 1, "supply_chain:alpha").random()

        assert first == again
        assert first != other

    def test_bundle_records_seeds(self):
        """The audit dict lists every stream that was created."""
        bundle = SeedBundle.for_round("game-1", 1)
        bundle.for_team("supply_chain", "alpha")
        data = bundle.to_dict()

        assert data["root_seed"] == "game-1"
        assert data["round_number"] == 1
        assert "economy" in data["seeds"]
        assert "supply_chain:alpha" in data["seeds"]

    def test_sample_subset_keeps_order(self):
        """Subsets keep the source ordering and respect the size bounds."""
        items = ["a", "b", "c", "d", "e"]
        rng = make_rng("subset", 1, "general")
        for _ in range(20):
            chosen = sample_subset(rng, items, 1, 3)
            assert 1 <= len(chosen) <= 3
            assert chosen == [i for i in items if i in chosen]


class TestProfileLoading:
    """Tests for difficulty presets."""

    def test_every_preset_loads(self):
        """All six difficulty presets validate."""
        for difficulty in DIFFICULTY_ORDER:
            profile = load_profile(difficulty)
            assert profile.difficulty == Difficulty(difficulty)
            assert set(SEGMENTS) <= set(profile.segments)

    def test_difficulty_order(self):
        """Difficulties sort sandbox first and nightmare last."""
        assert Difficulty.SANDBOX.order < Difficulty.NORMAL.order < Difficulty.NIGHTMARE.order

    def test_expert_disables_rubber_banding(self):
        """Expert and nightmare play without catch-up help."""
        assert load_profile("normal").rubber_banding.enabled
        assert not load_profile("expert").rubber_banding.enabled
        assert not load_profile("nightmare").rubber_banding.enabled

    def test_overrides_merge(self):
        """Nested overrides replace only the keys they name."""
        profile = load_profile("normal", {"market": {"softmax_temperature": 5.0}})
        assert profile.market.softmax_temperature == 5.0
        assert profile.market.brand_decay_rate == 0.025

    def test_point_multipliers(self):
        """Positive tiers scale with difficulty, infamy does not grow past normal."""
        nightmare = load_profile("nightmare")
        assert nightmare.point_multiplier("gold") == 2.0
        assert nightmare.point_multiplier("infamy") == 1.0
        assert load_profile("sandbox").point_multiplier("infamy") == 0.5


class TestProfileValidation:
    """Tests for profile rejection."""

    def test_unknown_difficulty(self):
        """Unknown presets are a configuration error."""
        with pytest.raises(ConfigurationError):
            preset_dict("impossible")

    def test_weights_must_sum_to_100(self):
        """Segment weights that do not sum to 100 are rejected."""
        overrides = {"segments": {"Budget": {"weights": {"price": 60}}}}
        with pytest.raises(ConfigurationError) as exc:
            load_profile("normal", overrides)
        assert "Budget" in str(exc.value)

    def test_inverted_price_band(self):
        """price_min must sit below price_max."""
        overrides = {"segments": {"General": {"price_min": 700}}}
        with pytest.raises(ConfigurationError):
            load_profile("normal", overrides)

    def test_feature_preferences_sum(self):
        """Feature preferences must sum to 1."""
        overrides = {"segments": {"Enthusiast": {"feature_preferences": {"camera": 0.9}}}}
        with pytest.raises(ConfigurationError):
            load_profile("normal", overrides)

    def test_esg_thresholds(self):
        """ESG high threshold must exceed the mid threshold."""
        with pytest.raises(ConfigurationError):
            load_profile("normal", {"market": {"esg_high_threshold": 300}})

    def test_transition_rows(self):
        """Transition probabilities from a phase must sum to 1."""
        overrides = {"economic_cycle": {"transitions": {"expansion": {"expansion": 0.5, "peak": 0.2}}}}
        with pytest.raises(ConfigurationError):
            load_profile("normal", overrides)

    def test_missing_version(self):
        """A blank version is rejected."""
        with pytest.raises(ConfigurationError):
            load_profile("normal", {"version": " "})

    @pytest.mark.parametrize("cash", [0, -1_000_000])
    def test_starting_cash_must_be_positive(self, cash):
        """A company cannot start the game broke."""
        with pytest.raises(ConfigurationError) as exc:
            load_profile("normal", {"starting": {"cash": cash}})
        assert "starting cash" in str(exc.value)

    def test_configuration_error_is_value_error(self):
        """Callers can catch configuration problems as ValueError."""
        assert issubclass(ConfigurationError, ValueError)


class TestProfileFile:
    """Tests for loading profiles from JSON."""

    def test_load_file(self, tmp_path):
        """A file holds a difficulty plus overrides."""
        path = tmp_path / "profile.json"
        path.write_text(json.dumps({"difficulty": "hard", "starting": {"cash": 123_000_000}}))
        profile = load_profile_file(path)

        assert profile.difficulty == Difficulty.HARD
        assert profile.starting.cash == 123_000_000

    def test_missing_file(self, tmp_path):
        """An unreadable file is a configuration error."""
        with pytest.raises(ConfigurationError):
            load_profile_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Malformed JSON is a configuration error."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_profile_file(path)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
