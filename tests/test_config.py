import pytest
from hypothesis import given, strategies as st

from assetlens.config import PRIMARY_STRATEGIES, AnalysisSettings


class TestAnalysisSettings:
    def test_default_values(self):
        """Test that AnalysisSettings has sensible defaults."""
        settings = AnalysisSettings()
        assert settings.threshold == 0.15
        assert settings.min_size_kb == 1
        assert settings.usage_check is False
        assert settings.primary_strategy == "first-seen"
        assert settings.max_workers is None

    def test_custom_values(self):
        settings = AnalysisSettings(threshold=0.3, min_size_kb=10, usage_check=True, primary_strategy="largest-file", max_workers=2)
        assert settings.validate() is settings
        assert settings.threshold == 0.3
        assert settings.min_size_kb == 10
        assert settings.usage_check is True

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValueError, match="Unknown primary strategy"):
            AnalysisSettings(primary_strategy="prettiest").validate()

    def test_non_positive_workers_rejected(self):
        with pytest.raises(ValueError):
            AnalysisSettings(max_workers=0).validate()


class TestConfigValidation:
    @given(threshold=st.floats(min_value=0.0, max_value=1.0))
    def test_threshold_in_unit_interval_is_valid(self, threshold):
        assert AnalysisSettings(threshold=threshold).validate().threshold == threshold

    @given(threshold=st.one_of(
        st.floats(max_value=-1e-9, allow_nan=False, allow_infinity=False),
        st.floats(min_value=1.0 + 1e-9, allow_nan=False, allow_infinity=False),
    ))
    def test_threshold_outside_unit_interval_is_rejected(self, threshold):
        with pytest.raises(ValueError, match="threshold"):
            AnalysisSettings(threshold=threshold).validate()

    @given(min_size=st.integers(min_value=-1000, max_value=-1))
    def test_negative_min_size_is_rejected(self, min_size):
        with pytest.raises(ValueError, match="min_size_kb"):
            AnalysisSettings(min_size_kb=min_size).validate()

    @given(strategy=st.sampled_from(PRIMARY_STRATEGIES), min_size=st.integers(min_value=0, max_value=10000))
    def test_known_strategies_are_valid(self, strategy, min_size):
        settings = AnalysisSettings(primary_strategy=strategy, min_size_kb=min_size).validate()
        assert settings.primary_strategy == strategy
