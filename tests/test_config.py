"""Tests for settings and the indicator config loader."""

import pytest
from pydantic import ValidationError

from klinechart.config import Settings, get_settings
from klinechart.indicator_config import load_indicator_params
from klinechart.models.config import IndicatorParams


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("KLINECHART_MAX_BARS", raising=False)
        settings = Settings(_env_file=None)
        assert settings.max_bars == 240
        assert settings.ma_periods == [5, 10, 20]
        assert (settings.layout_top, settings.layout_bottom, settings.layout_gap) == (8.0, 88.0, 3.0)
        assert settings.volume_units == "cn"
        assert settings.indicator_config_path is None

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("KLINECHART_MAX_BARS", "120")
        monkeypatch.setenv("KLINECHART_VOLUME_UNITS", "en")
        monkeypatch.setenv("KLINECHART_MA_PERIODS", "[5, 30]")
        settings = Settings(_env_file=None)
        assert settings.max_bars == 120
        assert settings.volume_units == "en"
        assert settings.ma_periods == [5, 30]

    def test_invalid_band(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, layout_top=90.0, layout_bottom=80.0)

    def test_invalid_max_bars(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_bars=0)

    def test_negative_gap(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, layout_gap=-1.0)

    def test_gap_too_large_for_three_panels(self):
        with pytest.raises(ValidationError, match="three panels"):
            Settings(_env_file=None, layout_top=10.0, layout_bottom=14.0, layout_gap=2.0)

    def test_gap_that_fits(self):
        settings = Settings(_env_file=None, layout_top=10.0, layout_bottom=14.0, layout_gap=1.5)
        assert settings.layout_gap == 1.5

    def test_unknown_volume_units(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, volume_units="jp")

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()


class TestIndicatorParams:
    """Tests for IndicatorParams validation."""

    def test_defaults(self):
        params = IndicatorParams()
        assert params.rsi_period == 14
        assert (params.macd_fast, params.macd_slow, params.macd_signal) == (12, 26, 9)
        assert (params.kdj_period, params.kdj_k_smoothing, params.kdj_d_smoothing) == (9, 3, 3)
        assert (params.dma_short, params.dma_long, params.dma_avg) == (10, 50, 10)

    def test_ma_periods_sorted_unique(self):
        assert IndicatorParams(ma_periods=[20, 5, 20]).ma_periods == [5, 20]

    @pytest.mark.parametrize("periods", [[], [0, 5], [-3]])
    def test_bad_ma_periods(self, periods):
        with pytest.raises(ValidationError):
            IndicatorParams(ma_periods=periods)

    def test_non_positive_period(self):
        with pytest.raises(ValidationError):
            IndicatorParams(rsi_period=0)


class TestLoadIndicatorParams:
    """Tests for the YAML loader."""

    def test_from_file(self, tmp_path):
        path = tmp_path / "indicators.yaml"
        path.write_text("ma_periods: [5, 10, 20, 60]\nrsi_period: 6\n", encoding="utf-8")

        params = load_indicator_params(path, settings=Settings(_env_file=None))
        assert params.ma_periods == [5, 10, 20, 60]
        assert params.rsi_period == 6
        assert params.kdj_period == 9

    def test_settings_ma_periods_used_when_file_omits_them(self, tmp_path):
        path = tmp_path / "indicators.yaml"
        path.write_text("cr_period: 20\n", encoding="utf-8")

        params = load_indicator_params(path, settings=Settings(_env_file=None, ma_periods=[7, 14]))
        assert params.ma_periods == [7, 14]
        assert params.cr_period == 20

    def test_path_from_settings(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("trix_period: 15\n", encoding="utf-8")

        settings = Settings(_env_file=None, indicator_config_path=str(path))
        assert load_indicator_params(settings=settings).trix_period == 15

    def test_missing_file_uses_defaults(self, tmp_path):
        params = load_indicator_params(tmp_path / "absent.yaml", settings=Settings(_env_file=None))
        assert params == IndicatorParams()

    def test_no_path_uses_defaults(self):
        assert load_indicator_params(settings=Settings(_env_file=None)) == IndicatorParams()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "indicators.yaml"
        path.write_text("", encoding="utf-8")
        assert load_indicator_params(path, settings=Settings(_env_file=None)) == IndicatorParams()

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "indicators.yaml"
        path.write_text("- 5\n- 10\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_indicator_params(path, settings=Settings(_env_file=None))

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "indicators.yaml"
        path.write_text("kdj_period: 0\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_indicator_params(path, settings=Settings(_env_file=None))
