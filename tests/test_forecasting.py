import numpy as np
import pandas as pd
import pytest

from conftest import seasonal_series
from incidents import (
    ETSForecaster,
    ForecastingEngine,
    InsufficientSeries,
    ModelSelectionError,
    SeasonalNaiveForecaster,
    ValidationConfig,
)
from incidents.forecasting import spec_label

NO_VALIDATION = ValidationConfig(enable_validation=False)


def test_short_series_is_rejected_before_fitting():
    forecaster = ETSForecaster(validation_config=NO_VALIDATION)

    with pytest.raises(InsufficientSeries) as excinfo:
        forecaster.forecast(seasonal_series(23))

    assert excinfo.value.observations == 23
    assert excinfo.value.required == 24


def test_two_full_cycles_are_enough():
    forecaster = ETSForecaster(validation_config=NO_VALIDATION)
    forecaster.check_series(seasonal_series(24))


def test_spec_label():
    assert spec_label({"error": "mul", "trend": "add", "damped_trend": True, "seasonal": "mul"}) == "ETS(M,Ad,M)"
    assert spec_label({"error": "add", "trend": None, "damped_trend": False, "seasonal": None}) == "ETS(A,N,N)"


def test_candidates_skip_multiplicative_for_non_positive_series():
    series = seasonal_series(36)
    series.iloc[5] = 0
    specs = ETSForecaster().candidate_specs(series)

    assert specs
    assert all(s["error"] == "add" and s["seasonal"] != "mul" for s in specs)


def test_candidates_for_positive_series():
    specs = ETSForecaster().candidate_specs(seasonal_series(36))
    labels = {spec_label(s) for s in specs}

    assert "ETS(M,Ad,M)" in labels
    assert "ETS(A,A,A)" in labels
    # additive error never paired with multiplicative seasonality
    assert not any(s["error"] == "add" and s["seasonal"] == "mul" for s in specs)
    assert len(specs) == 15


def test_forecast_horizon_and_fit_alignment():
    series = seasonal_series(48)
    result = ETSForecaster(validation_config=NO_VALIDATION).forecast(series)

    forecast = result["forecast"]
    assert len(forecast) == 12
    assert np.isfinite(forecast["y_pred"]).all()
    assert (forecast["y_pred"] >= 0).all()
    assert list(forecast["ds"]) == list(pd.date_range("2020-01-01", periods=12, freq="MS"))
    assert (forecast["y_pred_lower"] <= forecast["y_pred_upper"]).all()

    assert result["fitted"].index.equals(series.index)
    assert set(result["accuracy"]) >= {"ME", "RMSE"}
    assert np.isfinite(result["accuracy"]["RMSE"])
    assert result["validation_metrics"] is None


def test_selected_model_has_lowest_criterion():
    result = ETSForecaster(information_criterion="aic", validation_config=NO_VALIDATION).forecast(seasonal_series(36))

    candidates = result["candidates"]
    selected = candidates[candidates["selected"]]
    assert len(selected) == 1
    assert selected["aic"].item() == pytest.approx(candidates["aic"].min())
    assert selected["model"].item() == result["selected"]["label"]
    assert result["selected"]["criterion"] == "aic"


def test_negative_forecast_is_reported_not_clamped():
    rng = np.random.default_rng(1)
    months = 36
    values = 100 - 2.5 * np.arange(months) + rng.normal(0, 1, months)
    series = pd.Series(values, index=pd.date_range("2017-01-01", periods=months, freq="MS"))
    linear_trend = [{"error": "add", "trend": "add", "damped_trend": False, "seasonal": None}]

    result = ETSForecaster(candidates=linear_trend, validation_config=NO_VALIDATION).forecast(series)

    y_pred = result["forecast"]["y_pred"]
    assert len(y_pred) == 12
    assert np.isfinite(y_pred).all()
    assert y_pred.min() < 0
    assert result["negative_periods"] == int((y_pred < 0).sum())
    assert result["negative_periods"] > 0


def test_all_candidates_failing(monkeypatch):
    forecaster = ETSForecaster(validation_config=NO_VALIDATION)

    def broken(series, spec):
        raise RuntimeError("optimizer failed")

    monkeypatch.setattr(forecaster, "fit_candidate", broken)

    with pytest.raises(ModelSelectionError):
        forecaster.forecast(seasonal_series(36))


def test_holdout_validation_runs_when_series_is_long_enough():
    forecaster = SeasonalNaiveForecaster(validation_config=ValidationConfig(holdout_periods=12))

    assert forecaster.forecast(seasonal_series(36))["validation_metrics"] is not None
    assert forecaster.forecast(seasonal_series(30))["validation_metrics"] is None


def test_seasonal_naive_repeats_last_season():
    series = seasonal_series(36)
    result = SeasonalNaiveForecaster(validation_config=NO_VALIDATION).forecast(series)

    np.testing.assert_allclose(result["forecast"]["y_pred"].to_numpy(), series.to_numpy()[-12:])
    assert result["fitted"].iloc[:12].isna().all()
    assert result["candidates"].empty
    assert result["selected"]["label"] == "SNAIVE(m=12)"


def test_engine_returns_forecaster_result():
    engine = ForecastingEngine(SeasonalNaiveForecaster(validation_config=NO_VALIDATION))
    result = engine.run(seasonal_series(24))

    assert len(result["forecast"]) == 12


def test_ets_handles_month_index_with_gaps():
    series = seasonal_series(40)
    series = series[series.index.month != 5]
    assert series.index.freq is None

    result = ETSForecaster(validation_config=NO_VALIDATION).forecast(series)

    forecast = result["forecast"]
    assert len(forecast) == 12
    assert np.isfinite(forecast["y_pred"]).all()
    assert forecast["ds"].iloc[0] == pd.Timestamp("2019-05-01")
    assert result["fitted"].index.equals(series.index)


def test_ets_holdout_validation():
    forecaster = ETSForecaster(validation_config=ValidationConfig(holdout_periods=12))
    result = forecaster.forecast(seasonal_series(36))

    metrics = result["validation_metrics"]
    assert metrics is not None
    assert np.isfinite(metrics["RMSE"])
