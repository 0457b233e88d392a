"""
Forecasting Module

Contains forecasting methods with a common interface for easy extensibility.
The seasonal exponential-smoothing forecaster lives in ``ets.py``; a seasonal
naive baseline is implemented here.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, cast

import numpy as np
import pandas as pd

from ..config import ValidationConfig
from ..errors import InsufficientSeries
from ..types import ForecastResult, SelectedModel
from ..validation import ForecastValidator

logger = logging.getLogger(__name__)

Z_SCORE = 1.96  # 95% prediction interval


def future_periods(series: pd.Series, steps: int) -> pd.DatetimeIndex:
    """Month-start dates following the last observation of ``series``"""
    start = cast(pd.Timestamp, series.index[-1]) + pd.offsets.MonthBegin(1)
    return pd.date_range(start=start, periods=steps, freq="MS", name="ds")


class BaseForecaster(ABC):
    """Abstract base class for all forecasting methods"""

    def __init__(
        self,
        forecast_horizon: int = 12,
        seasonal_period: int = 12,
        min_seasonal_cycles: int = 2,
        validation_config: Optional[ValidationConfig] = None,
    ):
        self.forecast_horizon = forecast_horizon
        self.seasonal_period = seasonal_period
        self.min_seasonal_cycles = min_seasonal_cycles
        self.validation_config = validation_config or ValidationConfig()

    @property
    def min_observations(self) -> int:
        return self.seasonal_period * self.min_seasonal_cycles

    @abstractmethod
    def get_model_name(self) -> str:
        """Return the name of the forecasting model"""
        pass

    @abstractmethod
    def fit_model(self, series: pd.Series) -> Any:
        """Fit the model to a monthly series and return the fitted state"""
        pass

    @abstractmethod
    def predict(self, model: Any, series: pd.Series, steps: int) -> pd.DataFrame:
        """
        Forecast ``steps`` periods past the end of ``series``

        Returns:
            pd.DataFrame with ds, y_pred, y_pred_lower, y_pred_upper
        """
        pass

    @abstractmethod
    def fitted_values(self, model: Any, series: pd.Series) -> pd.Series:
        """In-sample predictions aligned with ``series``"""
        pass

    @abstractmethod
    def describe(self, model: Any) -> SelectedModel:
        pass

    def candidate_table(self, model: Any) -> pd.DataFrame:
        """Models considered during selection (empty for fixed models)"""
        return pd.DataFrame()

    def check_series(self, series: pd.Series) -> None:
        if len(series) < self.min_observations:
            raise InsufficientSeries(len(series), self.min_observations)

    def forecast(self, series: pd.Series, _skip_validation: bool = False) -> ForecastResult:
        """Fit, forecast and score a monthly count series"""
        self.check_series(series)

        model = self.fit_model(series)
        fitted = self.fitted_values(model, series)
        forecast = self.predict(model, series, self.forecast_horizon)

        negative_periods = int((forecast["y_pred"] < 0).sum())
        if negative_periods:
            # Counts cannot be negative, but the values are reported as the model produced them
            logger.warning(f"  {negative_periods} forecast period(s) below zero (min {forecast['y_pred'].min():.2f})")

        observed = fitted.notna()
        accuracy = ForecastValidator.calculate_accuracy_metrics(
            series[observed].to_numpy(),
            fitted[observed].to_numpy(),
            seasonal_period=self.seasonal_period,
            training=series.to_numpy(),
        )

        validation_metrics = None
        if not _skip_validation:
            validation_metrics = ForecastValidator.validate_holdout(series, self.validation_config, self)

        return {
            "selected": self.describe(model),
            "candidates": self.candidate_table(model),
            "fitted": fitted,
            "forecast": forecast,
            "negative_periods": negative_periods,
            "accuracy": accuracy,
            "validation_metrics": validation_metrics,
        }


class ForecastingEngine:
    """Main forecasting engine that coordinates a forecasting method"""

    def __init__(self, forecaster: BaseForecaster):
        self.forecaster = forecaster

    def run(self, series: pd.Series) -> ForecastResult:
        logger.info("=" * 60)
        logger.info(f"FORECASTING WITH {self.forecaster.get_model_name()}")
        logger.info("=" * 60)
        logger.info(
            f"Series: {len(series)} months, horizon {self.forecaster.forecast_horizon}, "
            f"seasonal period {self.forecaster.seasonal_period}"
        )

        result = self.forecaster.forecast(series)

        selected = result["selected"]
        logger.info(f"Selected model: {selected['label']} ({selected['criterion']}={selected['score']:.2f})")
        logger.info(
            f"In-sample accuracy - ME: {result['accuracy']['ME']:.2f}, RMSE: {result['accuracy']['RMSE']:.2f}"
        )
        if result["validation_metrics"]:
            logger.info(f"Holdout accuracy - RMSE: {result['validation_metrics']['RMSE']:.2f}")
        logger.debug(f"Forecast total: {result['forecast']['y_pred'].sum():.0f}")
        return result


class SeasonalNaiveForecaster(BaseForecaster):
    """Repeats the last observed season; used as a baseline"""

    def get_model_name(self) -> str:
        return "SeasonalNaive"

    def fit_model(self, series: pd.Series) -> pd.Series:
        return series.astype(float)

    def fitted_values(self, model: pd.Series, series: pd.Series) -> pd.Series:
        return model.shift(self.seasonal_period).rename("fitted")

    def predict(self, model: pd.Series, series: pd.Series, steps: int) -> pd.DataFrame:
        m = self.seasonal_period
        last_season = model.to_numpy()[-m:]
        y_pred = np.array([last_season[i % m] for i in range(steps)])

        residuals = (model - model.shift(m)).dropna()
        sigma = float(residuals.std(ddof=0)) if len(residuals) > 0 else 0.0
        # Uncertainty grows with the number of full seasons ahead
        seasons_ahead = np.floor(np.arange(steps) / m) + 1
        spread = Z_SCORE * sigma * np.sqrt(seasons_ahead)

        return pd.DataFrame(
            {
                "ds": future_periods(series, steps),
                "y_pred": y_pred,
                "y_pred_lower": y_pred - spread,
                "y_pred_upper": y_pred + spread,
            }
        )

    def describe(self, model: pd.Series) -> SelectedModel:
        return {
            "label": f"SNAIVE(m={self.seasonal_period})",
            "spec": None,
            "criterion": "none",
            "score": float("nan"),
        }
