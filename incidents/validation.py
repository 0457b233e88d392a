"""
Validation module for forecasting models

Accuracy metrics comparing predicted with actual values, and a holdout
check that refits a forecaster on all but the last periods of a series.
"""

import logging
from typing import Any, Optional

import numpy as np
import pandas as pd

from .config import ValidationConfig
from .types import AccuracyMetrics

logger = logging.getLogger(__name__)


class ForecastValidator:
    """Forecast accuracy utilities"""

    @staticmethod
    def calculate_accuracy_metrics(
        actual: np.ndarray,
        predicted: np.ndarray,
        seasonal_period: int = 12,
        training: Optional[np.ndarray] = None,
    ) -> AccuracyMetrics:
        """
        Calculate standard accuracy metrics

        Args:
            actual: Array of actual values
            predicted: Array of predicted values, aligned with ``actual``
            seasonal_period: Lag of the naive forecast used to scale MASE
            training: Series used for the MASE scale (defaults to ``actual``)

        Returns:
            Dictionary with ME, RMSE, MAE, MPE, MAPE, MASE and ACF1
        """
        actual = np.asarray(actual, dtype=float)
        predicted = np.asarray(predicted, dtype=float)
        if len(actual) != len(predicted):
            raise ValueError(f"Length mismatch: {len(actual)} actual vs {len(predicted)} predicted values")

        errors = actual - predicted

        me = np.mean(errors)
        rmse = np.sqrt(np.mean(errors**2))
        mae = np.mean(np.abs(errors))

        # Percentage errors are undefined where the actual value is zero
        non_zero_mask = actual != 0
        if np.sum(non_zero_mask) > 0:
            pct_errors = errors[non_zero_mask] / actual[non_zero_mask] * 100
            mpe = np.mean(pct_errors)
            mape = np.mean(np.abs(pct_errors))
        else:
            mpe = mape = float("nan")

        scale_series = np.asarray(training if training is not None else actual, dtype=float)
        lag = seasonal_period if len(scale_series) > seasonal_period else 1
        if len(scale_series) > lag:
            scale = np.mean(np.abs(scale_series[lag:] - scale_series[:-lag]))
        else:
            scale = float("nan")
        mase = mae / scale if scale and np.isfinite(scale) else float("nan")

        if len(errors) > 1 and np.std(errors) > 0:
            centered = errors - errors.mean()
            acf1 = np.sum(centered[1:] * centered[:-1]) / np.sum(centered**2)
        else:
            acf1 = float("nan")

        return {
            "ME": float(me),
            "RMSE": float(rmse),
            "MAE": float(mae),
            "MPE": float(mpe),
            "MAPE": float(mape),
            "MASE": float(mase),
            "ACF1": float(acf1),
        }

    @staticmethod
    def validate_holdout(
        series: pd.Series,
        config: ValidationConfig,
        forecaster_instance: Any,
    ) -> Optional[AccuracyMetrics]:
        """
        Refit on all but the last ``holdout_periods`` and score the held-out actuals

        Returns None when validation is disabled or the training part would be
        shorter than the forecaster's minimum series length.
        """
        if not config.enable_validation:
            return None

        holdout = config.holdout_periods
        required = forecaster_instance.min_observations + holdout
        if len(series) < required:
            logger.warning(
                f"  Insufficient data for holdout validation: {len(series)} months (need {required})"
            )
            return None

        train = series.iloc[:-holdout]
        test = series.iloc[-holdout:]
        logger.debug(f"  Running holdout validation on last {holdout} months...")

        model = forecaster_instance.fit_model(train)
        predicted = forecaster_instance.predict(model, train, holdout)["y_pred"].to_numpy()

        metrics = ForecastValidator.calculate_accuracy_metrics(
            test.to_numpy(),
            predicted,
            seasonal_period=forecaster_instance.seasonal_period,
            training=train.to_numpy(),
        )
        logger.debug(f"  Holdout metrics - RMSE: {metrics['RMSE']:.2f}, MAE: {metrics['MAE']:.2f}, MASE: {metrics['MASE']:.2f}")
        return metrics
