"""
Forecasting Modules

Forecasting methods behind a common interface.
"""

from .forecast import BaseForecaster, ForecastingEngine, SeasonalNaiveForecaster
from .ets import ETSForecaster, ModelSelection, spec_label


__all__ = [
    "BaseForecaster",
    "ETSForecaster",
    "ForecastingEngine",
    "ModelSelection",
    "SeasonalNaiveForecaster",
    "spec_label",
]
