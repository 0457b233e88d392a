"""
Incident Trend Pipeline

Loads shooting-incident records, cleans them, aggregates monthly counts and
forecasts the next year with a seasonal exponential-smoothing model.
"""

from .aggregation import MonthlyAggregator
from .cleaning import CleaningReport, IncidentCleaner
from .config import PipelineConfig, ValidationConfig
from .errors import InsufficientSeries, MalformedField, ModelSelectionError, PipelineError, SourceUnavailable
from .export_results import ResultsReporter
from .forecasting import ETSForecaster, ForecastingEngine, SeasonalNaiveForecaster
from .loader import IncidentLoader
from .pipeline import PipelineResult, run_pipeline

__all__ = [
    "CleaningReport",
    "ETSForecaster",
    "ForecastingEngine",
    "IncidentCleaner",
    "IncidentLoader",
    "InsufficientSeries",
    "MalformedField",
    "ModelSelectionError",
    "MonthlyAggregator",
    "PipelineConfig",
    "PipelineError",
    "PipelineResult",
    "ResultsReporter",
    "SeasonalNaiveForecaster",
    "SourceUnavailable",
    "ValidationConfig",
    "run_pipeline",
]
