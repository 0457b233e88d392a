"""
Pipeline runner

Load -> clean -> aggregate -> forecast, executed once and in order.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .aggregation import MonthlyAggregator
from .cleaning import CleaningReport, IncidentCleaner
from .config import PipelineConfig
from .forecasting import BaseForecaster, ETSForecaster, ForecastingEngine, SeasonalNaiveForecaster
from .loader import IncidentLoader
from .types import ForecastResult

logger = logging.getLogger(__name__)

MODEL_CHOICES = ("ets", "snaive")


@dataclass
class PipelineResult:
    cleaned: pd.DataFrame
    report: CleaningReport
    monthly: pd.DataFrame
    series: pd.Series
    filled_months: int
    forecast: ForecastResult


def build_forecaster(model: str, config: PipelineConfig) -> BaseForecaster:
    """Instantiate the forecaster named ``model`` with the run configuration"""
    model = model.lower()
    if model == "ets":
        return ETSForecaster(
            forecast_horizon=config.forecast_horizon,
            seasonal_period=config.seasonal_period,
            min_seasonal_cycles=config.min_seasonal_cycles,
            information_criterion=config.information_criterion,
            validation_config=config.validation,
        )
    if model == "snaive":
        return SeasonalNaiveForecaster(
            forecast_horizon=config.forecast_horizon,
            seasonal_period=config.seasonal_period,
            min_seasonal_cycles=config.min_seasonal_cycles,
            validation_config=config.validation,
        )
    raise ValueError(f"Unknown forecaster type: {model}")


def run_pipeline(
    config: Optional[PipelineConfig] = None,
    source: Optional[Union[str, Path]] = None,
    model: str = "ets",
    raw: Optional[pd.DataFrame] = None,
) -> PipelineResult:
    """Run every stage once; ``raw`` skips the loader when the table is already in memory"""
    config = config or PipelineConfig()

    logger.info("=" * 60)
    logger.info("STEP 1: LOAD")
    logger.info("=" * 60)
    if raw is None:
        raw = IncidentLoader(config).load(source)

    logger.info("=" * 60)
    logger.info("STEP 2: CLEAN")
    logger.info("=" * 60)
    cleaner = IncidentCleaner(config)
    cleaned = cleaner.clean(raw)

    logger.info("=" * 60)
    logger.info("STEP 3: AGGREGATE")
    logger.info("=" * 60)
    aggregator = MonthlyAggregator(config)
    monthly = aggregator.aggregate(cleaned)
    series = aggregator.to_series(monthly)

    logger.info("=" * 60)
    logger.info("STEP 4: FORECAST")
    logger.info("=" * 60)
    engine = ForecastingEngine(build_forecaster(model, config))
    result = engine.run(series)

    return PipelineResult(
        cleaned=cleaned,
        report=cleaner.report,
        monthly=monthly,
        series=series,
        filled_months=aggregator.filled_months,
        forecast=result,
    )
