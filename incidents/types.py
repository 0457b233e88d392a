from typing import Dict, Optional, Tuple, TypedDict

import pandas as pd

# Type aliases
MonthKey = Tuple[int, int]  # (year, month)
AccuracyMetrics = Dict[str, float]  # metric name -> value


class ModelSpec(TypedDict):
    error: str  # "add" or "mul"
    trend: Optional[str]  # None, "add" or "mul"
    damped_trend: bool
    seasonal: Optional[str]  # None, "add" or "mul"


class SelectedModel(TypedDict):
    label: str
    spec: Optional[ModelSpec]
    criterion: str
    score: float


class ForecastResult(TypedDict):
    selected: SelectedModel
    candidates: pd.DataFrame
    fitted: pd.Series
    forecast: pd.DataFrame
    negative_periods: int
    accuracy: AccuracyMetrics
    validation_metrics: Optional[AccuracyMetrics]
