"""
Pipeline configuration

Defaults target the NYPD historic shooting incident export, monthly
granularity and a one-year forecast horizon.
"""

from dataclasses import dataclass, field
from typing import Dict

DEFAULT_SOURCE_URL = "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"

# canonical name -> column name in the published dataset
RAW_COLUMNS: Dict[str, str] = {
    "occur_date": "OCCUR_DATE",
    "occur_time": "OCCUR_TIME",
    "latitude": "Latitude",
    "longitude": "Longitude",
    "murder_flag": "STATISTICAL_MURDER_FLAG",
}


@dataclass
class ValidationConfig:
    """Configuration for holdout validation"""

    enable_validation: bool = True
    holdout_periods: int = 12


@dataclass
class PipelineConfig:
    """Settings for a single pipeline run"""

    source_url: str = DEFAULT_SOURCE_URL
    request_timeout: float = 60.0
    raw_columns: Dict[str, str] = field(default_factory=lambda: dict(RAW_COLUMNS))

    date_format: str = "%m/%d/%Y"
    on_malformed: str = "raise"  # "raise" or "skip"

    fill_missing_months: bool = True

    seasonal_period: int = 12
    forecast_horizon: int = 12
    min_seasonal_cycles: int = 2
    information_criterion: str = "aicc"

    validation: ValidationConfig = field(default_factory=ValidationConfig)

    def __post_init__(self) -> None:
        if self.on_malformed not in ("raise", "skip"):
            raise ValueError(f"on_malformed must be 'raise' or 'skip', got {self.on_malformed!r}")
        if self.information_criterion not in ("aic", "aicc", "bic"):
            raise ValueError(f"Unknown information criterion: {self.information_criterion}")
