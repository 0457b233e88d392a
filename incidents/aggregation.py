"""
Aggregation Module

Groups cleaned incidents by calendar month and builds the monthly count
series the forecaster consumes, plus the descriptive profiles used for
reporting.
"""

import logging
from typing import Optional, cast

import pandas as pd

from .config import PipelineConfig

logger = logging.getLogger(__name__)


class MonthlyAggregator:
    """Builds monthly incident counts from cleaned records"""

    def __init__(self, config: Optional[PipelineConfig] = None) -> None:
        self.config = config or PipelineConfig()
        self.filled_months: int = 0

    def aggregate(self, cleaned: pd.DataFrame) -> pd.DataFrame:
        """Count incidents per (year, month); only observed months appear"""
        monthly = cast(
            pd.DataFrame,
            cleaned.groupby(["year", "month"]).size().reset_index(name="incidents"),
        )
        monthly = monthly.sort_values(["year", "month"]).reset_index(drop=True)
        monthly["period_start"] = pd.to_datetime(
            pd.DataFrame({"year": monthly["year"], "month": monthly["month"], "day": 1})
        )

        logger.info(f"Aggregated {int(monthly['incidents'].sum()):,} incidents into {len(monthly)} months")
        if len(monthly) > 0:
            logger.debug(f"Period range: {monthly['period_start'].min():%Y-%m} to {monthly['period_start'].max():%Y-%m}")
        return monthly

    def to_series(self, monthly: pd.DataFrame, fill_missing: Optional[bool] = None) -> pd.Series:
        """Monthly counts as a chronological series with a month-start frequency"""
        fill_missing = self.config.fill_missing_months if fill_missing is None else fill_missing
        series = pd.Series(
            monthly["incidents"].to_numpy(),
            index=pd.DatetimeIndex(monthly["period_start"]),
            name="incidents",
        )

        self.filled_months = 0
        if fill_missing and len(series) > 0:
            # Create complete month range and fill missing months with 0
            full_range = pd.date_range(start=series.index.min(), end=series.index.max(), freq="MS")
            self.filled_months = len(full_range) - len(series)
            series = series.reindex(full_range, fill_value=0)
            if self.filled_months:
                logger.warning(f"Filled {self.filled_months} month(s) with no recorded incidents with zero counts")

        series.index.name = "ds"
        return series

    @staticmethod
    def hourly_profile(cleaned: pd.DataFrame) -> pd.DataFrame:
        """Incident counts for each hour of the day, 0 to 23"""
        counts = cleaned.groupby("occur_hour").size().reindex(range(24), fill_value=0)
        return pd.DataFrame({"hour": counts.index, "incidents": counts.to_numpy()})

    @staticmethod
    def yearly_totals(cleaned: pd.DataFrame) -> pd.DataFrame:
        """Incidents and lethal incidents per year"""
        lethal = cleaned["is_lethal"].fillna(False).astype(bool)
        totals = (
            cleaned.assign(lethal=lethal)
            .groupby("year")
            .agg(incidents=("lethal", "size"), lethal=("lethal", "sum"))
            .reset_index()
        )
        totals["lethal_share"] = totals["lethal"] / totals["incidents"]
        return totals

    @staticmethod
    def lethality_breakdown(cleaned: pd.DataFrame) -> pd.Series:
        """Counts of lethal, non-lethal and unclassified incidents"""
        flags = cleaned["is_lethal"]
        return pd.Series(
            {
                "lethal": int(flags.eq(True).sum()),
                "non_lethal": int(flags.eq(False).sum()),
                "unclassified": int(flags.isna().sum()),
            },
            name="incidents",
        )
