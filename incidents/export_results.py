"""
Results Module

Combines observed counts, in-sample fit and forecast into one frame and
renders the console summaries of a run. Nothing is written to disk.
"""

import logging
import math
from typing import Dict, List, Optional

import pandas as pd

from .aggregation import MonthlyAggregator
from .cleaning import CleaningReport
from .types import AccuracyMetrics, ForecastResult

logger = logging.getLogger(__name__)


class ResultsReporter:
    """Builds the combined result table and the printed summaries"""

    def __init__(self, cleaned: pd.DataFrame, series: pd.Series, result: Optional[ForecastResult] = None):
        self.cleaned = cleaned
        self.series = series
        self.result = result

    def create_final_dataset(self) -> pd.DataFrame:
        """Observed and forecast periods in one frame, flagged by ``is_forecast``"""
        history = pd.DataFrame(
            {
                "ds": self.series.index,
                "incidents": self.series.to_numpy(),
                "fitted": self.result["fitted"].to_numpy() if self.result else float("nan"),
                "is_forecast": False,
            }
        )
        if not self.result:
            return history

        forecast = self.result["forecast"].copy()
        forecast["is_forecast"] = True
        final = pd.concat([history, forecast], ignore_index=True, sort=False)
        logger.debug(f"Final dataset: {len(history)} observed + {len(forecast)} forecast periods")
        return final[["ds", "incidents", "fitted", "y_pred", "y_pred_lower", "y_pred_upper", "is_forecast"]]

    def summary_statistics(self) -> Dict[str, object]:
        cleaned = self.cleaned
        breakdown = MonthlyAggregator.lethality_breakdown(cleaned)
        classified = breakdown["lethal"] + breakdown["non_lethal"]
        hourly = MonthlyAggregator.hourly_profile(cleaned)

        stats: Dict[str, object] = {
            "incidents": len(cleaned),
            "first_date": cleaned["occur_date"].min(),
            "last_date": cleaned["occur_date"].max(),
            "lethal": int(breakdown["lethal"]),
            "unclassified": int(breakdown["unclassified"]),
            "lethal_share": breakdown["lethal"] / classified if classified else float("nan"),
            "peak_hour": int(hourly.loc[hourly["incidents"].idxmax(), "hour"]) if len(cleaned) else None,
            "months": len(self.series),
        }
        if len(self.series):
            stats["peak_month"] = self.series.idxmax()
            stats["mean_monthly"] = float(self.series.mean())
        return stats

    def format_summary(self, report: Optional[CleaningReport] = None) -> str:
        lines: List[str] = ["=" * 60, "INCIDENT SUMMARY", "=" * 60]

        if report is not None:
            lines.append(f"Raw records: {report.input_rows:,}")
            lines.append(f"Dropped (missing coordinates): {report.missing_coordinates:,}")
            if report.malformed_rows:
                lines.append(f"Skipped (malformed date/time): {report.malformed_rows:,}")

        stats = self.summary_statistics()
        lines.append(f"Cleaned incidents: {stats['incidents']:,}")
        if stats["incidents"]:
            lines.append(f"Date range: {stats['first_date']:%Y-%m-%d} to {stats['last_date']:%Y-%m-%d}")
            lines.append(f"Lethal incidents: {stats['lethal']:,} ({stats['lethal_share']:.1%} of classified)")
            if stats["unclassified"]:
                lines.append(f"Unclassified lethality flag: {stats['unclassified']:,}")
            lines.append(f"Peak hour of day: {stats['peak_hour']:02d}:00")
        if stats["months"]:
            lines.append(f"Months in series: {stats['months']} (mean {stats['mean_monthly']:.1f} incidents/month)")
            lines.append(f"Busiest month: {stats['peak_month']:%Y-%m}")

        if self.result:
            lines.extend(self._format_forecast(self.result))
        return "\n".join(lines)

    def _format_forecast(self, result: ForecastResult) -> List[str]:
        selected = result["selected"]
        lines = ["", "=" * 60, f"FORECAST: {selected['label']}", "=" * 60]
        if selected["criterion"] != "none":
            lines.append(f"Selected by {selected['criterion'].upper()} = {selected['score']:.2f}")

        candidates = result["candidates"]
        if not candidates.empty:
            lines.append("")
            lines.append("Candidate models:")
            shown = candidates[["model", "aic", "aicc", "bic", "selected"]]
            lines.append(shown.to_string(index=False, float_format=lambda v: f"{v:.2f}"))

        lines.append("")
        lines.append("In-sample accuracy:")
        lines.append(self.format_metrics(result["accuracy"]))
        if result["validation_metrics"]:
            lines.append("Holdout accuracy:")
            lines.append(self.format_metrics(result["validation_metrics"]))

        lines.append("")
        lines.append("Forecast:")
        table = result["forecast"].copy()
        table["ds"] = table["ds"].dt.strftime("%Y-%m")
        lines.append(table.to_string(index=False, float_format=lambda v: f"{v:.1f}"))
        if result["negative_periods"]:
            lines.append(
                f"Note: {result['negative_periods']} period(s) forecast below zero; values are not clamped."
            )
        return lines

    @staticmethod
    def format_metrics(metrics: AccuracyMetrics) -> str:
        return "  " + "  ".join(
            f"{name}={value:.3f}" if not math.isnan(value) else f"{name}=n/a" for name, value in metrics.items()
        )
