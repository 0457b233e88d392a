"""
Cleaning Module

Reduces the raw incident table to the fields the pipeline consumes:
occurrence date and hour, coordinates and the lethality flag, plus the
calendar year and month derived from the date.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

import pandas as pd

from .config import PipelineConfig
from .errors import MalformedField
from .utils import CLEANED_COLUMNS, DataValidator

logger = logging.getLogger(__name__)


@dataclass
class CleaningReport:
    """Row accounting for one cleaning run"""

    input_rows: int = 0
    missing_coordinates: int = 0
    malformed_rows: int = 0
    unclassified_flags: int = 0
    output_rows: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


class IncidentCleaner:
    """Turns raw incident records into cleaned records"""

    def __init__(self, config: Optional[PipelineConfig] = None) -> None:
        self.config = config or PipelineConfig()
        self.validator = DataValidator()
        self.report = CleaningReport()

    def clean(self, raw: pd.DataFrame) -> pd.DataFrame:
        """Select, normalize and parse the consumed fields of ``raw``"""
        report = CleaningReport(input_rows=len(raw))

        columns = self.validator.resolve_columns(raw, self.config.raw_columns)
        selected = raw[list(columns.values())].rename(columns={v: k for k, v in columns.items()})
        data = self.validator.normalize_blanks(selected, list(columns))

        # Coordinates first: rows without a location never reach the parsers
        data["latitude"] = self.validator.parse_coordinates(data["latitude"])
        data["longitude"] = self.validator.parse_coordinates(data["longitude"])
        located = data["latitude"].notna() & data["longitude"].notna()
        report.missing_coordinates = int((~located).sum())
        data = data[located]

        occur_date, bad_date = self.validator.parse_dates(data["occur_date"], self.config.date_format)
        occur_hour, bad_time = self.validator.parse_hours(data["occur_time"])
        malformed = bad_date | bad_time
        if malformed.any():
            report.malformed_rows = int(malformed.sum())
            self._handle_malformed(data, bad_date, bad_time)

        keep = ~malformed
        cleaned = pd.DataFrame(
            {
                "occur_date": occur_date[keep],
                "occur_hour": occur_hour[keep].astype(int),
                "latitude": data.loc[keep, "latitude"].astype(float),
                "longitude": data.loc[keep, "longitude"].astype(float),
            }
        )
        cleaned["year"] = cleaned["occur_date"].dt.year.astype(int)
        cleaned["month"] = cleaned["occur_date"].dt.month.astype(int)
        cleaned["is_lethal"] = self.validator.parse_lethality(data.loc[keep, "murder_flag"])
        cleaned = cleaned[CLEANED_COLUMNS].reset_index(drop=True)

        report.unclassified_flags = int(cleaned["is_lethal"].isna().sum())
        report.output_rows = len(cleaned)
        self.report = report
        self._log_report(report)
        return cleaned

    def _handle_malformed(self, data: pd.DataFrame, bad_date: pd.Series, bad_time: pd.Series) -> None:
        problems: List[MalformedField] = []
        for field, mask in (("occur_date", bad_date), ("occur_time", bad_time)):
            if mask.any():
                example = str(data.loc[mask, field].iloc[0])
                problems.append(MalformedField(field, int(mask.sum()), example))

        if self.config.on_malformed == "raise":
            raise problems[0]

        for problem in problems:
            logger.warning(f"Skipping {problem}")

    @staticmethod
    def _log_report(report: CleaningReport) -> None:
        logger.info(f"Cleaned records: {report.output_rows:,} of {report.input_rows:,}")
        logger.debug(f"  Dropped for missing coordinates: {report.missing_coordinates:,}")
        if report.malformed_rows:
            logger.debug(f"  Skipped as malformed: {report.malformed_rows:,}")
        if report.unclassified_flags:
            logger.warning(f"{report.unclassified_flags:,} records have an unclassified lethality flag")
