"""
Utility functions for the incident pipeline
"""

import logging
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Column names of a cleaned table; the cleaner accepts these as input too
CLEANED_COLUMNS: List[str] = ["occur_date", "occur_hour", "latitude", "longitude", "year", "month", "is_lethal"]

# canonical field -> cleaned-table column that can stand in for the raw one
_CLEANED_ALIASES: Dict[str, str] = {
    "occur_date": "occur_date",
    "occur_time": "occur_hour",
    "latitude": "latitude",
    "longitude": "longitude",
    "murder_flag": "is_lethal",
}

LETHALITY_VALUES: Dict[str, bool] = {"true": True, "false": False}


class DataValidator:
    """Validates and parses the incident fields the pipeline consumes"""

    @staticmethod
    def resolve_columns(data: pd.DataFrame, raw_columns: Dict[str, str]) -> Dict[str, str]:
        """Map each canonical field to the column that holds it in ``data``"""
        resolved: Dict[str, str] = {}
        missing: List[str] = []
        for canonical, alias in _CLEANED_ALIASES.items():
            raw_name = raw_columns.get(canonical, canonical)
            found = next((c for c in (raw_name, canonical, alias) if c in data.columns), None)
            if found is None:
                missing.append(raw_name)
            else:
                resolved[canonical] = found

        if missing:
            raise ValueError(f"Missing required columns: {missing}")
        return resolved

    @staticmethod
    def normalize_blanks(data: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
        """Turn empty or whitespace-only strings into missing values, in ``columns`` only"""
        data = data.copy()
        for col in columns:
            if data[col].dtype == object:
                stripped = data[col].map(lambda v: v.strip() if isinstance(v, str) else v)
                data[col] = stripped.where(stripped != "", np.nan)
        return data

    @staticmethod
    def parse_dates(values: pd.Series, date_format: str) -> Tuple[pd.Series, pd.Series]:
        """Parse dates; returns the parsed series and a mask of rows that failed"""
        if pd.api.types.is_datetime64_any_dtype(values):
            parsed = values
        else:
            parsed = pd.to_datetime(values, format=date_format, errors="coerce")
        return parsed, parsed.isna()

    @staticmethod
    def parse_hours(values: pd.Series) -> Tuple[pd.Series, pd.Series]:
        """Take the hour from the first two characters of a HH:MM:SS string"""
        if pd.api.types.is_numeric_dtype(values):
            hours = values.astype(float)
        else:
            prefix = values.astype(str).str[:2]
            hours = pd.to_numeric(prefix.where(prefix.str.fullmatch(r"\d{2}")), errors="coerce")

        malformed = hours.isna() | (hours < 0) | (hours > 23)
        return hours, malformed

    @staticmethod
    def parse_coordinates(values: pd.Series) -> pd.Series:
        return pd.to_numeric(values, errors="coerce")

    @staticmethod
    def parse_lethality(values: pd.Series) -> pd.Series:
        """true/false (any case) to a nullable boolean; anything else is unclassified (<NA>)"""
        if pd.api.types.is_bool_dtype(values):
            return values.astype("boolean")

        normalized = values.astype(str).str.strip().str.lower()
        flags = pd.Series(pd.NA, index=values.index, dtype="boolean")
        for text, flag in LETHALITY_VALUES.items():
            flags[normalized == text] = flag
        return flags
