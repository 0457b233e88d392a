import numpy as np
import pandas as pd
import pytest

RAW_HEADER = ["INCIDENT_KEY", "OCCUR_DATE", "OCCUR_TIME", "BORO", "Latitude", "Longitude", "STATISTICAL_MURDER_FLAG"]


def make_raw(rows):
    """Raw table with every field as a string, like the loader returns"""
    records = []
    for i, row in enumerate(rows):
        records.append(
            {
                "INCIDENT_KEY": str(1000 + i),
                "OCCUR_DATE": row.get("date", ""),
                "OCCUR_TIME": row.get("time", ""),
                "BORO": row.get("boro", "BROOKLYN"),
                "Latitude": "" if row.get("lat") is None else str(row["lat"]),
                "Longitude": "" if row.get("lon") is None else str(row["lon"]),
                "STATISTICAL_MURDER_FLAG": row.get("flag", "false"),
            }
        )
    return pd.DataFrame(records, columns=RAW_HEADER)


def monthly_raw(months: int, start: str = "2018-01-01", base: int = 5) -> pd.DataFrame:
    """Raw incidents spread over ``months`` consecutive months with a yearly pattern"""
    rows = []
    for i, period in enumerate(pd.date_range(start, periods=months, freq="MS")):
        count = base + (i % 12) // 3
        for k in range(count):
            rows.append(
                {
                    "date": f"{period.month:02d}/{1 + k % 28:02d}/{period.year}",
                    "time": f"{(k * 5) % 24:02d}:15:00",
                    "lat": 40.6 + 0.01 * k,
                    "lon": -73.9,
                    "flag": "true" if k == 0 else "false",
                }
            )
    return make_raw(rows)


def seasonal_series(months: int = 48, seed: int = 0) -> pd.Series:
    rng = np.random.default_rng(seed)
    t = np.arange(months)
    values = 50 + 10 * np.sin(2 * np.pi * t / 12) + rng.normal(0, 2, months)
    index = pd.date_range("2016-01-01", periods=months, freq="MS", name="ds")
    return pd.Series(np.round(values), index=index, name="incidents")


@pytest.fixture
def scenario_raw():
    return make_raw(
        [
            {"date": "01/15/2019", "time": "22:30:00", "lat": 40.7, "lon": -73.9, "flag": "false"},
            {"date": "01/20/2019", "time": "02:10:00", "lat": None, "lon": -73.8, "flag": "true"},
        ]
    )
