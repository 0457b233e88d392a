import pandas as pd
import pytest

from conftest import make_raw, monthly_raw
from incidents import IncidentCleaner, MalformedField, PipelineConfig
from incidents.utils import CLEANED_COLUMNS


def test_scenario_drops_row_missing_latitude(scenario_raw):
    cleaner = IncidentCleaner()
    cleaned = cleaner.clean(scenario_raw)

    assert len(cleaned) == 1
    row = cleaned.iloc[0]
    assert row["occur_hour"] == 22
    assert row["year"] == 2019
    assert row["month"] == 1
    assert row["is_lethal"] == False  # noqa: E712
    assert cleaner.report.missing_coordinates == 1
    assert cleaner.report.output_rows == 1


def test_year_and_month_follow_parsed_date():
    raw = make_raw([{"date": "07/04/2020", "time": "09:00:00", "lat": 40.7, "lon": -73.9}])
    cleaned = IncidentCleaner().clean(raw)

    assert cleaned.loc[0, "occur_date"] == pd.Timestamp("2020-07-04")
    assert (cleaned.loc[0, "year"], cleaned.loc[0, "month"]) == (2020, 7)


def test_output_has_only_canonical_columns():
    cleaned = IncidentCleaner().clean(monthly_raw(3))
    assert list(cleaned.columns) == CLEANED_COLUMNS


def test_row_count_drops_only_missing_coordinates():
    raw = make_raw(
        [
            {"date": "01/01/2020", "time": "01:00:00", "lat": 40.7, "lon": -73.9},
            {"date": "01/02/2020", "time": "02:00:00", "lat": 40.7, "lon": None},
            {"date": "01/03/2020", "time": "03:00:00", "lat": None, "lon": None},
            {"date": "01/04/2020", "time": "04:00:00", "lat": "  ", "lon": -73.9},
            {"date": "01/05/2020", "time": "05:00:00", "lat": 40.6, "lon": -73.8},
        ]
    )
    cleaned = IncidentCleaner().clean(raw)

    assert len(cleaned) == len(raw) - 3
    assert list(cleaned["occur_hour"]) == [1, 5]


def test_cleaning_is_idempotent():
    cleaner = IncidentCleaner()
    once = cleaner.clean(monthly_raw(6))
    twice = cleaner.clean(once)

    pd.testing.assert_frame_equal(once, twice)


def test_blank_normalization_leaves_unused_columns_alone():
    raw = make_raw([{"date": "03/10/2021", "time": "12:00:00", "lat": 40.7, "lon": -73.9, "boro": ""}])
    IncidentCleaner().clean(raw)

    # the input table is not mutated, and unused blanks are never touched
    assert raw.loc[0, "BORO"] == ""


def test_unexpected_flag_is_unclassified():
    raw = make_raw(
        [
            {"date": "03/10/2021", "time": "12:00:00", "lat": 40.7, "lon": -73.9, "flag": "TRUE"},
            {"date": "03/11/2021", "time": "13:00:00", "lat": 40.7, "lon": -73.9, "flag": " false "},
            {"date": "03/12/2021", "time": "14:00:00", "lat": 40.7, "lon": -73.9, "flag": "Y"},
            {"date": "03/13/2021", "time": "15:00:00", "lat": 40.7, "lon": -73.9, "flag": ""},
        ]
    )
    cleaner = IncidentCleaner()
    cleaned = cleaner.clean(raw)

    assert cleaned["is_lethal"].dtype == "boolean"
    assert cleaned.loc[0, "is_lethal"] == True  # noqa: E712
    assert cleaned.loc[1, "is_lethal"] == False  # noqa: E712
    assert cleaned["is_lethal"].isna().sum() == 2
    assert cleaner.report.unclassified_flags == 2


def test_malformed_time_raises_by_default():
    raw = make_raw(
        [
            {"date": "03/10/2021", "time": "12:00:00", "lat": 40.7, "lon": -73.9},
            {"date": "03/11/2021", "time": "7:05:00", "lat": 40.7, "lon": -73.9},
        ]
    )
    with pytest.raises(MalformedField) as excinfo:
        IncidentCleaner().clean(raw)

    assert excinfo.value.field == "occur_time"
    assert excinfo.value.count == 1
    assert excinfo.value.example == "7:05:00"


def test_malformed_date_raises_by_default():
    raw = make_raw([{"date": "2021-03-10", "time": "12:00:00", "lat": 40.7, "lon": -73.9}])
    with pytest.raises(MalformedField) as excinfo:
        IncidentCleaner().clean(raw)

    assert excinfo.value.field == "occur_date"


def test_malformed_rows_skipped_and_counted():
    raw = make_raw(
        [
            {"date": "03/10/2021", "time": "12:00:00", "lat": 40.7, "lon": -73.9},
            {"date": "13/45/2021", "time": "12:00:00", "lat": 40.7, "lon": -73.9},
            {"date": "03/12/2021", "time": "xx:00:00", "lat": 40.7, "lon": -73.9},
            {"date": "03/13/2021", "time": "25:00:00", "lat": 40.7, "lon": -73.9},
            {"date": "bad", "time": "bad", "lat": None, "lon": -73.9},
        ]
    )
    cleaner = IncidentCleaner(PipelineConfig(on_malformed="skip"))
    cleaned = cleaner.clean(raw)

    assert len(cleaned) == 1
    assert cleaner.report.missing_coordinates == 1
    assert cleaner.report.malformed_rows == 3
    assert cleaner.report.output_rows == 1


def test_missing_required_column():
    raw = make_raw([{"date": "03/10/2021", "time": "12:00:00", "lat": 40.7, "lon": -73.9}])
    with pytest.raises(ValueError, match="Latitude"):
        IncidentCleaner().clean(raw.drop(columns=["Latitude"]))


def test_invalid_malformed_policy():
    with pytest.raises(ValueError):
        PipelineConfig(on_malformed="ignore")
