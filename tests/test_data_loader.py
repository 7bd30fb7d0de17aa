"""Tests for the CSV loader and schema checks."""

import pytest
from loguru import logger

from telco_churn.data import DataLoader, load_dataset
from telco_churn.exceptions import LoadError, SchemaError


@pytest.fixture
def error_log():
    messages = []
    sink_id = logger.add(messages.append, level="ERROR", format="{message}")
    yield messages
    logger.remove(sink_id)


def test_load_dataset_reads_all_rows(tmp_path, telco_df):
    path = tmp_path / "telco.csv"
    telco_df.to_csv(path, index=False)

    df = load_dataset(path)

    assert len(df) == len(telco_df)
    assert list(df.columns) == list(telco_df.columns)


def test_blank_total_charges_survive_loading(tmp_path, telco_df):
    path = tmp_path / "telco.csv"
    telco_df.to_csv(path, index=False)

    df = load_dataset(path)

    assert (df["TotalCharges"].astype(str).str.strip() == "").sum() == (telco_df["tenure"] == 0).sum()


def test_missing_file_raises_load_error(tmp_path):
    with pytest.raises(LoadError, match="not found"):
        load_dataset(tmp_path / "nope.csv")


def test_empty_file_raises_load_error(tmp_path, error_log):
    path = tmp_path / "empty.csv"
    path.write_text("")

    with pytest.raises(LoadError):
        load_dataset(path)

    assert any("empty" in message for message in error_log)


def test_header_only_file_raises_load_error(tmp_path, error_log):
    path = tmp_path / "header.csv"
    path.write_text("customerID,tenure,Churn\n")

    with pytest.raises(LoadError, match="zero rows"):
        load_dataset(path)

    assert any("zero rows" in message for message in error_log)


def test_loader_accepts_absolute_path(tmp_path, telco_df, config):
    path = tmp_path / "telco.csv"
    telco_df.head(20).to_csv(path, index=False)

    df = DataLoader(config).load_raw_data(str(path))

    assert len(df) == 20


def test_require_columns_names_every_missing_column(telco_df):
    df = telco_df.drop(columns=["Churn", "tenure"])

    with pytest.raises(SchemaError) as exc_info:
        DataLoader.require_columns(df, ["Churn", "tenure", "gender"])

    assert "Churn" in str(exc_info.value)
    assert "tenure" in str(exc_info.value)
    assert "gender" not in str(exc_info.value)


def test_validate_data_reports_target_distribution(telco_df, config):
    results = DataLoader(config).validate_data(telco_df)

    assert results["total_rows"] == len(telco_df)
    assert results["duplicates"] == 0
    assert sum(results["target_distribution"].values()) == len(telco_df)
