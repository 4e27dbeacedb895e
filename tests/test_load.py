import pytest

from conftest import make_raw_customers
from marketing_analysis.src.data.check_data import dataset_status
from marketing_analysis.src.data.load import load_raw_data


def test_load_tab_separated(tmp_path):
    raw = make_raw_customers(20)
    raw.to_csv(tmp_path / "marketing_campaign.csv", sep="\t", index=False)

    df = load_raw_data(data_dir=tmp_path)

    assert df.shape == raw.shape
    assert list(df.columns) == list(raw.columns)


def test_load_falls_back_to_delimiter_detection(tmp_path):
    raw = make_raw_customers(20)
    raw.to_csv(tmp_path / "marketing_campaign.csv", sep=",", index=False)

    df = load_raw_data(data_dir=tmp_path)

    assert df.shape == raw.shape


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_raw_data(data_dir=tmp_path)
    exists, path = dataset_status(tmp_path)
    assert not exists
    assert path == tmp_path / "marketing_campaign.csv"


def test_missing_required_column_raises(tmp_path):
    raw = make_raw_customers(20).drop(columns=["Response"])
    raw.to_csv(tmp_path / "marketing_campaign.csv", sep="\t", index=False)

    with pytest.raises(KeyError, match="Response"):
        load_raw_data(data_dir=tmp_path)
