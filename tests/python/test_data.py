"""
Tests for data acquisition and cleaning.

fetch_openml is replaced with a stub returning a synthetic frame, so
these tests never touch the network.
"""

from types import SimpleNamespace

import numpy as np
import polars as pl
import pytest

import glmbench.data as data_module
from glmbench.data import (
    clean_mtpl_frequency,
    fetch_mtpl_frequency,
    load_mtpl_frequency,
    sample_rows,
)
from glmbench.exceptions import ValidationError

from conftest import make_mtpl_pandas


@pytest.fixture
def fake_openml(monkeypatch):
    calls = []

    def fake_fetch(data_id, as_frame, parser):
        calls.append(data_id)
        return SimpleNamespace(frame=make_mtpl_pandas(n=500))

    monkeypatch.setattr(data_module, "fetch_openml", fake_fetch)
    return calls


class TestFetch:
    
    def test_returns_polars_with_quotes_stripped(self, fake_openml):
        df = fetch_mtpl_frequency()
        
        assert isinstance(df, pl.DataFrame)
        assert fake_openml == [41214]
        regions = df["Region"].unique().to_list()
        assert all("'" not in r for r in regions)
        assert "R82" in regions
    
    def test_numeric_columns_untouched(self, fake_openml):
        df = fetch_mtpl_frequency()
        assert df["Exposure"].dtype == pl.Float64
        assert df["ClaimNb"].dtype == pl.Float64
    
    def test_n_rows(self, fake_openml):
        df = fetch_mtpl_frequency(n_rows=120)
        assert df.height == 120
    
    def test_custom_data_id(self, fake_openml):
        fetch_mtpl_frequency(data_id=99)
        assert fake_openml == [99]


class TestClean:
    
    def test_caps_and_frequency(self):
        df = pl.DataFrame({
            "ClaimNb": [0, 1, 7, 2],
            "Exposure": [0.5, 2.0, 1.0, 0.25],
        })
        out = clean_mtpl_frequency(df)
        
        assert out["ClaimNb"].to_list() == [0.0, 1.0, 4.0, 2.0]
        assert out["Exposure"].to_list() == [0.5, 1.0, 1.0, 0.25]
        np.testing.assert_allclose(out["Frequency"].to_numpy(), [0.0, 1.0, 4.0, 8.0])
    
    def test_drops_zero_exposure(self):
        df = pl.DataFrame({"ClaimNb": [0, 1, 0], "Exposure": [0.0, 0.5, -0.1]})
        out = clean_mtpl_frequency(df)
        assert out.height == 1
        assert out["Frequency"].to_list() == [2.0]
    
    def test_caps_can_be_disabled(self):
        df = pl.DataFrame({"ClaimNb": [9], "Exposure": [3.0]})
        out = clean_mtpl_frequency(df, claim_cap=None, exposure_cap=None)
        assert out["ClaimNb"].to_list() == [9.0]
        assert out["Frequency"].to_list() == [3.0]
    
    def test_input_not_modified(self):
        df = pl.DataFrame({"ClaimNb": [7], "Exposure": [2.0]})
        clean_mtpl_frequency(df)
        assert df["ClaimNb"].to_list() == [7]
    
    def test_missing_column(self):
        with pytest.raises(ValidationError, match="Exposure"):
            clean_mtpl_frequency(pl.DataFrame({"ClaimNb": [1]}))


class TestSample:
    
    def test_sample_is_reproducible(self, clean_frame):
        a = sample_rows(clean_frame, 100, seed=1)
        b = sample_rows(clean_frame, 100, seed=1)
        assert a.height == 100
        assert a.equals(b)
    
    def test_sample_larger_than_frame(self, clean_frame):
        assert sample_rows(clean_frame, clean_frame.height + 10) is clean_frame


def test_load_pipeline(fake_openml):
    df = load_mtpl_frequency(sample=200, seed=3)
    assert df.height == 200
    assert "Frequency" in df.columns
    assert df["Exposure"].max() <= 1.0
    assert df["ClaimNb"].max() <= 4
