"""
Tests for the shared design matrix.

The design is the one thing every solver must agree on, so these tests
pin its layout: intercept first, numeric columns, log density, then
reference-coded indicators.
"""

import numpy as np
import polars as pl
import pytest

from glmbench.design import Design, build_design, categorical_levels
from glmbench.exceptions import ValidationError

from conftest import BRANDS, GAS, REGIONS


class TestLayout:
    
    def test_column_names(self, design):
        expected_indicators = (
            [f"Region[{r}]" for r in sorted(REGIONS)[1:]]
            + [f"VehBrand[{b}]" for b in sorted(BRANDS)[1:]]
            + [f"VehGas[{g}]" for g in sorted(GAS)[1:]]
        )
        assert design.feature_names == [
            "Intercept", "DrivAge", "VehAge", "VehPower", "log(Density)",
            *expected_indicators,
        ]
    
    def test_shapes(self, design, clean_frame):
        n = clean_frame.height
        assert design.X.shape == (n, len(design.feature_names))
        assert design.y.shape == (n,)
        assert design.weights.shape == (n,)
        assert design.n_obs == n
        assert design.n_features == design.X.shape[1]
    
    def test_intercept_column(self, design):
        np.testing.assert_array_equal(design.X[:, 0], 1.0)
    
    def test_log_density(self, design, clean_frame):
        j = design.feature_names.index("log(Density)")
        np.testing.assert_allclose(design.X[:, j], np.log(clean_frame["Density"].to_numpy()))
    
    def test_indicators_are_reference_coded(self, design, clean_frame):
        # the reference level "R11" has no column; its rows are all-zero across Region[*]
        region_cols = [j for j, n in enumerate(design.feature_names) if n.startswith("Region[")]
        is_ref = clean_frame["Region"].to_numpy() == "R11"
        assert np.all(design.X[is_ref][:, region_cols] == 0)
        assert np.all(design.X[~is_ref][:, region_cols].sum(axis=1) == 1)
    
    def test_response_and_weights(self, design, clean_frame):
        np.testing.assert_array_equal(design.y, clean_frame["Frequency"].to_numpy())
        np.testing.assert_array_equal(design.weights, clean_frame["Exposure"].to_numpy())
        np.testing.assert_allclose(design.counts, clean_frame["ClaimNb"].to_numpy())
    
    def test_contiguous_float64(self, design):
        assert design.X.dtype == np.float64
        assert design.X.flags["C_CONTIGUOUS"]


class TestDeterminism:
    
    def test_rebuild_is_identical(self, clean_frame, design):
        again = build_design(clean_frame)
        assert again.feature_names == design.feature_names
        assert again.X.tobytes() == design.X.tobytes()
    
    def test_row_order_does_not_change_columns(self, clean_frame, design):
        shuffled = build_design(clean_frame.reverse())
        assert shuffled.feature_names == design.feature_names


class TestErrors:
    
    def test_missing_column(self, clean_frame):
        with pytest.raises(ValidationError, match="VehGas"):
            build_design(clean_frame.drop("VehGas"))
    
    def test_single_level_categorical(self, clean_frame):
        df = clean_frame.with_columns(pl.lit("Diesel").alias("VehGas"))
        with pytest.raises(ValidationError, match="only 1 level"):
            build_design(df)
    
    def test_non_positive_density(self, clean_frame):
        df = clean_frame.with_columns(pl.lit(0.0).alias("Density"))
        with pytest.raises(ValidationError, match="log-transformed"):
            build_design(df)


def test_categorical_levels_sorted(clean_frame):
    assert categorical_levels(clean_frame, "VehBrand") == sorted(BRANDS)


def test_to_dataframe(design):
    df = design.to_dataframe()
    assert df.columns == [*design.feature_names, "Frequency", "Exposure"]
    assert df.height == design.n_obs
