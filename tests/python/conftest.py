"""Shared fixtures: a synthetic MTPL-shaped portfolio (no network access)."""

import numpy as np
import pandas as pd
import polars as pl
import pytest
from loguru import logger

from glmbench.data import clean_mtpl_frequency
from glmbench.design import build_design

N_POLICIES = 4000
REGIONS = ["R11", "R24", "R52", "R82", "R93"]
BRANDS = ["B1", "B2", "B5", "B12"]
GAS = ["Diesel", "Regular"]


@pytest.fixture(autouse=True)
def silence_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


def make_mtpl_pandas(n=N_POLICIES, seed=2024):
    """Raw frame shaped like OpenML 41214, as fetch_openml returns it."""
    rng = np.random.default_rng(seed)
    region = rng.choice(REGIONS, n)
    brand = rng.choice(BRANDS, n)
    gas = rng.choice(GAS, n)
    drv_age = rng.integers(18, 86, n)
    veh_age = rng.integers(0, 21, n)
    veh_power = rng.integers(4, 13, n)
    density = np.exp(rng.uniform(0.0, 10.0, n)).round().clip(1, None)
    exposure = rng.uniform(0.05, 1.2, n).round(4)

    eta = (
        -1.2
        - 0.01 * (drv_age - 45)
        - 0.02 * veh_age
        + 0.03 * veh_power
        + 0.06 * np.log(density)
        + 0.3 * (region == "R82")
        - 0.2 * (brand == "B12")
        + 0.1 * (gas == "Regular")
    )
    counts = rng.poisson(np.exp(eta) * np.minimum(exposure, 1.0))

    return pd.DataFrame({
        "IDpol": np.arange(1, n + 1, dtype=float),
        "ClaimNb": counts.astype(float),
        "Exposure": exposure,
        "Area": pd.Categorical(rng.choice(["'A'", "'B'", "'C'"], n)),
        "VehPower": veh_power.astype(float),
        "VehAge": veh_age.astype(float),
        "DrivAge": drv_age.astype(float),
        "BonusMalus": rng.integers(50, 150, n).astype(float),
        "VehBrand": pd.Categorical([f"'{b}'" for b in brand]),
        "VehGas": pd.Categorical([f"'{g}'" for g in gas]),
        "Density": density,
        "Region": pd.Categorical([f"'{r}'" for r in region]),
    })


def make_mtpl_frame(n=N_POLICIES, seed=2024):
    """Raw polars frame with quotes already stripped."""
    frame = make_mtpl_pandas(n, seed)
    for col in ("Area", "VehBrand", "VehGas", "Region"):
        frame[col] = frame[col].astype(str).str.strip("'")
    return pl.from_pandas(frame)


@pytest.fixture(scope="module")
def raw_frame():
    return make_mtpl_frame()


@pytest.fixture(scope="module")
def clean_frame(raw_frame):
    return clean_mtpl_frequency(raw_frame)


@pytest.fixture(scope="module")
def design(clean_frame):
    return build_design(clean_frame)
