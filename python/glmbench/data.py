"""
Data Acquisition
================

Fetches the French motor third-party liability frequency table
(``freMTPL2freq``) from OpenML and applies the standard cleaning:

- claim counts capped at 4
- exposure capped at one policy-year
- rows with non-positive exposure dropped
- ``Frequency = ClaimNb / Exposure`` added

Example
-------
>>> from glmbench.data import load_mtpl_frequency
>>> df = load_mtpl_frequency(n_rows=50_000)
>>> df.select("ClaimNb", "Exposure", "Frequency").head()
"""

from __future__ import annotations

from typing import Optional

import polars as pl
from sklearn.datasets import fetch_openml

from glmbench.constants import (
    COUNT_COLUMN,
    DEFAULT_CLAIM_CAP,
    DEFAULT_EXPOSURE_CAP,
    DEFAULT_SAMPLE_SEED,
    EXPOSURE_COLUMN,
    FREQUENCY_COLUMN,
    MTPL_FREQ_OPENML_ID,
)
from glmbench.exceptions import ValidationError
from glmbench.log import logger

__all__ = [
    "fetch_mtpl_frequency",
    "clean_mtpl_frequency",
    "sample_rows",
    "load_mtpl_frequency",
]


def fetch_mtpl_frequency(
    data_id: int = MTPL_FREQ_OPENML_ID,
    n_rows: Optional[int] = None,
) -> pl.DataFrame:
    """
    Fetch the raw MTPL frequency table from OpenML.

    Network and OpenML errors propagate unchanged. scikit-learn keeps its
    own download cache under ``~/scikit_learn_data``.

    Parameters
    ----------
    data_id : int
        OpenML dataset identifier (41214 for freMTPL2freq).
    n_rows : int, optional
        Keep only the first ``n_rows`` rows.
    """
    logger.info("Fetching OpenML dataset {}", data_id)
    frame = fetch_openml(data_id=data_id, as_frame=True, parser="auto").frame

    # Categorical columns arrive as pandas categories, some older uploads
    # with quoted levels ("'R82'")
    for col in frame.columns:
        if not _is_numeric_dtype(frame[col].dtype):
            frame[col] = frame[col].astype(str).str.strip("'")

    df = pl.from_pandas(frame)
    if n_rows is not None:
        df = df.head(n_rows)

    logger.info("Fetched {:,} rows x {} columns", df.height, df.width)
    return df


def _is_numeric_dtype(dtype) -> bool:
    return getattr(dtype, "kind", "O") in "biuf"


def clean_mtpl_frequency(
    df: pl.DataFrame,
    claim_cap: Optional[int] = DEFAULT_CLAIM_CAP,
    exposure_cap: Optional[float] = DEFAULT_EXPOSURE_CAP,
) -> pl.DataFrame:
    """
    Cap counts and exposure, drop zero-exposure rows, derive frequency.

    Parameters
    ----------
    df : pl.DataFrame
        Raw table containing at least ``ClaimNb`` and ``Exposure``.
    claim_cap : int, optional
        Upper bound on claim counts. None disables the cap.
    exposure_cap : float, optional
        Upper bound on exposure (policy-years). None disables the cap.

    Returns
    -------
    pl.DataFrame
        A new frame; the input is not modified.
    """
    missing = [c for c in (COUNT_COLUMN, EXPOSURE_COLUMN) if c not in df.columns]
    if missing:
        raise ValidationError(
            f"Dataset is missing required column(s) {missing}. "
            f"Found: {df.columns}"
        )

    counts = pl.col(COUNT_COLUMN).cast(pl.Float64)
    exposure = pl.col(EXPOSURE_COLUMN).cast(pl.Float64)
    if claim_cap is not None:
        counts = counts.clip(upper_bound=claim_cap)
    if exposure_cap is not None:
        exposure = exposure.clip(upper_bound=exposure_cap)

    n_before = df.height
    out = (
        df.with_columns(counts.alias(COUNT_COLUMN), exposure.alias(EXPOSURE_COLUMN))
        .filter(pl.col(EXPOSURE_COLUMN) > 0)
        .with_columns(
            (pl.col(COUNT_COLUMN) / pl.col(EXPOSURE_COLUMN)).alias(FREQUENCY_COLUMN)
        )
    )

    dropped = n_before - out.height
    if dropped:
        logger.warning("Dropped {:,} rows with non-positive exposure", dropped)

    return out


def sample_rows(df: pl.DataFrame, n: int, seed: int = DEFAULT_SAMPLE_SEED) -> pl.DataFrame:
    """Random subsample without replacement. Returns ``df`` if it is already small enough."""
    if n >= df.height:
        return df
    return df.sample(n=n, seed=seed, shuffle=True)


def load_mtpl_frequency(
    data_id: int = MTPL_FREQ_OPENML_ID,
    n_rows: Optional[int] = None,
    sample: Optional[int] = None,
    seed: int = DEFAULT_SAMPLE_SEED,
) -> pl.DataFrame:
    """Fetch, clean and optionally subsample the MTPL frequency table."""
    df = clean_mtpl_frequency(fetch_mtpl_frequency(data_id, n_rows=n_rows))
    if sample is not None:
        df = sample_rows(df, sample, seed=seed)
        logger.info("Subsampled to {:,} rows (seed={})", df.height, seed)
    return df
