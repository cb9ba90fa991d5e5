# stdlib
import math
from typing import Tuple
# thirdpartylib
import polars as pl
import pandas as pd
# projectlib
from energy_forecasting.data.schemas import (
    ENERGY_COLS,
    FREQ,
    WEATHER_COLS,
    Column,
    RawColumn,
)
from energy_forecasting.utils.logging import Logger
from energy_forecasting.utils.paths import validate_address
from energy_forecasting.utils.typing import Address, Verbosity

# Rebase API names -> public names
ENERGY_RENAME = {
    RawColumn.SOLAR.value: Column.SOLAR.value,
    RawColumn.WIND.value: Column.WIND.value,
    RawColumn.DAP.value: Column.DAP.value,
    RawColumn.SSP.value: Column.SSP.value,
}
# Provider forecasts are not used as features
DROPPED_FORECASTS = [
    RawColumn.SOLAR_PRED.value,
    RawColumn.WIND_OFFSHORE_PRED.value,
    RawColumn.WIND_ONSHORE_PRED.value,
]
HOUR_KEY = "temp_time"

def _as_naive_utc(lf: pl.LazyFrame, column: str) -> pl.LazyFrame:
    """Parse ``column`` to a timezone-naive UTC datetime."""
    dtype = lf.collect_schema()[column]
    if dtype == pl.String:
        lf = lf.with_columns(pl.col(column).str.to_datetime())
        dtype = lf.collect_schema()[column]
    if isinstance(dtype, pl.Datetime) and dtype.time_zone is not None:
        lf = lf.with_columns(
            pl.col(column)
            .dt.convert_time_zone("UTC")
            .dt.replace_time_zone(None)
        )
    return lf

def read_energy_csv(source: Address) -> pl.LazyFrame:
    """
    Scan the Rebase API export of generation and prices.

    Rows with any missing value are dropped, provider forecasts are
    removed, columns are renamed to the public schema, and
    ``TotalEnergy = Wind + Solar`` is derived.
    """
    path = validate_address(source, extension=".csv")
    lf = pl.scan_csv(path, try_parse_dates=True)
    lf = _as_naive_utc(lf, RawColumn.TIMESTAMP.value)
    lf = (
        lf
        .drop_nulls()
        .drop(DROPPED_FORECASTS, strict=False)
        .rename(ENERGY_RENAME)
        .with_columns(
            pl.col(list(ENERGY_RENAME.values())).cast(pl.Float32)
        )
        .with_columns(
            (pl.col(Column.WIND.value) + pl.col(Column.SOLAR.value))
            .alias(Column.TOTAL_ENERGY.value)
        )
        .select(Column.TIMESTAMP.value, *ENERGY_COLS)
    )
    return lf

def read_weather_csv(source: Address) -> pl.LazyFrame:
    """Scan the hourly weather export, keeping the modelled variables."""
    path = validate_address(source, extension=".csv")
    lf = pl.scan_csv(path, try_parse_dates=True)
    lf = _as_naive_utc(lf, RawColumn.WEATHER_TIMESTAMP.value)
    return (
        lf
        .select(RawColumn.WEATHER_TIMESTAMP.value, *WEATHER_COLS)
        .with_columns(pl.col(list(WEATHER_COLS)).cast(pl.Float32))
    )

def combine_sources(
        energy: pl.LazyFrame,
        weather: pl.LazyFrame
    ) -> pl.LazyFrame:
    """
    Attach hourly weather to half-hourly energy observations.

    Each energy row is matched to the weather row of its hour. Rows
    left with missing values are dropped, duplicates removed and the
    result sorted by timestamp, with columns ordered as
    ``timestamp, weather..., energy...``.
    """
    return (
        energy
        .with_columns(
            pl.col(Column.TIMESTAMP.value).dt.truncate("1h").alias(HOUR_KEY)
        )
        .join(
            weather,
            left_on=HOUR_KEY,
            right_on=RawColumn.WEATHER_TIMESTAMP.value,
            how="left",
        )
        .drop(HOUR_KEY)
        .drop_nulls()
        .unique(maintain_order=True)
        .sort(Column.TIMESTAMP.value)
        .select(Column.TIMESTAMP.value, *WEATHER_COLS, *ENERGY_COLS)
        .with_columns(
            pl.col([*WEATHER_COLS, *ENERGY_COLS]).cast(pl.Float32)
        )
    )

def validate_observations(
        frame: pd.DataFrame,
        *,
        timestamp: str = Column.TIMESTAMP.value,
        verbosity: Verbosity = 0,
    ) -> pd.DataFrame:
    """
    Check the invariants the modelling code relies on.

    Raises
    ------
    ValueError
        If values are missing or timestamps are unsorted or repeated.

    Notes
    -----
    Gaps in the 30-minute cadence are reported but tolerated: rows with
    missing values are dropped upstream, which leaves holes.
    """
    logger = Logger(verbosity)
    if frame.isna().any().any():
        raise ValueError("Observations contain missing values.")
    times = pd.to_datetime(frame[timestamp])
    if not times.is_monotonic_increasing or not times.is_unique:
        raise ValueError("Timestamps must be unique and sorted ascending.")
    gaps = int((times.diff().dropna() != pd.Timedelta(FREQ)).sum())
    if gaps:
        logger.warning(
            f"{gaps} breaks in the {FREQ} cadence; windows and rollouts "
            "spanning them treat non-adjacent rows as consecutive."
        )
    return frame

def load_dataset(
        energy_source: Address,
        weather_source: Address,
        *,
        verbosity: Verbosity = 0,
    ) -> pd.DataFrame:
    """
    Load, combine and validate the energy and weather exports.

    Returns
    -------
    pd.DataFrame
        Half-hourly observations with ``float32`` features, ready for
        standardization.
    """
    logger = Logger(verbosity)
    combined = combine_sources(
        read_energy_csv(energy_source),
        read_weather_csv(weather_source),
    )
    frame = combined.collect().to_pandas()
    logger(f"Loaded {len(frame)} observations.", verbosity=1)
    return validate_observations(frame, verbosity=verbosity)

def split_dataset(
        frame: pd.DataFrame,
        train_ratio: float = 2 / 5,
        calib_ratio: float = 2 / 5,
    ) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    """
    Split observations chronologically into train, calibration and test.

    The test slice starts at the last calibration row, so the two
    share one observation and the test sequence begins with a known
    state.

    Returns
    -------
    Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]
        ``(train, calib, test)`` with fresh indices.
    """
    if not 0 < train_ratio + calib_ratio < 1:
        raise ValueError(
            "train_ratio + calib_ratio must leave a non-empty test split"
        )
    n = len(frame)
    n_train = math.floor(n * train_ratio)
    n_calib = math.floor(n * calib_ratio)
    train = frame.iloc[:n_train]
    calib = frame.iloc[n_train:n_train + n_calib]
    test = frame.iloc[max(n_train + n_calib - 1, 0):]
    return (
        train.reset_index(drop=True),
        calib.reset_index(drop=True),
        test.reset_index(drop=True),
    )
