# stdlib
from typing import Dict, Iterable
# thirdpartylib
import numpy as np
import pandas as pd
from numpy.typing import NDArray
from sklearn.preprocessing import MinMaxScaler
# projectlib
from energy_forecasting.data.schemas import Column
from energy_forecasting.utils.typing import ArrayLike1D

# Feature name -> fitted unit-range transform
type TransformMap = Dict[str, MinMaxScaler]

def fit_transform(values: ArrayLike1D) -> MinMaxScaler:
    """Fit a [0, 1] unit-range transform to one column of values."""
    arr = np.asarray(values, dtype=np.float64).reshape(-1, 1)
    if arr.size == 0:
        raise ValueError("Cannot fit a transform to an empty column.")
    if not np.all(np.isfinite(arr)):
        raise ValueError("Cannot fit a transform to non-finite values.")
    return MinMaxScaler(feature_range=(0.0, 1.0)).fit(arr)

def apply_transform(
        transform: MinMaxScaler,
        values: ArrayLike1D
    ) -> NDArray[np.float64]:
    """Map original values into the transform's unit range."""
    arr = np.asarray(values, dtype=np.float64).reshape(-1, 1)
    return transform.transform(arr).reshape(-1)

def invert_transform(
        transform: MinMaxScaler,
        values: ArrayLike1D
    ) -> NDArray[np.float64]:
    """
    Map standardized values back to original units.

    Values outside [0, 1] are extrapolated linearly; only values within
    the fitted range are guaranteed to round-trip.
    """
    arr = np.asarray(values, dtype=np.float64).reshape(-1, 1)
    return transform.inverse_transform(arr).reshape(-1)

def fit_transforms(
        frame: pd.DataFrame,
        *,
        exclude: Iterable[str] = (Column.TIMESTAMP.value,),
    ) -> TransformMap:
    """
    Fit one unit-range transform per feature column.

    Parameters
    ----------
    frame : pd.DataFrame
        Table in original units. Columns listed in ``exclude`` are
        skipped; every other column must be numeric.
    exclude : Iterable[str], default ("timestamp_utc",)
        Columns without a transform.

    Returns
    -------
    TransformMap
        Mapping from column name to its fitted transform, kept so that
        predictions made in standardized space can be reconstructed.
    """
    skip = set(exclude)
    return {
        col: fit_transform(frame[col])
        for col in frame.columns
        if col not in skip
    }

def to_decimal_hours(timestamps: pd.Series) -> NDArray[np.float64]:
    """Time of day in hours, e.g. 08:30 -> 8.5."""
    ts = pd.to_datetime(timestamps)
    return (ts.dt.hour + ts.dt.minute / 60.0).to_numpy(dtype=np.float64)

def to_cos_time(timestamps: pd.Series) -> NDArray[np.float32]:
    """
    Encode time of day on a 24 h cycle in the unit range.

    Midnight maps to 1.0 and noon to 0.0:
    ``(cos(2*pi*h/24) + 1) / 2`` with ``h`` in decimal hours.
    """
    hours = to_decimal_hours(timestamps)
    return ((np.cos(hours * 2 * np.pi / 24) + 1) / 2).astype(np.float32)

def standardize_frame(
        frame: pd.DataFrame,
        transforms: TransformMap,
        *,
        timestamp: str = Column.TIMESTAMP.value,
        keep_timestamp: bool = False,
    ) -> pd.DataFrame:
    """
    Standardize every column that has a transform and encode time.

    The timestamp column is replaced by ``cos_time``. Columns without a
    transform pass through unchanged. Transformed columns are stored as
    ``float32``.

    Parameters
    ----------
    frame : pd.DataFrame
        Table in original units.
    transforms : TransformMap
        Fitted transforms from :func:`fit_transforms`.
    timestamp : str, default "timestamp_utc"
        Name of the timestamp column.
    keep_timestamp : bool, default False
        Keep the raw timestamp column next to ``cos_time``.

    Returns
    -------
    pd.DataFrame
        Standardized copy of ``frame``.
    """
    out = frame.copy()
    for col, transform in transforms.items():
        if col in out.columns:
            out[col] = apply_transform(transform, out[col]).astype(np.float32)
    if timestamp in out.columns:
        cos_time = to_cos_time(out[timestamp])
        if not keep_timestamp:
            out = out.drop(columns=timestamp)
        out.insert(0, Column.COS_TIME.value, cos_time)
    return out

def reconstruct_frame(
        frame: pd.DataFrame,
        transforms: TransformMap
    ) -> pd.DataFrame:
    """Inverse of :func:`standardize_frame` for columns with transforms."""
    out = frame.copy()
    for col, transform in transforms.items():
        if col in out.columns:
            out[col] = invert_transform(transform, out[col]).astype(np.float32)
    return out
