# stdlib
from typing import Iterable, List, Optional, Tuple
# thirdpartylib
import numpy as np
import pandas as pd
from numpy.typing import NDArray
# projectlib
from energy_forecasting.data.schemas import (
    DEFAULT_SCHEMA,
    FREQ,
    Column,
    FeatureSchema,
)
from energy_forecasting.errors import (
    DimensionMismatchError,
    InvalidRangeError,
    NumericalInstabilityError,
)
from energy_forecasting.models.base import RecurrentSession, SequenceModel
from energy_forecasting.preprocessing.standardize import (
    TransformMap,
    reconstruct_frame,
    standardize_frame,
)
from energy_forecasting.preprocessing.windowing import schema_matrix
from energy_forecasting.utils.logging import Logger
from energy_forecasting.utils.typing import TimestampLike, Verbosity

# Forecasts are issued at 08:30 for the following 24 hours
ISSUE_TIME = pd.Timedelta(hours=8, minutes=30)
HORIZON = pd.Timedelta(hours=24)

def _align_tz(value: TimestampLike, times: pd.Series) -> pd.Timestamp:
    """Express ``value`` in the timezone convention of ``times``."""
    ts = pd.Timestamp(value)
    tz = times.dt.tz
    if tz is not None and ts.tzinfo is None:
        return ts.tz_localize(tz)
    if tz is None and ts.tzinfo is not None:
        return ts.tz_convert("UTC").tz_localize(None)
    return ts

def resolve_range(
        times: pd.Series,
        first: TimestampLike,
        last: TimestampLike,
    ) -> Tuple[int, int]:
    """
    Resolve forecast bounds to row positions.

    The first forecast step is the last row at or before ``first``. The
    last step is the last row strictly before ``last``, so ``last`` is
    exclusive and ``last = first + 24h`` yields 48 half-hourly steps.

    Parameters
    ----------
    times : pd.Series
        Sorted, unique timestamps of the table.
    first, last : TimestampLike
        Requested forecast bounds.

    Returns
    -------
    Tuple[int, int]
        Inclusive ``(first_index, last_index)`` row positions.

    Raises
    ------
    InvalidRangeError
        If no row lies at or before ``first``, ``first`` lies after the
        last row, or the resolved end precedes the resolved start.
    """
    times = pd.to_datetime(times).reset_index(drop=True)
    if not times.is_monotonic_increasing or not times.is_unique:
        raise ValueError("Timestamps must be unique and sorted ascending.")
    start, end = _align_tz(first, times), _align_tz(last, times)
    first_index = int(times.searchsorted(start, side="right")) - 1
    if first_index < 0:
        raise InvalidRangeError(
            f"Forecast start {start} precedes the first available "
            f"observation {times.iloc[0]}."
        )
    if start > times.iloc[-1]:
        raise InvalidRangeError(
            f"Forecast start {start} follows the last available "
            f"observation {times.iloc[-1]}."
        )
    last_index = int(times.searchsorted(end, side="left")) - 1
    if last_index < first_index:
        raise InvalidRangeError(
            f"Forecast end {end} does not follow forecast start {start}."
        )
    return first_index, last_index

def check_dimensions(model: SequenceModel, schema: FeatureSchema) -> None:
    """Fail fast when the model and schema disagree on vector widths."""
    if model.n_inputs != schema.n_inputs:
        raise DimensionMismatchError(
            f"Model expects {model.n_inputs} inputs but the schema "
            f"provides {schema.n_inputs} ({', '.join(schema.inputs)})."
        )
    if model.n_outputs != schema.n_targets:
        raise DimensionMismatchError(
            f"Model emits {model.n_outputs} outputs but the schema has "
            f"{schema.n_targets} targets ({', '.join(schema.targets)})."
        )

def _recorded_step(
        session: RecurrentSession,
        vector: NDArray[np.float32],
        schema: FeatureSchema,
        when: pd.Timestamp,
    ) -> NDArray[np.float32]:
    """Step the session and validate an output that will be kept."""
    out = np.asarray(session.step(vector), dtype=np.float32).reshape(-1)
    if out.size != schema.n_targets:
        raise DimensionMismatchError(
            f"Model returned {out.size} values at {when}, "
            f"expected {schema.n_targets}."
        )
    if not np.all(np.isfinite(out)):
        raise NumericalInstabilityError(
            f"Model produced non-finite output {out.tolist()} at {when}; "
            "the rest of the horizon would be corrupted."
        )
    return out

def forecast(
        table: pd.DataFrame,
        first: TimestampLike,
        last: TimestampLike,
        model: SequenceModel,
        transforms: TransformMap,
        schema: FeatureSchema = DEFAULT_SCHEMA,
        *,
        timestamp: str = Column.TIMESTAMP.value,
        verbosity: Verbosity = 0,
    ) -> pd.DataFrame:
    """
    Forecast target features step by step, feeding predictions back.

    A fresh recurrent session is opened and reset, then driven through
    four phases:

    1. **Warmup**: every observation before the first forecast step is
       replayed with its true values; outputs are discarded. An empty
       warmup (forecast from the first row) is valid.
    2. **Seed**: the true observation at the first step is consumed and
       its output recorded.
    3. **Rollout**: each later step combines the table's exogenous
       features with the previous step's predicted targets, never the
       observed targets, and records the output.
    4. **Finalize**: outputs are labelled with the step timestamps and
       reconstructed to original units.

    The session is discarded afterwards, so repeated or concurrent
    calls on the same model never share recurrent state.

    Parameters
    ----------
    table : pd.DataFrame
        Observations in original units, sorted by ``timestamp``, holding
        history before ``first`` and the exogenous features over the
        forecast range.
    first, last : TimestampLike
        Forecast bounds; see :func:`resolve_range` (``last`` exclusive).
    model : SequenceModel
        Trained model whose widths match ``schema``.
    transforms : TransformMap
        Standardization map fitted on the training data; must cover
        every target.
    schema : FeatureSchema, default DEFAULT_SCHEMA
        Input order and target names.
    timestamp : str, default "timestamp_utc"
        Timestamp column of ``table``.
    verbosity : Verbosity, default 0
        Logging threshold.

    Returns
    -------
    pd.DataFrame
        One row per step: ``timestamp`` followed by the targets in
        original units.

    Raises
    ------
    InvalidRangeError
        If the bounds cannot be resolved against the table.
    DimensionMismatchError
        If model and schema widths disagree.
    NumericalInstabilityError
        If a recorded output contains NaN or infinity.
    KeyError
        If columns or target transforms are missing.
    """
    logger = Logger(verbosity)
    check_dimensions(model, schema)
    if timestamp not in table.columns:
        raise KeyError(f"Table has no timestamp column {timestamp!r}")
    untransformed = [t for t in schema.targets if t not in transforms]
    if untransformed:
        raise KeyError(f"No transform for target features: {untransformed}")
    times = pd.to_datetime(table[timestamp]).reset_index(drop=True)
    first_index, last_index = resolve_range(times, first, last)
    end = _align_tz(last, times)
    if times.iloc[last_index] + pd.Timedelta(FREQ) < end:
        logger(
            f"Table ends at {times.iloc[last_index]}, before the requested "
            f"end {end}; forecast truncated.",
            verbosity=1,
        )
    matrix = schema_matrix(
        standardize_frame(table, transforms, timestamp=timestamp),
        schema,
    )
    exogenous = list(schema.exogenous_positions)
    n_steps = last_index - first_index + 1
    logger(
        f"Forecasting {n_steps} steps from {times.iloc[first_index]} "
        f"after {first_index} warmup steps.",
        verbosity=2,
    )
    # Reset
    session = model.new_session()
    session.reset_state()
    # Warmup
    for i in range(first_index):
        session.step(matrix[i])
    # Seed
    outputs = np.empty((n_steps, schema.n_targets), dtype=np.float32)
    prediction = _recorded_step(
        session, matrix[first_index], schema, times.iloc[first_index]
    )
    outputs[0] = prediction
    # Rollout
    for k, i in enumerate(range(first_index + 1, last_index + 1), start=1):
        vector = schema.compose(matrix[i, exogenous], prediction)
        prediction = _recorded_step(session, vector, schema, times.iloc[i])
        outputs[k] = prediction
    del session
    # Finalize
    frame = pd.DataFrame(outputs, columns=list(schema.targets))
    frame.insert(
        0,
        timestamp,
        times.iloc[first_index:last_index + 1].reset_index(drop=True),
    )
    return reconstruct_frame(frame, transforms)

def forecast_days(
        table: pd.DataFrame,
        model: SequenceModel,
        transforms: TransformMap,
        schema: FeatureSchema = DEFAULT_SCHEMA,
        *,
        days: Optional[Iterable[TimestampLike]] = None,
        issue_time: pd.Timedelta = ISSUE_TIME,
        horizon: pd.Timedelta = HORIZON,
        timestamp: str = Column.TIMESTAMP.value,
        verbosity: Verbosity = 0,
    ) -> pd.DataFrame:
    """
    Issue one day-ahead forecast per calendar day and concatenate them.

    Each run starts at ``day + issue_time`` and covers ``horizon``.
    By default every day in the table except the first (which has no
    history to warm up on) is forecast. Days whose issue time lies after
    the end of the table are skipped.

    Returns
    -------
    pd.DataFrame
        Concatenated forecasts in original units, one row per step.
    """
    logger = Logger(verbosity)
    times = pd.to_datetime(table[timestamp])
    if days is None:
        issue_days = list(times.dt.normalize().drop_duplicates())[1:]
    else:
        issue_days = [_align_tz(d, times).normalize() for d in days]
    final = times.iloc[-1]
    runs: List[pd.DataFrame] = []
    for day in issue_days:
        first = day + issue_time
        if first > final:
            logger(f"No observations after {first}; skipping.", verbosity=1)
            continue
        runs.append(
            forecast(
                table,
                first,
                first + horizon,
                model,
                transforms,
                schema,
                timestamp=timestamp,
                verbosity=verbosity,
            )
        )
        logger(f"Forecast issued for {first}.", verbosity=2)
    if not runs:
        return pd.DataFrame(columns=[timestamp, *schema.targets])
    return pd.concat(runs, ignore_index=True)
