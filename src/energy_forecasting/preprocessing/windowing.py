# stdlib
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
# thirdpartylib
import numpy as np
import pandas as pd
from numpy.typing import NDArray
# projectlib
from energy_forecasting.data.schemas import (
    DEFAULT_SCHEMA,
    FeatureSchema,
    missing_columns,
)
from energy_forecasting.utils.logging import Logger
from energy_forecasting.utils.typing import Verbosity

@dataclass(frozen=True)
class Window:
    """
    One many-to-one training pair.

    Attributes
    ----------
    past : ndarray
        Standardized inputs, shape ``(n_features, window)``, features
        ordered as ``FeatureSchema.inputs``.
    next : ndarray
        Target features of the observation right after the window,
        shape ``(n_targets,)``.
    start : int
        Row position of the first observation in ``past``.
    """
    past: NDArray[np.float32]
    next: NDArray[np.float32]
    start: int

    @property
    def length(self) -> int:
        return self.past.shape[1]

    @property
    def target_row(self) -> int:
        """Row position that supplied ``next``."""
        return self.start + self.length


def schema_matrix(
        table: pd.DataFrame,
        schema: FeatureSchema = DEFAULT_SCHEMA
    ) -> NDArray[np.float32]:
    """
    Extract the schema's input columns as a ``(T, F)`` float32 matrix.

    Raises
    ------
    KeyError
        If the table lacks any of the schema's input columns.
    """
    missing = missing_columns(list(table.columns), schema)
    if missing:
        raise KeyError(f"Table is missing schema columns: {missing}")
    return table.loc[:, list(schema.inputs)].to_numpy(dtype=np.float32)

def make_windows(
        table: pd.DataFrame,
        window: int,
        schema: FeatureSchema = DEFAULT_SCHEMA,
        *,
        verbosity: Verbosity = 0,
    ) -> List[Window]:
    """
    Slice a standardized, time-ordered table into sliding windows.

    Window ``i`` holds rows ``[i, i + window)`` as ``past`` and the
    target features of row ``i + window`` as ``next``. Windows advance
    one row at a time, so a table of ``T`` rows yields ``T - window``
    pairs and every row after the first ``window`` serves as exactly
    one target. No padding is applied.

    Parameters
    ----------
    table : pd.DataFrame
        Standardized observations without gaps, oldest first. Column
        order is irrelevant; ``schema`` fixes the feature order.
    window : int
        Number of observations per window. Must be positive.
    schema : FeatureSchema, default DEFAULT_SCHEMA
        Input and target feature names.
    verbosity : Verbosity, default 0
        Logging threshold.

    Returns
    -------
    List[Window]
        ``max(T - window, 0)`` windows in chronological order. A table
        with ``T <= window`` rows yields an empty list.

    Raises
    ------
    ValueError
        If ``window`` is not a positive integer.
    KeyError
        If the table lacks schema columns.
    """
    if isinstance(window, bool) or not isinstance(window, (int, np.integer)):
        raise ValueError(f"window must be an integer, got {window!r}")
    if window < 1:
        raise ValueError(f"window must be positive, got {window}")
    logger = Logger(verbosity)
    matrix = schema_matrix(table, schema)
    n_rows = matrix.shape[0]
    if n_rows <= window:
        logger(
            f"Table has {n_rows} rows, need more than {window} for a "
            "single window; no windows produced.",
            verbosity=1,
        )
        return []
    targets = list(schema.target_positions)
    windows = [
        Window(
            past=np.ascontiguousarray(matrix[i:i + window].T),
            next=matrix[i + window, targets].copy(),
            start=i,
        )
        for i in range(n_rows - window)
    ]
    logger(
        f"Built {len(windows)} windows of length {window} "
        f"from {n_rows} rows.",
        verbosity=2,
    )
    return windows

def stack_windows(
        windows: Sequence[Window],
        *,
        n_features: Optional[int] = None,
        n_targets: Optional[int] = None,
    ) -> Tuple[NDArray[np.float32], NDArray[np.float32]]:
    """
    Stack windows into batch-first arrays for recurrent training.

    Parameters
    ----------
    windows : Sequence[Window]
        Output of :func:`make_windows`.
    n_features, n_targets : int, optional
        Trailing dimensions to use when ``windows`` is empty.

    Returns
    -------
    X : ndarray
        Shape ``(N, window, n_features)``.
    y : ndarray
        Shape ``(N, n_targets)``.
    """
    if not windows:
        if n_features is None or n_targets is None:
            raise ValueError(
                "Cannot infer array shapes from an empty window list; "
                "pass n_features and n_targets."
            )
        return (
            np.empty((0, 0, n_features), dtype=np.float32),
            np.empty((0, n_targets), dtype=np.float32),
        )
    X = np.stack([w.past.T for w in windows]).astype(np.float32)
    y = np.stack([w.next for w in windows]).astype(np.float32)
    return X, y
