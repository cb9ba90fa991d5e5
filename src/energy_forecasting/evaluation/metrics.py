# stdlib
from typing import Optional, Sequence
# thirdpartylib
import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, root_mean_squared_error
# projectlib
from energy_forecasting.data.schemas import ENERGY_COLS, pred_column
from energy_forecasting.utils.typing import ArrayLike1D

def safe_mape(
        y_true: ArrayLike1D,
        y_pred: ArrayLike1D,
        eps: float = 1e-6
    ) -> float:
    """
    Numerically safe Mean Absolute Percentage Error (MAPE).

    The denominator is ``max(|y_true|, eps)``: imbalance prices can be
    negative and solar output is zero overnight, so both signs and
    zeros must be tolerated.

    Returns
    -------
    float
        MAPE expressed as a percentage.
    """
    y_true = np.asarray(y_true, dtype=np.float64)
    y_pred = np.asarray(y_pred, dtype=np.float64)
    return float(
        np.mean(
            np.abs((y_true - y_pred) / np.maximum(eps, np.abs(y_true)))
        ) * 100.0
    )

def strict_r2(
    y_true: ArrayLike1D,
    y_pred: ArrayLike1D,
    eps: float = 1e-12
) -> float:
    """
    Coefficient of determination without fallback conventions.

        R² = 1 - Σ(y_true - y_pred)² / Σ(y_true - ȳ_true)²

    Unlike :func:`sklearn.metrics.r2_score`, a (near) constant
    ``y_true`` returns ``NaN`` instead of 0.0 or 1.0, so undefined
    scores surface explicitly.
    """
    y_true = np.asarray(y_true, dtype=np.float64)
    y_pred = np.asarray(y_pred, dtype=np.float64)
    denom = np.sum((y_true - y_true.mean()) ** 2)
    if denom <= eps:
        return float("nan")

    return float(1.0 - np.sum((y_true - y_pred) ** 2) / denom)

def forecast_errors(
        frame: pd.DataFrame,
        columns: Optional[Sequence[str]] = None,
    ) -> pd.DataFrame:
    """
    Per-target error table for forecasts joined to actuals.

    Parameters
    ----------
    frame : pd.DataFrame
        Output of :func:`~energy_forecasting.evaluation.revenue.attach_revenue`
        holding ``<col>`` and ``<col>_pred`` pairs.
    columns : Sequence[str], optional
        Targets to score; defaults to every energy and price column.

    Returns
    -------
    pd.DataFrame
        One row per target with ``MAE``, ``RMSE``, ``MAPE`` and ``R2``.
        Rows lacking an actual value are ignored.
    """
    rows = {}
    for col in columns or ENERGY_COLS:
        pair = frame[[col, pred_column(col)]].dropna()
        if pair.empty:
            continue
        y_true, y_pred = pair[col], pair[pred_column(col)]
        rows[col] = {
            "MAE": mean_absolute_error(y_true, y_pred),
            "RMSE": root_mean_squared_error(y_true, y_pred),
            "MAPE": safe_mape(y_true, y_pred),
            "R2": strict_r2(y_true, y_pred),
        }
    table = pd.DataFrame.from_dict(rows, orient="index")
    table.index.name = "target"
    return table
