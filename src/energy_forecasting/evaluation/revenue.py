# stdlib
from typing import Dict, Union
# thirdpartylib
import numpy as np
import pandas as pd
from numpy.typing import NDArray
# projectlib
from energy_forecasting.data.schemas import (
    ENERGY_COLS,
    Column,
    pred_column,
)
from energy_forecasting.utils.typing import ArrayLike1D

# Competition approximation of how an imbalance moves the price ($/power)
IMBALANCE_PENALTY = 0.07

type Numeric = Union[float, ArrayLike1D]

def revenue(
        trade: Numeric,
        dap: Numeric,
        actual: Numeric,
        ssp: Numeric,
        k: float = IMBALANCE_PENALTY,
    ) -> Union[float, NDArray[np.float64]]:
    """
    Settlement revenue for one or more trading periods.

    ``trade * dap + (actual - trade) * (ssp - k * (actual - trade))``

    The traded volume is sold at the day-ahead price; any imbalance
    ``actual - trade`` settles at the imbalance price, shifted against
    the trader in proportion to the imbalance.

    +------------------+-----------------------------+------------------------+
    |                  | SSP < DAP                   | SSP > DAP              |
    +==================+=============================+========================+
    | actual < trade   | (+) shortfall bought cheap  | (-) shortfall bought   |
    |                  |                             | dear                   |
    +------------------+-----------------------------+------------------------+
    | actual > trade   | (-) surplus could have gone | (+) surplus sold above |
    |                  | at DAP                      | DAP                    |
    +------------------+-----------------------------+------------------------+

    Parameters
    ----------
    trade : float or array-like
        Traded (predicted) total energy.
    dap : float or array-like
        Day-ahead price.
    actual : float or array-like
        Delivered total energy.
    ssp : float or array-like
        Imbalance (system sell) price.
    k : float, default 0.07
        Imbalance penalty coefficient.

    Returns
    -------
    float or ndarray
        Revenue per period; a float when every input is scalar.
    """
    trade_a = np.asarray(trade, dtype=np.float64)
    dap_a = np.asarray(dap, dtype=np.float64)
    actual_a = np.asarray(actual, dtype=np.float64)
    ssp_a = np.asarray(ssp, dtype=np.float64)
    imbalance = actual_a - trade_a
    out = trade_a * dap_a + imbalance * (ssp_a - k * imbalance)
    if out.ndim == 0:
        return float(out)
    return out

def attach_revenue(
        predictions: pd.DataFrame,
        actuals: pd.DataFrame,
        *,
        timestamp: str = Column.TIMESTAMP.value,
        k: float = IMBALANCE_PENALTY,
    ) -> pd.DataFrame:
    """
    Join forecasts to the ground truth and price each period.

    Forecast columns are suffixed with ``_pred`` and left-joined to the
    actual table on ``timestamp``. The revenue of trading the predicted
    total energy is computed against the actual prices and production,
    together with its running sum.

    Returns
    -------
    pd.DataFrame
        Joined table with ``Revenue`` and ``CumulativeRevenue`` columns.
    """
    renamed = predictions.rename(
        columns={
            col: pred_column(col)
            for col in predictions.columns
            if col != timestamp
        }
    )
    joined = renamed.merge(actuals, on=timestamp, how="left")
    joined[Column.REVENUE.value] = revenue(
        joined[pred_column(Column.TOTAL_ENERGY.value)],
        joined[Column.DAP.value],
        joined[Column.TOTAL_ENERGY.value],
        joined[Column.SSP.value],
        k=k,
    )
    joined[Column.CUMULATIVE_REVENUE.value] = (
        joined[Column.REVENUE.value].cumsum()
    )
    return joined

def _tail(values: ArrayLike1D, alpha: float) -> NDArray[np.float64]:
    if not 0 < alpha <= 1:
        raise ValueError(f"alpha must lie in (0, 1], got {alpha}")
    arr = np.asarray(values, dtype=np.float64).reshape(-1)
    arr = arr[np.isfinite(arr)]
    if arr.size == 0:
        raise ValueError("No finite revenue values to evaluate.")
    return np.sort(arr)

def value_at_risk(values: ArrayLike1D, alpha: float = 0.05) -> float:
    """Revenue level that the worst ``alpha`` share of periods falls below."""
    return float(np.quantile(_tail(values, alpha), alpha))

def conditional_value_at_risk(
        values: ArrayLike1D,
        alpha: float = 0.05
    ) -> float:
    """
    Expected revenue over the worst ``alpha`` share of periods.

    The lower tail holds ``ceil(alpha * n)`` periods (at least one), so
    ``alpha=1`` returns the plain mean.
    """
    ordered = _tail(values, alpha)
    n_tail = max(1, int(np.ceil(alpha * ordered.size)))
    return float(ordered[:n_tail].mean())

def summarize_revenue(
        frame: pd.DataFrame,
        alpha: float = 0.05,
        *,
        column: str = Column.REVENUE.value,
    ) -> Dict[str, float]:
    """Total, mean, VaR and CVaR of a priced forecast table."""
    values = frame[column].to_numpy(dtype=np.float64)
    return {
        "total": float(np.nansum(values)),
        "mean": float(np.nanmean(values)),
        f"VaR_{alpha:g}": value_at_risk(values, alpha),
        f"CVaR_{alpha:g}": conditional_value_at_risk(values, alpha),
    }

def forecast_residuals(frame: pd.DataFrame) -> pd.DataFrame:
    """Predicted minus actual for every target present in ``frame``."""
    return pd.DataFrame({
        col: frame[pred_column(col)] - frame[col]
        for col in ENERGY_COLS
        if pred_column(col) in frame.columns and col in frame.columns
    })
