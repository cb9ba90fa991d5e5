# stdlib
from typing import Optional, Sequence
# thirdpartylib
import pandas as pd
import matplotlib as mpl
import matplotlib.pyplot as plt
from cycler import cycler
from matplotlib.axes import Axes
from matplotlib.figure import Figure
# projectlib
from energy_forecasting.data.schemas import Column, pred_column
from energy_forecasting.models.training import TrainingHistory

# One colour per target, shared across every figure
COLOR_MAP = {
    Column.SOLAR.value: "#fe9a00",
    Column.WIND.value: "#1447e6",
    Column.TOTAL_ENERGY.value: "#00bc7d",
    Column.DAP.value: "#ad46ff",
    Column.SSP.value: "#ff2056",
}

def use_dark_theme() -> None:
    """
    Apply a shadcn-inspired dark theme to Matplotlib.

    Updates the global rcParams with a dark palette, subtle gridlines,
    muted text and a line colour cycle matching ``COLOR_MAP``.
    """
    mpl.rcParams.update({
        "figure.facecolor": "#0a0a0a",
        "axes.facecolor": "#171717",
        "axes.edgecolor": "#ffffff1a",
        "axes.labelcolor": "#fafafa",
        "axes.titlecolor": "#fafafa",
        "grid.color": "#ffffff1a",
        "grid.alpha": 0.4,
        "grid.linewidth": 0.2,
        "xtick.color": "#a1a1a1",
        "ytick.color": "#a1a1a1",
        "lines.linewidth": 1.6,
        "text.color": "#e5e7eb",
        "legend.edgecolor": "#ffffff1a",
        "legend.facecolor": "#171717",
        "legend.fontsize": 9,
        "legend.frameon": True,
        "axes.grid": True,
        "axes.prop_cycle": cycler(color=list(COLOR_MAP.values())),
    })

def plot_forecast(
        frame: pd.DataFrame,
        columns: Sequence[str],
        *,
        title: str,
        timestamp: str = Column.TIMESTAMP.value,
        ax: Optional[Axes] = None,
    ) -> Figure:
    """
    Overlay forecasts (dashed) on actual values (faint, solid).

    Parameters
    ----------
    frame : pd.DataFrame
        Output of ``attach_revenue`` holding ``<col>`` and
        ``<col>_pred`` pairs.
    columns : Sequence[str]
        Targets to draw.
    title : str
        Axes title.
    """
    if ax is None:
        fig, ax = plt.subplots(  # pyright: ignore[reportUnknownMemberType]
            figsize=(12, 5)
        )
    else:
        fig = ax.get_figure()
    for col in columns:
        color = COLOR_MAP.get(col)
        ax.plot(  # pyright: ignore[reportUnknownMemberType]
            frame[timestamp], frame[col],
            color=color, alpha=0.5, linewidth=1, label=col,
        )
        ax.plot(  # pyright: ignore[reportUnknownMemberType]
            frame[timestamp], frame[pred_column(col)],
            color=color, linestyle="--", linewidth=2, label=f"{col} (p)",
        )
    ax.set_title(title)  # pyright: ignore[reportUnknownMemberType]
    ax.legend(loc="upper left", bbox_to_anchor=(1.0, 1.0))  # pyright: ignore[reportUnknownMemberType]
    fig.autofmt_xdate()
    return fig

def plot_loss(history: TrainingHistory) -> Figure:
    """Train and test MSE per epoch on a log2 epoch axis."""
    fig, ax = plt.subplots(  # pyright: ignore[reportUnknownMemberType]
        figsize=(8, 4)
    )
    epochs = range(1, len(history.train_loss) + 1)
    ax.plot(epochs, history.train_loss, label="Train")  # pyright: ignore[reportUnknownMemberType]
    ax.plot(epochs, history.test_loss, label="Test")  # pyright: ignore[reportUnknownMemberType]
    ax.set_xscale("log", base=2)
    ax.set_xlabel("Total Training Epochs")  # pyright: ignore[reportUnknownMemberType]
    ax.set_ylabel("Loss (MSE)")  # pyright: ignore[reportUnknownMemberType]
    ax.set_title("Loss Logging")  # pyright: ignore[reportUnknownMemberType]
    ax.legend()  # pyright: ignore[reportUnknownMemberType]
    return fig

def plot_cumulative_revenue(
        frame: pd.DataFrame,
        *,
        timestamp: str = Column.TIMESTAMP.value,
    ) -> Figure:
    """Running revenue of trading the forecast total energy."""
    fig, ax = plt.subplots(  # pyright: ignore[reportUnknownMemberType]
        figsize=(12, 4)
    )
    ax.plot(  # pyright: ignore[reportUnknownMemberType]
        frame[timestamp],
        frame[Column.CUMULATIVE_REVENUE.value],
        color=COLOR_MAP[Column.TOTAL_ENERGY.value],
        linewidth=3,
    )
    ax.set_title("Cumulative Earnings")  # pyright: ignore[reportUnknownMemberType]
    fig.autofmt_xdate()
    return fig

def plot_residuals(residuals: pd.DataFrame, *, bins: int = 40) -> Figure:
    """
    Histogram of forecast residuals, one panel per target.

    Parameters
    ----------
    residuals : pd.DataFrame
        Predicted minus actual per target, as returned by
        :func:`~energy_forecasting.evaluation.revenue.forecast_residuals`.
    bins : int, default 40
        Number of histogram bins.
    """
    columns = list(residuals.columns)
    fig, axes = plt.subplots(  # pyright: ignore[reportUnknownMemberType]
        1, max(len(columns), 1), figsize=(4 * max(len(columns), 1), 3.5),
        squeeze=False,
    )
    for ax, col in zip(axes[0], columns):
        values = residuals[col].dropna()
        ax.hist(  # pyright: ignore[reportUnknownMemberType]
            values, bins=bins, color=COLOR_MAP.get(col), alpha=0.8,
        )
        ax.axvline(0.0, color="#fafafa", linewidth=0.8, linestyle="--")  # pyright: ignore[reportUnknownMemberType]
        ax.set_title(col)  # pyright: ignore[reportUnknownMemberType]
    fig.suptitle("Forecast Residuals")  # pyright: ignore[reportUnknownMemberType]
    fig.tight_layout()
    return fig
