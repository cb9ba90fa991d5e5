# stdlib
import json
from dataclasses import dataclass
from typing import Dict, Optional
# thirdpartylib
import pandas as pd
import matplotlib.pyplot as plt
# projectlib
from energy_forecasting.config.training import TrainingConfig
from energy_forecasting.data.loaders import split_dataset
from energy_forecasting.data.schemas import (
    DEFAULT_SCHEMA,
    Column,
    FeatureSchema,
)
from energy_forecasting.evaluation.metrics import forecast_errors
from energy_forecasting.evaluation.revenue import (
    attach_revenue,
    forecast_residuals,
    summarize_revenue,
)
from energy_forecasting.models.forecasting import RecurrentRegressor
from energy_forecasting.models.io import save_model, save_transforms
from energy_forecasting.models.rollout import forecast_days
from energy_forecasting.models.training import (
    TrainingHistory,
    build_model,
    train_model,
)
from energy_forecasting.preprocessing.standardize import (
    TransformMap,
    fit_transforms,
    standardize_frame,
)
from energy_forecasting.preprocessing.windowing import make_windows
from energy_forecasting.utils.logging import Logger
from energy_forecasting.utils.paths import validate_address
from energy_forecasting.utils.typing import Address, Verbosity
from energy_forecasting.visualization.timeseries import (
    plot_cumulative_revenue,
    plot_forecast,
    plot_loss,
    plot_residuals,
    use_dark_theme,
)

@dataclass
class PipelineResult:
    model: RecurrentRegressor
    transforms: TransformMap
    history: TrainingHistory
    predictions: pd.DataFrame
    errors: pd.DataFrame
    revenue: Dict[str, float]


def _save_figures(
        result: PipelineResult,
        output_dir: Address,
        logger: Logger,
    ) -> None:
    use_dark_theme()
    out_dir = validate_address(output_dir, mkdir=True)
    figures = {
        "loss.png": plot_loss(result.history),
        "energy_forecast.png": plot_forecast(
            result.predictions,
            [
                Column.SOLAR.value,
                Column.WIND.value,
                Column.TOTAL_ENERGY.value,
            ],
            title="Energy: Actual vs Forecast",
        ),
        "price_forecast.png": plot_forecast(
            result.predictions,
            [Column.DAP.value, Column.SSP.value],
            title="Prices: Actual vs Forecast",
        ),
        "cumulative_revenue.png": plot_cumulative_revenue(result.predictions),
        "residuals.png": plot_residuals(
            forecast_residuals(result.predictions)
        ),
    }
    for name, fig in figures.items():
        fig.savefig(out_dir / name, dpi=150)  # pyright: ignore[reportUnknownMemberType]
        plt.close(fig)
    logger(f"Saved {len(figures)} figures to: {out_dir}", verbosity=1)

def run_pipeline(
        data: pd.DataFrame,
        output_dir: Optional[Address] = None,
        config: Optional[TrainingConfig] = None,
        schema: FeatureSchema = DEFAULT_SCHEMA,
        *,
        alpha: float = 0.05,
        verbosity: Verbosity = 0,
        write_log: bool = False,
    ) -> PipelineResult:
    """
    Train the recurrent forecaster and evaluate day-ahead trading.

    Steps:

    1. Split observations chronologically (train / calibration / test).
    2. Fit the standardization map on the full table, so every observed
       value maps into the sigmoid output range.
    3. Build sliding windows for the train and test slices and train.
    4. Issue an 08:30 day-ahead forecast for every test day, warming up
       on all earlier observations, and keep the steps inside the test
       slice.
    5. Price each forecast period and score the forecasts.

    Parameters
    ----------
    data : pd.DataFrame
        Combined observations from
        :func:`~energy_forecasting.data.loaders.load_dataset`.
    output_dir : Address, optional
        When given, the model, transforms, tables and figures are
        written here.
    config : TrainingConfig, optional
        Hyperparameters; defaults to ``TrainingConfig()``.
    schema : FeatureSchema, default DEFAULT_SCHEMA
        Input and target features.
    alpha : float, default 0.05
        Tail share for VaR and CVaR.
    verbosity : Verbosity, default 0
        Logging threshold.
    write_log : bool, default False
        Write log messages to ``output_dir`` instead of stdout.

    Returns
    -------
    PipelineResult
        Trained model, transforms, training history, priced forecasts,
        per-target errors and the revenue summary.
    """
    config = config or TrainingConfig()
    logger = Logger(
        verbosity,
        output_dir,
        write_log and output_dir is not None,
    )
    logger(f"Training configuration: {config.to_dict()}", verbosity=1)
    train, _, test = split_dataset(
        data, config.train_ratio, config.calib_ratio
    )
    logger(
        f"Split {len(data)} observations: {len(train)} train, "
        f"{len(test)} test.",
        verbosity=1,
    )
    transforms = fit_transforms(data)
    train_windows = make_windows(
        standardize_frame(train, transforms),
        config.window,
        schema,
        verbosity=verbosity,
    )
    test_windows = make_windows(
        standardize_frame(test, transforms),
        config.window,
        schema,
        verbosity=verbosity,
    )
    model = build_model(config, schema)
    history = train_model(model, train_windows, test_windows, config, logger)
    test_days = list(
        pd.to_datetime(test[Column.TIMESTAMP.value])
        .dt.normalize()
        .drop_duplicates()
    )
    predictions = forecast_days(
        data,
        model,
        transforms,
        schema,
        days=test_days,
        verbosity=verbosity,
    )
    # The first test day's run may start inside the calibration slice
    test_start = pd.to_datetime(test[Column.TIMESTAMP.value]).iloc[0]
    predictions = predictions[
        pd.to_datetime(predictions[Column.TIMESTAMP.value]) >= test_start
    ].reset_index(drop=True)
    priced = attach_revenue(predictions, data)
    errors = forecast_errors(priced, schema.targets)
    summary = summarize_revenue(priced, alpha)
    logger(f"Revenue summary: {summary}", verbosity=0)
    result = PipelineResult(
        model=model,
        transforms=transforms,
        history=history,
        predictions=priced,
        errors=errors,
        revenue=summary,
    )
    if output_dir is not None:
        out_dir = validate_address(output_dir, mkdir=True)
        save_model(model, config.cell, out_dir, logger=logger)
        save_transforms(transforms, out_dir)
        priced.to_csv(out_dir / "forecasts.csv", index=False)
        errors.to_csv(out_dir / "errors.csv")
        history.as_dataframe().to_csv(out_dir / "loss.csv")
        with open(out_dir / "revenue.json", "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)
        _save_figures(result, out_dir, logger)
        logger(f"Artifacts saved in: {out_dir}", verbosity=1)
    return result
