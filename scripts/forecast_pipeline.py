# stdlib
import argparse
# projectlib
from energy_forecasting.config.env import (
    energy_file,
    weather_file,
    output_root,
)
from energy_forecasting.config.training import TrainingConfig
from energy_forecasting.data.loaders import load_dataset
from energy_forecasting.pipeline import run_pipeline

def parse_args() -> argparse.Namespace:
    """Parse input arguments for the forecasting pipeline."""
    defaults = TrainingConfig()
    parser = argparse.ArgumentParser(
        description="Train the recurrent energy forecaster and evaluate "
                    "day-ahead trading revenue.",
    )
    parser.add_argument(
        "--verbosity",
        type=int,
        default=1,
        choices=(0, 1, 2),
        help=(
            "Verbosity level: "
            "0 = silent, "
            "1 = info, "
            "2 = debug"
        ),
    )
    parser.add_argument(
        "--epochs",
        type=int,
        default=defaults.epochs,
        help="Number of training epochs.",
    )
    parser.add_argument(
        "--learning_rate",
        type=float,
        default=defaults.learning_rate,
        help="Adam learning rate.",
    )
    parser.add_argument(
        "--cell",
        type=str,
        default=defaults.cell,
        choices=("lstm", "gru"),
        help="Recurrent cell family.",
    )
    parser.add_argument(
        "--window",
        type=int,
        default=defaults.window,
        help="Observations per training window.",
    )
    parser.add_argument(
        "--hidden_size",
        type=int,
        default=defaults.hidden_size,
        help="Hidden units per recurrent layer.",
    )
    parser.add_argument(
        "--write_log",
        action="store_true",
        help="Store message/info outputs in a log file.",
    )

    return parser.parse_args()

def main() -> None:
    """
    Entry point for running the forecasting pipeline from the command
    line.

    Reads the energy and weather exports configured in ``.env``, trains
    the forecaster, issues day-ahead forecasts over the test period and
    writes the model, forecasts, metrics and figures under
    ``OUTPUT_ROOT``.
    """
    args = parse_args()
    config = TrainingConfig(
        epochs=args.epochs,
        learning_rate=args.learning_rate,
        hidden_size=args.hidden_size,
        window=args.window,
        cell=args.cell,
    )
    data = load_dataset(
        energy_file(),
        weather_file(),
        verbosity=args.verbosity,
    )
    run_pipeline(
        data,
        output_dir=output_root(),
        config=config,
        verbosity=args.verbosity,
        write_log=args.write_log,
    )

if __name__ == "__main__":
    main()
