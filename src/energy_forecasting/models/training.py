# stdlib
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
# thirdpartylib
import numpy as np
import pandas as pd
import torch
import torch.nn as nn
from torch.utils.data import DataLoader, TensorDataset
# projectlib
from energy_forecasting.config.training import TrainingConfig
from energy_forecasting.data.schemas import DEFAULT_SCHEMA, FeatureSchema
from energy_forecasting.models.forecasting import RecurrentRegressor
from energy_forecasting.preprocessing.windowing import Window, stack_windows
from energy_forecasting.utils.logging import Logger

@dataclass
class TrainingHistory:
    """Mean MSE per epoch; index 0 holds the untrained model's loss."""
    train_loss: List[float] = field(default_factory=list)
    test_loss: List[float] = field(default_factory=list)
    skipped_updates: int = 0

    def as_dataframe(self) -> pd.DataFrame:
        frame = pd.DataFrame(
            {"train": self.train_loss, "test": self.test_loss}
        )
        frame.index.name = "epoch"
        return frame


def set_seed(seed: int) -> None:
    """Seed numpy and torch so training runs are reproducible."""
    np.random.seed(seed)
    torch.manual_seed(seed)

def build_model(
        config: TrainingConfig,
        schema: FeatureSchema = DEFAULT_SCHEMA,
    ) -> RecurrentRegressor:
    """Construct an untrained regressor sized for ``schema``."""
    set_seed(config.seed)
    return RecurrentRegressor(
        input_size=schema.n_inputs,
        hidden_size=config.hidden_size,
        output_size=schema.n_targets,
        cell=config.cell,
    )

def _to_loader(
        windows: Sequence[Window],
        batch_size: int,
        shuffle: bool,
    ) -> DataLoader:
    X, y = stack_windows(windows)
    dataset = TensorDataset(
        torch.tensor(X, dtype=torch.float32),
        torch.tensor(y, dtype=torch.float32),
    )
    return DataLoader(dataset, batch_size=batch_size, shuffle=shuffle)

def evaluate_loss(
        model: RecurrentRegressor,
        windows: Sequence[Window],
        batch_size: int = 256,
    ) -> float:
    """Mean squared error of ``model`` over ``windows``."""
    if not windows:
        return float("nan")
    criterion = nn.MSELoss(reduction="sum")
    loader = _to_loader(windows, batch_size, shuffle=False)
    total, count = 0.0, 0
    model.eval()
    with torch.no_grad():
        for xb, yb in loader:
            total += float(criterion(model(xb), yb))
            count += yb.numel()
    return total / count

def train_model(
        model: RecurrentRegressor,
        train: Sequence[Window],
        test: Sequence[Window],
        config: TrainingConfig,
        logger: Optional[Logger] = None,
    ) -> TrainingHistory:
    """
    Fit ``model`` on sliding windows with Adam and MSE loss.

    Every output feature is weighted equally in the loss, which is why
    all features are standardized to the unit range beforehand. A batch
    whose loss is NaN or infinite is logged and its update skipped, so
    one bad batch cannot poison the weights.

    Parameters
    ----------
    model : RecurrentRegressor
        Model to train in place.
    train, test : Sequence[Window]
        Training and evaluation windows from
        :func:`~energy_forecasting.preprocessing.windowing.make_windows`.
    config : TrainingConfig
        Epochs, learning rate, batch size and shuffling.
    logger : Logger, optional
        Progress sink; a silent logger is used when omitted.

    Returns
    -------
    TrainingHistory
        Per-epoch mean train and test loss, preceded by the loss of the
        untrained model.

    Raises
    ------
    ValueError
        If ``train`` is empty.
    """
    if not train:
        raise ValueError("No training windows; the training split is too short.")
    logger = logger or Logger()
    set_seed(config.seed)
    criterion = nn.MSELoss()
    optimizer = torch.optim.Adam(model.parameters(), lr=config.learning_rate)
    loader = _to_loader(train, config.batch_size, config.shuffle)
    history = TrainingHistory(
        train_loss=[evaluate_loss(model, train)],
        test_loss=[evaluate_loss(model, test)],
    )
    for epoch in range(1, config.epochs + 1):
        model.train()
        batch_losses: List[float] = []
        for xb, yb in loader:
            optimizer.zero_grad()
            loss = criterion(model(xb), yb)
            value = float(loss.detach())
            if not math.isfinite(value):
                logger.warning(
                    f"Loss value {value} is invalid at epoch {epoch}; "
                    "skipping update."
                )
                history.skipped_updates += 1
                continue
            loss.backward()
            optimizer.step()  # pyright: ignore[reportUnknownMemberType]
            batch_losses.append(value)
        train_loss = (
            float(np.mean(batch_losses)) if batch_losses else float("nan")
        )
        test_loss = evaluate_loss(model, test)
        history.train_loss.append(train_loss)
        history.test_loss.append(test_loss)
        logger(
            f"Epoch {epoch}/{config.epochs}: train MSE {train_loss:.5f}, "
            f"test MSE {test_loss:.5f}",
            verbosity=1,
        )
    model.eval()
    return history
