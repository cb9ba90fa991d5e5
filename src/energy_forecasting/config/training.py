# stdlib
from dataclasses import dataclass, asdict
from typing import Any, Dict
# projectlib
from energy_forecasting.utils.typing import CellType

@dataclass
class TrainingConfig:
    """
    Hyperparameters for training the recurrent forecaster.

    Attributes
    ----------
    epochs : int
        Number of passes over the training windows.
    learning_rate : float
        Adam step size.
    hidden_size : int
        Width of both recurrent layers and the hidden dense layer.
    window : int
        Number of half-hourly observations per training window.
    batch_size : int
        Windows per optimizer step.
    cell : {"lstm", "gru"}
        Recurrent cell family.
    shuffle : bool
        Shuffle training windows each epoch.
    seed : int
        Seed for torch and numpy RNGs, making runs reproducible.
    train_ratio, calib_ratio : float
        Chronological split fractions; the remainder is the test slice.
    """
    epochs: int = 32
    learning_rate: float = 1e-3
    hidden_size: int = 8
    window: int = 32
    batch_size: int = 64
    cell: CellType = "lstm"
    shuffle: bool = True
    seed: int = 0
    train_ratio: float = 2 / 5
    calib_ratio: float = 2 / 5

    def __post_init__(self) -> None:
        if self.epochs < 1:
            raise ValueError(f"epochs must be >= 1, got {self.epochs}")
        if self.learning_rate <= 0:
            raise ValueError(
                f"learning_rate must be positive, got {self.learning_rate}"
            )
        if self.hidden_size < 1 or self.window < 1 or self.batch_size < 1:
            raise ValueError(
                "hidden_size, window and batch_size must be positive"
            )
        if self.cell not in ("lstm", "gru"):
            raise ValueError(f"Unknown recurrent cell {self.cell!r}")
        if not 0 < self.train_ratio + self.calib_ratio < 1:
            raise ValueError(
                "train_ratio + calib_ratio must leave a non-empty test split"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
