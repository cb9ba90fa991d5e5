# stdlib
import math
# thirdpartylib
import numpy as np
import pytest
# projectlib
from energy_forecasting.config.training import TrainingConfig
from energy_forecasting.models.training import (
    build_model,
    evaluate_loss,
    train_model,
)
from energy_forecasting.preprocessing.windowing import make_windows

@pytest.fixture
def windows(standardized):
    return make_windows(standardized, 8)

def test_history_has_untrained_entry_plus_one_per_epoch(windows):
    config = TrainingConfig(epochs=3, window=8, batch_size=32)
    model = build_model(config)
    history = train_model(model, windows[:150], windows[150:], config)

    assert len(history.train_loss) == 4
    assert len(history.test_loss) == 4
    assert all(math.isfinite(v) for v in history.train_loss)
    assert history.skipped_updates == 0
    frame = history.as_dataframe()
    assert frame.index.name == "epoch"
    assert list(frame.columns) == ["train", "test"]

def test_training_reduces_loss(windows):
    config = TrainingConfig(epochs=15, window=8, batch_size=16, learning_rate=1e-2)
    model = build_model(config)
    history = train_model(model, windows, [], config)
    assert history.train_loss[-1] < history.train_loss[0]
    assert np.isnan(history.test_loss[-1])

def test_training_is_reproducible(windows):
    config = TrainingConfig(epochs=2, window=8, batch_size=32, seed=5)
    losses = []
    for _ in range(2):
        model = build_model(config)
        train_model(model, windows, [], config)
        losses.append(evaluate_loss(model, windows))
    assert losses[0] == pytest.approx(losses[1])

def test_empty_training_set_is_rejected():
    config = TrainingConfig(epochs=1)
    with pytest.raises(ValueError):
        train_model(build_model(config), [], [], config)

@pytest.mark.parametrize(
    "overrides",
    [
        {"epochs": 0},
        {"learning_rate": 0.0},
        {"hidden_size": 0},
        {"window": 0},
        {"cell": "rnn"},
        {"train_ratio": 0.6, "calib_ratio": 0.4},
    ],
)
def test_config_validation(overrides):
    with pytest.raises(ValueError):
        TrainingConfig(**overrides)

def test_config_round_trips_to_dict():
    config = TrainingConfig(epochs=4, cell="gru")
    assert TrainingConfig(**config.to_dict()) == config
