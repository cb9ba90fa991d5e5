# thirdpartylib
import joblib
import numpy as np
import pytest
import torch
# projectlib
from energy_forecasting.models.forecasting import RecurrentRegressor
from energy_forecasting.models.io import (
    load_state_dict,
    load_transforms,
    save_model,
    save_transforms,
)
from energy_forecasting.preprocessing.standardize import apply_transform

def test_model_round_trip(tmp_path):
    torch.manual_seed(0)
    model = RecurrentRegressor(10, 8, 5)
    path = save_model(model, "lstm", tmp_path / "models")

    assert path.name == "lstm_model_state_dict.pth"
    restored = load_state_dict(path, lambda: RecurrentRegressor(10, 8, 5))
    assert not restored.training
    x = torch.rand(2, 4, 10)
    with torch.no_grad():
        torch.testing.assert_close(restored(x), model.eval()(x))

def test_non_torch_models_use_joblib(tmp_path):
    path = save_model({"weights": [1, 2]}, "baseline", tmp_path)
    assert path.suffix == ".joblib"
    assert joblib.load(path) == {"weights": [1, 2]}

def test_load_missing_model(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_state_dict(tmp_path / "absent.pth", lambda: RecurrentRegressor(10, 8, 5))

def test_transforms_round_trip(tmp_path, transforms):
    path = save_transforms(transforms, tmp_path)
    restored = load_transforms(path)
    assert set(restored) == set(transforms)
    np.testing.assert_allclose(
        apply_transform(restored["SSP"], [10.0, 50.0]),
        apply_transform(transforms["SSP"], [10.0, 50.0]),
    )

def test_load_transforms_rejects_other_objects(tmp_path):
    path = tmp_path / "transforms.joblib"
    joblib.dump([1, 2, 3], path)
    with pytest.raises(RuntimeError):
        load_transforms(path)
