# stdlib
from typing import Any, Callable, Optional
from pathlib import Path
# thirdpartylib
import joblib # pyright: ignore[reportMissingTypeStubs]
import torch
import torch.nn as nn
# projectlib
from energy_forecasting.preprocessing.standardize import TransformMap
from energy_forecasting.utils.typing import Address
from energy_forecasting.utils.paths import validate_address
from energy_forecasting.utils.logging import Logger

def save_model(
        model: Any,
        model_name: str,
        output_dir: Address,
        *,
        logger: Optional[Logger] = None,
    ) -> Path:
    """
    Persist a trained model to disk.

    PyTorch ``nn.Module`` instances are saved via their ``state_dict``
    as ``<model_name>_model_state_dict.pth``; any other object is
    serialized with ``joblib`` as ``<model_name>_model.joblib``.

    Parameters
    ----------
    model : Any
        Trained model object to persist.
    model_name : str
        Base name used to construct the output filename.
    output_dir : Address
        Directory in which the model file is saved; created if needed.
    logger : Logger, optional
        Sink for progress and error messages.

    Returns
    -------
    pathlib.Path
        Location of the written file.
    """
    logger = logger or Logger()
    output_dir = validate_address(output_dir, mkdir=True)
    if isinstance(model, nn.Module):
        address = output_dir / f"{model_name}_model_state_dict.pth"
    else:
        address = output_dir / f"{model_name}_model.joblib"
    try:
        if isinstance(model, nn.Module):
            torch.save(model.state_dict(), address)
        else:
            joblib.dump(  # pyright: ignore[reportUnknownMemberType]
                model,
                address,
            )
    except Exception as exc:
        logger(f"Error saving {model_name} model: {exc}", verbosity=0)
        raise
    logger(f"Saved {model_name} model to: {address}", verbosity=1)
    return address

def load_state_dict[M: nn.Module](
        model_path: Address,
        model_factory: Callable[[], M],
    ) -> M:
    """
    Restore saved weights into a freshly constructed model.

    Parameters
    ----------
    model_path : Address
        Path to a ``.pth`` state dict written by :func:`save_model`.
    model_factory : Callable[[], nn.Module]
        Returns an uninitialized model with the saved architecture.

    Returns
    -------
    nn.Module
        The model with weights loaded, in eval mode.

    Raises
    ------
    FileNotFoundError
        If ``model_path`` does not exist.
    """
    model_path = validate_address(model_path, extension=".pth")
    model = model_factory()
    state = torch.load(model_path, map_location="cpu", weights_only=True)
    model.load_state_dict(state)
    model.eval()
    return model

def save_transforms(
        transforms: TransformMap,
        output_dir: Address,
        *,
        name: str = "transforms",
    ) -> Path:
    """Persist a standardization map with ``joblib``."""
    output_dir = validate_address(output_dir, mkdir=True)
    address = output_dir / f"{name}.joblib"
    joblib.dump(transforms, address)  # pyright: ignore[reportUnknownMemberType]
    return address

def load_transforms(path: Address) -> TransformMap:
    """
    Load a standardization map written by :func:`save_transforms`.

    Raises
    ------
    RuntimeError
        If the file does not hold a mapping of transforms.
    """
    path = validate_address(path, extension=".joblib")
    loaded = joblib.load(path)  # pyright: ignore[reportUnknownMemberType]
    if not isinstance(loaded, dict):
        raise RuntimeError(
            f"Object loaded from '{path}' is not a transform map "
            f"(got {type(loaded).__name__})."
        )
    return loaded
