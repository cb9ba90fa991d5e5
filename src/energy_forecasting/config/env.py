# stdlib
import os
from pathlib import Path
from typing import Optional
# thirdpartylib
from dotenv import load_dotenv

def fetch_var(name: str, default: Optional[str] = None) -> str:
    """
    Fetch an environment variable or fail loudly.

    A ``default`` makes the variable optional; without one, an unset or
    empty variable raises ``RuntimeError``.
    """
    value = os.environ.get(name, "").strip()
    if value:
        return value
    if default is not None:
        return default
    if name in os.environ:
        raise RuntimeError(f"Environment variable '{name}' is empty.")
    raise RuntimeError(
        f"Environment variable '{name}' is not set. "
        "Create a .env file or define the variable."
    )


# Load env variables
load_dotenv()

def data_root() -> Path:
    """Directory holding the energy and weather CSV exports."""
    return Path(fetch_var("DATA_ROOT"))

def energy_file() -> Path:
    """Rebase API export with generation and price columns."""
    return data_root() / fetch_var("ENERGY_FILE", "data_rebase.csv")

def weather_file() -> Path:
    """Hourly weather export for the site."""
    return data_root() / fetch_var(
        "WEATHER_FILE",
        "hornsea 2024-02-29 to 2024-04-06.csv",
    )

def output_root() -> Path:
    """Directory that receives models, forecasts and figures."""
    return Path(
        fetch_var(
            "OUTPUT_ROOT",
            str(Path.cwd() / "outputs" / "forecasting"),
        )
    )
