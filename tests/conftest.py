# stdlib
from typing import List, Optional
# thirdpartylib
import matplotlib
matplotlib.use("Agg")
import numpy as np
import pandas as pd
import pytest
# projectlib
from energy_forecasting.data.schemas import (
    DEFAULT_SCHEMA,
    ENERGY_COLS,
    WEATHER_COLS,
    Column,
    FeatureSchema,
)
from energy_forecasting.models.base import RecurrentSession, SequenceModel
from energy_forecasting.preprocessing.standardize import (
    fit_transforms,
    standardize_frame,
)

START = pd.Timestamp("2024-03-01 00:00:00")

def make_table(n_rows: int, start: pd.Timestamp = START, seed: int = 7) -> pd.DataFrame:
    """Synthetic half-hourly observations in original units."""
    rng = np.random.default_rng(seed)
    times = pd.date_range(start, periods=n_rows, freq="30min")
    hours = times.hour + times.minute / 60
    solar = np.clip(np.sin((hours - 6) / 12 * np.pi), 0, None) * 300
    wind = 400 + 150 * np.sin(np.arange(n_rows) / 17) + rng.normal(0, 10, n_rows)
    frame = pd.DataFrame({
        Column.TIMESTAMP.value: times,
        Column.TEMP.value: 8 + 4 * np.sin(hours / 24 * 2 * np.pi),
        Column.WINDSPEED.value: 20 + rng.normal(0, 3, n_rows),
        Column.WINDDIR.value: rng.uniform(0, 360, n_rows),
        Column.CLOUDCOVER.value: rng.uniform(0, 100, n_rows),
        Column.SOLAR.value: solar,
        Column.WIND.value: wind,
        Column.TOTAL_ENERGY.value: solar + wind,
        Column.DAP.value: 60 + 15 * np.cos(hours / 24 * 2 * np.pi),
        Column.SSP.value: 55 + rng.normal(0, 20, n_rows),
    })
    features = [*WEATHER_COLS, *ENERGY_COLS]
    frame[features] = frame[features].astype(np.float32)
    return frame


@pytest.fixture
def table() -> pd.DataFrame:
    return make_table(200)

@pytest.fixture
def transforms(table):
    return fit_transforms(table)

@pytest.fixture
def standardized(table, transforms) -> pd.DataFrame:
    return standardize_frame(table, transforms)


class RecordingSession(RecurrentSession):
    """Session that records its inputs and delegates outputs to a rule."""

    def __init__(self, model: "ScriptedModel") -> None:
        self.model = model
        self.inputs: List[np.ndarray] = []
        self.resets = 0

    def reset_state(self) -> None:
        self.inputs = []
        self.resets += 1

    def step(self, x):
        x = np.asarray(x, dtype=np.float32).copy()
        self.inputs.append(x)
        return self.model.rule(x, len(self.inputs))


class ScriptedModel(SequenceModel):
    """Hand-written sequence model keeping every session it opened."""

    def __init__(
            self,
            schema: FeatureSchema = DEFAULT_SCHEMA,
            n_inputs: Optional[int] = None,
            n_outputs: Optional[int] = None,
        ) -> None:
        self.schema = schema
        self.n_inputs = schema.n_inputs if n_inputs is None else n_inputs
        self.n_outputs = schema.n_targets if n_outputs is None else n_outputs
        self.sessions: List[RecordingSession] = []

    def new_session(self) -> RecordingSession:
        session = RecordingSession(self)
        self.sessions.append(session)
        return session

    def rule(self, x: np.ndarray, n_seen: int) -> np.ndarray:
        raise NotImplementedError


class SentinelModel(ScriptedModel):
    """Always predicts the same target vector."""
    SENTINEL = np.array([0.11, 0.22, 0.33, 0.44, 0.55], dtype=np.float32)

    def rule(self, x, n_seen):
        return self.SENTINEL.copy()


class IdentityTargetModel(ScriptedModel):
    """Predicts the target slice of its own input."""

    def rule(self, x, n_seen):
        return x[list(self.schema.target_positions)].copy()


class CountingModel(ScriptedModel):
    """Predicts the number of steps seen by the session, scaled down."""

    def rule(self, x, n_seen):
        return np.full(self.n_outputs, n_seen / 1000, dtype=np.float32)


class NaNAfterModel(ScriptedModel):
    """Emits NaN from step ``bad_step`` onward."""

    def __init__(self, bad_step: int) -> None:
        super().__init__()
        self.bad_step = bad_step

    def rule(self, x, n_seen):
        value = np.nan if n_seen >= self.bad_step else 0.5
        return np.full(self.n_outputs, value, dtype=np.float32)


class WrongWidthOutputModel(ScriptedModel):
    def rule(self, x, n_seen):
        return np.zeros(self.n_outputs + 1, dtype=np.float32)
