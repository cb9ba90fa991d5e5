# stdlib
from enum import Enum
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple
# thirdpartylib
import numpy as np
from numpy.typing import NDArray

class Column(str, Enum):
    """Public column identifiers of the combined half-hourly table."""
    TIMESTAMP = 'timestamp_utc'
    COS_TIME = 'cos_time'
    # Weather
    TEMP = 'temp'
    WINDSPEED = 'windspeed'
    WINDDIR = 'winddir'
    CLOUDCOVER = 'cloudcover'
    # Generation
    SOLAR = 'Solar'
    WIND = 'Wind'
    TOTAL_ENERGY = 'TotalEnergy'
    # Market prices
    DAP = 'DAP'
    SSP = 'SSP'
    # Evaluation
    REVENUE = 'Revenue'
    CUMULATIVE_REVENUE = 'CumulativeRevenue'

class RawColumn(str, Enum):
    """Column names as exported by the Rebase API and weather service."""
    TIMESTAMP = 'timestamp_utc'
    SOLAR = 'solar_act'
    WIND = 'wind_act'
    DAP = 'dayahead_price'
    SSP = 'imbalance_price'
    SOLAR_PRED = 'solar_pred'
    WIND_OFFSHORE_PRED = 'wind_offshore_pred'
    WIND_ONSHORE_PRED = 'wind_onshore_pred'
    WEATHER_TIMESTAMP = 'datetime'

WEATHER_COLS: Tuple[str, ...] = (
    Column.TEMP.value,
    Column.WINDSPEED.value,
    Column.WINDDIR.value,
    Column.CLOUDCOVER.value,
)
ENERGY_COLS: Tuple[str, ...] = (
    Column.SOLAR.value,
    Column.WIND.value,
    Column.TOTAL_ENERGY.value,
    Column.DAP.value,
    Column.SSP.value,
)
# Observations arrive every 30 minutes
FREQ = "30min"

# Suffix for forecast columns joined against the ground truth
PRED_SUFFIX = "_pred"

def pred_column(name: str) -> str:
    """
    Name of the forecast column for a target feature.

    >>> pred_column("TotalEnergy")
    'TotalEnergy_pred'
    """
    return f"{name}{PRED_SUFFIX}"


@dataclass(frozen=True)
class FeatureSchema:
    """
    Named-field contract between tables, windows and the model.

    The model input vector is ``exogenous + targets`` in that order.
    Exogenous features are known ahead of time (calendar and weather);
    targets are predicted by the model and, during a rollout, fed back
    in place of the observed values. Every consumer locates features
    through this schema rather than through table column order.

    Parameters
    ----------
    exogenous : Sequence[str]
        Features supplied from the table at every step.
    targets : Sequence[str]
        Features predicted by the model, in output order.
    """
    exogenous: Tuple[str, ...]
    targets: Tuple[str, ...]

    def __post_init__(self) -> None:
        # Accept any sequence but store tuples so the schema stays hashable
        object.__setattr__(self, "exogenous", tuple(self.exogenous))
        object.__setattr__(self, "targets", tuple(self.targets))
        if not self.targets:
            raise ValueError("A feature schema needs at least one target.")
        names = self.inputs
        if len(set(names)) != len(names):
            dupes = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Duplicate features in schema: {dupes}")

    @property
    def inputs(self) -> Tuple[str, ...]:
        return self.exogenous + self.targets

    @property
    def n_inputs(self) -> int:
        return len(self.inputs)

    @property
    def n_targets(self) -> int:
        return len(self.targets)

    def position(self, name: str) -> int:
        """Index of ``name`` within the model input vector."""
        try:
            return self.inputs.index(name)
        except ValueError:
            raise KeyError(f"{name!r} is not part of the schema") from None

    @property
    def target_positions(self) -> Tuple[int, ...]:
        return tuple(self.position(n) for n in self.targets)

    @property
    def exogenous_positions(self) -> Tuple[int, ...]:
        return tuple(self.position(n) for n in self.exogenous)

    def compose(
            self,
            exogenous: NDArray[np.floating],
            targets: NDArray[np.floating],
        ) -> NDArray[np.float32]:
        """
        Assemble a model input vector from its two named parts.

        Parameters
        ----------
        exogenous : ndarray
            Values ordered as ``self.exogenous``.
        targets : ndarray
            Values ordered as ``self.targets``.

        Returns
        -------
        ndarray
            ``float32`` vector ordered as ``self.inputs``.
        """
        exogenous = np.asarray(exogenous, dtype=np.float32).reshape(-1)
        targets = np.asarray(targets, dtype=np.float32).reshape(-1)
        if exogenous.size != len(self.exogenous):
            raise ValueError(
                f"Expected {len(self.exogenous)} exogenous values, "
                f"got {exogenous.size}"
            )
        if targets.size != self.n_targets:
            raise ValueError(
                f"Expected {self.n_targets} target values, "
                f"got {targets.size}"
            )
        vector = np.empty(self.n_inputs, dtype=np.float32)
        vector[list(self.exogenous_positions)] = exogenous
        vector[list(self.target_positions)] = targets
        return vector

    def to_dict(self) -> Dict[str, Tuple[str, ...]]:
        return {"exogenous": self.exogenous, "targets": self.targets}


DEFAULT_SCHEMA = FeatureSchema(
    exogenous=(Column.COS_TIME.value, *WEATHER_COLS),
    targets=ENERGY_COLS,
)

def missing_columns(columns: Sequence[str], schema: FeatureSchema) -> list[str]:
    """Schema inputs absent from ``columns``."""
    present = set(columns)
    return [name for name in schema.inputs if name not in present]
