# thirdpartylib
import numpy as np
import pytest
# projectlib
from energy_forecasting.data.schemas import (
    DEFAULT_SCHEMA,
    ENERGY_COLS,
    WEATHER_COLS,
    Column,
    FeatureSchema,
    missing_columns,
    pred_column,
)

def test_default_schema_layout():
    assert DEFAULT_SCHEMA.inputs == (
        Column.COS_TIME.value, *WEATHER_COLS, *ENERGY_COLS
    )
    assert DEFAULT_SCHEMA.n_inputs == 10
    assert DEFAULT_SCHEMA.n_targets == 5
    assert DEFAULT_SCHEMA.target_positions == (5, 6, 7, 8, 9)
    assert DEFAULT_SCHEMA.exogenous_positions == (0, 1, 2, 3, 4)

def test_position_of_unknown_feature():
    with pytest.raises(KeyError, match="humidity"):
        DEFAULT_SCHEMA.position("humidity")

def test_compose_places_parts_by_name():
    exo = np.arange(5, dtype=np.float32)
    targets = np.arange(10, 15, dtype=np.float32)
    vector = DEFAULT_SCHEMA.compose(exo, targets)
    assert vector.dtype == np.float32
    np.testing.assert_array_equal(vector, np.r_[exo, targets])

def test_compose_rejects_wrong_sizes():
    with pytest.raises(ValueError):
        DEFAULT_SCHEMA.compose(np.zeros(4), np.zeros(5))
    with pytest.raises(ValueError):
        DEFAULT_SCHEMA.compose(np.zeros(5), np.zeros(6))

def test_schema_validation():
    with pytest.raises(ValueError):
        FeatureSchema(exogenous=("a",), targets=())
    with pytest.raises(ValueError, match="Duplicate"):
        FeatureSchema(exogenous=("a", "b"), targets=("b",))

def test_schema_accepts_lists_and_stays_hashable():
    schema = FeatureSchema(exogenous=["a"], targets=["b", "c"])
    assert schema.inputs == ("a", "b", "c")
    assert hash(schema) == hash(FeatureSchema(("a",), ("b", "c")))

def test_missing_columns_and_pred_names():
    assert missing_columns(DEFAULT_SCHEMA.inputs, DEFAULT_SCHEMA) == []
    assert missing_columns(["cos_time", "temp"], DEFAULT_SCHEMA) == [
        "windspeed", "winddir", "cloudcover", *ENERGY_COLS
    ]
    assert pred_column("SSP") == "SSP_pred"
