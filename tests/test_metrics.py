# thirdpartylib
import numpy as np
import pandas as pd
import pytest
# projectlib
from energy_forecasting.evaluation.metrics import (
    forecast_errors,
    safe_mape,
    strict_r2,
)

def test_safe_mape_handles_negative_and_zero_actuals():
    assert safe_mape([-10.0, 10.0], [-11.0, 9.0]) == pytest.approx(10.0)
    assert np.isfinite(safe_mape([0.0, 1.0], [0.5, 1.0]))

def test_strict_r2():
    assert strict_r2([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)
    assert np.isnan(strict_r2([2.0, 2.0, 2.0], [1.0, 2.0, 3.0]))

def test_forecast_errors_table():
    frame = pd.DataFrame({
        "Solar": [1.0, 2.0, 3.0, np.nan],
        "Solar_pred": [1.0, 2.0, 5.0, 9.0],
        "SSP": [10.0, 20.0, 30.0, 40.0],
        "SSP_pred": [10.0, 20.0, 30.0, 40.0],
    })
    errors = forecast_errors(frame, ["Solar", "SSP"])
    assert errors.index.name == "target"
    assert list(errors.columns) == ["MAE", "RMSE", "MAPE", "R2"]
    assert errors.loc["Solar", "MAE"] == pytest.approx(2 / 3)
    assert errors.loc["Solar", "RMSE"] == pytest.approx(np.sqrt(4 / 3))
    assert errors.loc["SSP", "R2"] == pytest.approx(1.0)
