# stdlib
import json
# thirdpartylib
import numpy as np
import pytest
# projectlib
from conftest import make_table
from energy_forecasting.config.training import TrainingConfig
from energy_forecasting.models.forecasting import RecurrentRegressor
from energy_forecasting.pipeline import run_pipeline

@pytest.fixture(scope="module")
def data():
    # six days of half-hourly observations
    return make_table(288)

def test_pipeline_end_to_end(tmp_path, data):
    config = TrainingConfig(epochs=1, window=8, batch_size=32)
    result = run_pipeline(data, tmp_path / "run", config, alpha=0.1)

    assert isinstance(result.model, RecurrentRegressor)
    assert len(result.history.train_loss) == 2
    assert not result.predictions.empty
    assert {"Revenue", "CumulativeRevenue", "TotalEnergy_pred"} <= set(
        result.predictions.columns
    )
    assert np.isfinite(result.predictions["Revenue"]).all()
    assert set(result.revenue) == {"total", "mean", "VaR_0.1", "CVaR_0.1"}
    assert list(result.errors.index) == [
        "Solar", "Wind", "TotalEnergy", "DAP", "SSP"
    ]

    out = tmp_path / "run"
    for name in (
        "lstm_model_state_dict.pth",
        "transforms.joblib",
        "forecasts.csv",
        "errors.csv",
        "loss.csv",
        "revenue.json",
        "loss.png",
        "energy_forecast.png",
        "price_forecast.png",
        "cumulative_revenue.png",
        "residuals.png",
    ):
        assert (out / name).is_file(), name
    with open(out / "revenue.json", encoding="utf-8") as f:
        assert json.load(f) == pytest.approx(result.revenue)

def test_forecasts_cover_test_days_only(data):
    config = TrainingConfig(epochs=1, window=8, batch_size=32, cell="gru")
    result = run_pipeline(data, config=config)

    # test slice starts at row 229 (2024-03-05 18:30); its days are 5 and 6
    issued = result.predictions["timestamp_utc"]
    assert issued.min() == data["timestamp_utc"].iloc[229]
    assert issued.min() == np.datetime64("2024-03-05T18:30")
    assert issued.is_unique
    assert issued.max() <= data["timestamp_utc"].iloc[-1]

def test_pipeline_writes_log_file(tmp_path, data):
    config = TrainingConfig(epochs=1, window=8, batch_size=32)
    run_pipeline(data, tmp_path, config, verbosity=1, write_log=True)
    log = (tmp_path / "forecast_log.txt").read_text(encoding="utf-8")
    assert "Training configuration" in log
    assert "Revenue summary" in log
