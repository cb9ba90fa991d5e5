# thirdpartylib
import numpy as np
import pytest
import torch
# projectlib
from energy_forecasting.errors import DimensionMismatchError
from energy_forecasting.models.forecasting import RecurrentRegressor
from energy_forecasting.models.rollout import forecast

@pytest.fixture(params=["lstm", "gru"])
def model(request):
    torch.manual_seed(0)
    return RecurrentRegressor(10, 8, 5, cell=request.param).eval()

def test_forward_shape_and_range(model):
    out = model(torch.rand(4, 12, 10))
    assert out.shape == (4, 5)
    assert torch.all((out >= 0) & (out <= 1))

def test_stepping_matches_whole_window(model):
    x = torch.rand(1, 6, 10)
    with torch.no_grad():
        expected = model(x)
        state = None
        for t in range(6):
            pred, state = model.step(x[:, t:t + 1, :], state)
    torch.testing.assert_close(pred, expected)

def test_session_matches_forward(model):
    x = np.random.default_rng(1).random((6, 10)).astype(np.float32)
    session = model.new_session()
    session.reset_state()
    for row in x:
        out = session.step(row)
    with torch.no_grad():
        expected = model(torch.from_numpy(x).unsqueeze(0)).numpy().reshape(-1)
    np.testing.assert_allclose(out, expected, rtol=1e-5, atol=1e-6)

def test_sessions_do_not_share_state(model):
    rng = np.random.default_rng(2)
    a, b = model.new_session(), model.new_session()
    for row in rng.random((5, 10)).astype(np.float32):
        a.step(row)
    probe = np.full(10, 0.5, dtype=np.float32)
    fresh = model.new_session()
    np.testing.assert_array_equal(b.step(probe), fresh.step(probe))

def test_session_rejects_wrong_width(model):
    with pytest.raises(DimensionMismatchError):
        model.new_session().step(np.zeros(9, dtype=np.float32))

def test_unknown_cell():
    with pytest.raises(ValueError):
        RecurrentRegressor(10, 8, 5, cell="rnn")

def test_torch_forecast_is_deterministic(table, transforms):
    torch.manual_seed(0)
    model = RecurrentRegressor(10, 8, 5).eval()
    first = table["timestamp_utc"].iloc[96]
    last = first + np.timedelta64(24, "h")
    a = forecast(table, first, last, model, transforms)
    b = forecast(table, first, last, model, transforms)
    assert len(a) == 48
    assert a.equals(b)
