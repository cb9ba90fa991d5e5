# thirdpartylib
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
# projectlib
from energy_forecasting.models.training import TrainingHistory
from energy_forecasting.visualization.timeseries import (
    plot_loss,
    plot_residuals,
)

def test_residual_histogram_has_one_panel_per_target():
    rng = np.random.default_rng(0)
    residuals = pd.DataFrame({
        "TotalEnergy": rng.normal(0, 20, 100),
        "SSP": rng.normal(0, 5, 100),
    })
    fig = plot_residuals(residuals, bins=10)
    titles = [ax.get_title() for ax in fig.axes]
    assert titles == ["TotalEnergy", "SSP"]
    assert len(fig.axes[0].patches) == 10
    plt.close(fig)

def test_loss_plot_has_train_and_test_lines():
    history = TrainingHistory(train_loss=[0.3, 0.2, 0.1], test_loss=[0.4, 0.3, 0.2])
    fig = plot_loss(history)
    assert len(fig.axes[0].get_lines()) == 2
    plt.close(fig)
