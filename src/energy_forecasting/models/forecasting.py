# stdlib
from typing import Optional, Tuple, Union
# thirdpartylib
import numpy as np
import torch
from numpy.typing import NDArray
from torch import Tensor
from torch.nn import Module, LSTM, GRU, Linear
# projectlib
from energy_forecasting.errors import DimensionMismatchError
from energy_forecasting.models.base import RecurrentSession, SequenceModel
from energy_forecasting.utils.typing import CellType

# LSTM carries (h, c); GRU carries h only
type HiddenState = Union[Tensor, Tuple[Tensor, Tensor]]


class RecurrentRegressor(Module, SequenceModel):
    """
    Stacked recurrent regressor for multi-output, many-to-one forecasts.

    Two recurrent layers (LSTM or GRU) process the input sequence; the
    final time step's hidden state passes through a hidden dense layer
    and a sigmoid output layer. Targets are standardized to the unit
    range, so the sigmoid keeps predictions on the same scale.

    The same network is used in two ways:

    - :meth:`forward` consumes whole windows ``(batch, window,
      features)`` during training;
    - :meth:`step` advances one observation with an explicit hidden
      state, which :class:`TorchSession` owns during a forecast run.

    Parameters
    ----------
    input_size : int
        Number of input features per time step.
    hidden_size : int
        Number of hidden units in each recurrent layer.
    output_size : int
        Number of predicted target features.
    cell : {"lstm", "gru"}, default "lstm"
        Recurrent cell family.
    """
    def __init__(
            self,
            input_size: int,
            hidden_size: int,
            output_size: int,
            cell: CellType = "lstm",
        ) -> None:
        super().__init__()  # pyright: ignore[reportUnknownMemberType]
        if cell not in ("lstm", "gru"):
            raise ValueError(f"Unknown recurrent cell {cell!r}")
        self.n_inputs = input_size
        self.n_outputs = output_size
        self.cell = cell
        recurrent = LSTM if cell == "lstm" else GRU
        self.rnn = recurrent(
            input_size=input_size,
            hidden_size=hidden_size,
            num_layers=2,
            batch_first=True,
        )
        self.hidden = Linear(hidden_size, hidden_size)
        self.fc = Linear(hidden_size, output_size)

    def _head(self, last: Tensor) -> Tensor:
        return torch.sigmoid(self.fc(self.hidden(last)))

    def forward(self, x: Tensor) -> Tensor:
        """
        Predict the observation following each input window.

        Parameters
        ----------
        x : torch.Tensor
            Shape ``(batch_size, window, input_size)``.

        Returns
        -------
        torch.Tensor
            Shape ``(batch_size, output_size)``.
        """
        out, _ = self.rnn(x)
        return self._head(out[:, -1, :])

    def step(
            self,
            x: Tensor,
            state: Optional[HiddenState] = None
        ) -> Tuple[Tensor, HiddenState]:
        """
        Advance the network by one observation.

        Parameters
        ----------
        x : torch.Tensor
            Shape ``(batch_size, 1, input_size)``.
        state : HiddenState, optional
            Hidden state from the previous step; ``None`` starts from
            zeros.

        Returns
        -------
        prediction : torch.Tensor
            Shape ``(batch_size, output_size)``.
        state : HiddenState
            Hidden state after consuming ``x``.
        """
        out, state = self.rnn(x, state)
        return self._head(out[:, -1, :]), state

    def new_session(self) -> "TorchSession":
        return TorchSession(self)


class TorchSession(RecurrentSession):
    """Per-run hidden state for a :class:`RecurrentRegressor`."""

    def __init__(self, model: RecurrentRegressor) -> None:
        self.model = model
        self.state: Optional[HiddenState] = None
        self.device = next(model.parameters()).device

    def reset_state(self) -> None:
        self.state = None

    def step(self, x: NDArray[np.float32]) -> NDArray[np.float32]:
        vector = np.asarray(x, dtype=np.float32).reshape(-1)
        if vector.size != self.model.n_inputs:
            raise DimensionMismatchError(
                f"Model expects {self.model.n_inputs} inputs, "
                f"got {vector.size}"
            )
        tensor = torch.from_numpy(vector.copy()).to(self.device).view(1, 1, -1)
        with torch.no_grad():
            out, self.state = self.model.step(tensor, self.state)
        return out.cpu().numpy().reshape(-1).astype(np.float32)
