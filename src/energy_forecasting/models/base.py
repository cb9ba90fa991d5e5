# stdlib
import abc
# thirdpartylib
import numpy as np
from numpy.typing import NDArray

class RecurrentSession(abc.ABC):
    """
    Exclusively owned recurrent state for one forecast run.

    A session is created by :meth:`SequenceModel.new_session`, stepped
    one observation at a time, and discarded when the run ends. Two
    sessions of the same model never share state.
    """
    @abc.abstractmethod
    def reset_state(self) -> None: ...
    @abc.abstractmethod
    def step(self, x: NDArray[np.float32]) -> NDArray[np.float32]: ...


class SequenceModel(abc.ABC):
    """Trained sequence model that can open stateful sessions."""
    n_inputs: int
    n_outputs: int

    @abc.abstractmethod
    def new_session(self) -> RecurrentSession: ...
