# stdlib
from typing import Literal, Union, Sequence
from pathlib import Path
from datetime import datetime
# thirdpartylib
import numpy as np
import pandas as pd
from numpy.typing import NDArray

# Verbosity for classes, functions, methods, etc.
type Verbosity = Literal[0, 1, 2]
# Mode for opening documents
type ReadMode = Literal["r"]
type WriteMode = Literal["w", "x"]
type OpenMode = Literal[ReadMode, WriteMode]
# Type alias for file/folder paths
type Address = Union[str, Path]
# One-dimensional numeric input accepted by metrics and revenue helpers
type ArrayLike1D = Union[Sequence[float], NDArray[np.floating], pd.Series]
# Anything pandas can turn into a single timestamp
type TimestampLike = Union[str, datetime, pd.Timestamp, np.datetime64]
# Recurrent cell families supported by the regressor
type CellType = Literal["lstm", "gru"]
