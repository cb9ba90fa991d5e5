# stdlib
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional
from types import TracebackType
# projectlib
from energy_forecasting.utils.paths import validate_address
from energy_forecasting.utils.typing import Verbosity, Address

class Logger(object):
    """
    Callable, verbosity-filtered logger for forecasting runs.

    Messages are timestamped (UTC) and either printed to stdout or
    appended to a log file inside ``log_dir``. Verbosity follows the
    convention used across the package:

    - ``0``: always emitted (warnings, results)
    - ``1``: progress information (epochs, artifacts)
    - ``2``: debug detail (per-run ranges, shapes)
    """

    def __init__(
        self,
        verbose: Verbosity = 0,
        log_dir: Optional[Address] = None,
        write_log: bool = False,
        *,
        file_name: str = "forecast_log.txt",
    ) -> None:
        """
        Initialize the logger.

        Parameters
        ----------
        verbose : Verbosity, default 0
            Verbosity threshold. Messages with a verbosity level less
            than or equal to this value are emitted.
        log_dir : Address, optional
            Directory for the log file when ``write_log`` is True.
            Defaults to the current working directory.
        write_log : bool, default False
            If True, messages are appended to ``log_dir / file_name``
            instead of being printed.
        file_name : str, default "forecast_log.txt"
            Name of the log file.
        """
        self.verbose = verbose
        self.write_log = write_log
        log_dir = Path.cwd() if log_dir is None else Path(log_dir)
        if write_log:
            log_dir = validate_address(log_dir, mkdir=True)
        self.log_path = log_dir / file_name

    def __call__(self, msg: str, verbosity: int = 0) -> None:
        """Emit ``msg`` if the verbosity threshold is met."""
        if self.verbose >= verbosity:
            formatted = self._format(msg)
            if self.write_log:
                self.write(formatted)
            else:
                print(formatted)

    def warning(self, msg: str) -> None:
        """Emit a warning regardless of the verbosity threshold."""
        self(f"[WARN] {msg}", verbosity=0)

    def write(self, msg: str) -> None:
        """Append a formatted message to the log file."""
        with open(self.log_path, "a", encoding="utf-8") as file:
            file.write(msg + "\n")

    def _format(self, msg: str) -> str:
        ts = datetime.now(timezone.utc).isoformat(timespec="seconds")
        return f"[{ts}] {msg}"

    def __enter__(self) -> "Logger":
        return self

    def __exit__(
            self,
            exc_type: Optional[type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
        ) -> None:
        if exc is not None:
            self.warning(f"Run aborted: {exc_type.__name__}: {exc}")
