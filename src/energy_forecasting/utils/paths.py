# stdlib
from pathlib import Path
from datetime import datetime
# projectlib
from energy_forecasting.utils.typing import Address, OpenMode

def validate_address(
    address: Address,
    *,
    extension: str = ".csv",
    mode: OpenMode = 'r',
    mkdir: bool = False,
) -> Path:
    """
    Validate and normalize a file or directory path.

    Converts the input to a ``pathlib.Path``, optionally creates
    directories, enforces a file extension, and validates existence
    based on the intended I/O mode.

    Parameters
    ----------
    address : Address
        File or directory path as a string or ``Path``.
    extension : str, default ".csv"
        Expected file extension. If the path refers to a file and the
        extension does not match, it is replaced.
    mode : OpenMode, default "r"
        Intended file access mode:
        - ``"r"``: path must exist if it refers to a file
        - ``"w"``: existing files are renamed with a timestamp suffix
          to avoid overwriting earlier artifacts
        - ``"x"``: path is returned as-is once the parent exists
    mkdir : bool, default False
        If True, create the path as a directory (including parents)
        when it does not already exist.

    Returns
    -------
    pathlib.Path
        Validated and normalized path.

    Raises
    ------
    NotADirectoryError
        If the parent directory does not exist.
    FileNotFoundError
        If ``mode="r"`` and the file does not exist.
    """
    address = Path(address)
    if mkdir:
        address.mkdir(parents=True, exist_ok=True)
    # Existing directories need no further checks
    if address.is_dir():
        return address
    if not address.parent.is_dir():
        msg = (
            f"Address path {address.parent}"
            " does not exist or is not a directory."
        )
        raise NotADirectoryError(msg)
    if address.suffix != extension:
        address = address.with_suffix(extension)
    if mode == "r" and not address.is_file():
        msg = f"{address} is not a file or does not exist."
        raise FileNotFoundError(msg)
    if mode == "w" and address.exists():
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        address = address.with_name(
            f"{address.stem}_{timestamp}{address.suffix}"
        )

    return address
