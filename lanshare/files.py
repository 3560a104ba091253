import os
from dataclasses import dataclass
from email.utils import formatdate


class ServedFileError(Exception):
    """Raised when the file to share cannot be served."""


@dataclass(frozen=True)
class ServedFile:
    """The one file exposed for download; fixed for the process lifetime."""

    path: str
    name: str
    size: int
    mtime: float

    @property
    def last_modified(self) -> str:
        """HTTP-date form of the modification time."""
        return formatdate(self.mtime, usegmt=True)


def load_served_file(path: str) -> ServedFile:
    """Stat ``path`` once and freeze its metadata."""
    raw = str(path or "").strip()
    if not raw:
        raise ServedFileError("no file path given")
    abs_path = os.path.abspath(os.path.expanduser(raw))
    if not os.path.exists(abs_path):
        raise ServedFileError(f"file not found: {abs_path}")
    if not os.path.isfile(abs_path):
        raise ServedFileError(f"not a regular file: {abs_path}")
    st = os.stat(abs_path)
    return ServedFile(
        path=abs_path,
        name=os.path.basename(abs_path),
        size=int(st.st_size),
        mtime=float(st.st_mtime),
    )
