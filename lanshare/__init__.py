"""Share one file on the local network with a QR-code link and live progress."""

from .files import ServedFile, ServedFileError, load_served_file
from .progress import ProgressLine, ProgressWriter, TransferSession
from .server import create_app

__all__ = [
    "ServedFile",
    "ServedFileError",
    "load_served_file",
    "ProgressLine",
    "ProgressWriter",
    "TransferSession",
    "create_app",
]
