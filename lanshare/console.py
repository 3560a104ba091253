import sys
from typing import Optional, TextIO

from .files import ServedFile
from .sizes import format_size


RULE = "=" * 40


def print_banner(served: ServedFile, url: str, qr_text: str = "", out: Optional[TextIO] = None) -> None:
    """Print the share link, its QR code and the stop hint."""
    out = out if out is not None else sys.stdout
    print(f"\n{RULE}", file=out)
    print(f"File: {served.name} ({format_size(served.size)})", file=out)
    print(f"Link: {url}", file=out)
    print(RULE, file=out)
    if qr_text:
        print(qr_text, file=out)
    print("Server started! (press Ctrl+C to stop)", file=out)
    print(RULE, file=out)
    out.flush()
