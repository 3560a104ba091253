import argparse
import sys
import urllib.parse
from typing import List, Optional

from qrcode.exceptions import DataOverflowError

from . import config
from .console import print_banner
from .files import ServedFile, ServedFileError, load_served_file
from .logging_config import log
from .net import get_local_ip, host_for_url, port_available
from .qr import render_qr_ascii
from .server import create_app, run
from .settings import ServerSettings


USAGE_HINT = "Please give a file to share, e.g.: lanshare -file video.mp4"


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}")
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="lanshare", description="Share one file over the local network.")
    ap.add_argument("-file", "--file", dest="file", default="", help="path of the file to share")
    ap.add_argument("-port", "--port", dest="port", type=_port, default=config.PORT, help="port to listen on")
    return ap


def share_url(served: ServedFile, host: str, port: int) -> str:
    """Link printed for the operator, e.g. ``http://192.168.1.5:8989/video.mp4``."""
    return f"http://{host_for_url(host)}:{port}/{urllib.parse.quote(served.name)}"


def main(argv: Optional[List[str]] = None) -> int:
    """Run the module entrypoint and start serving the file."""
    args = build_parser().parse_args(argv)

    if not str(args.file or "").strip():
        print(USAGE_HINT)
        return 0

    try:
        served = load_served_file(args.file)
    except ServedFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not port_available(config.HOST, args.port):
        print(f"Error: failed to start, port {args.port} is not available", file=sys.stderr)
        return 1

    url = share_url(served, get_local_ip(), args.port)
    try:
        qr_text = render_qr_ascii(url)
    except DataOverflowError:
        log.warning("Link too long for a QR code, printing text only")
        qr_text = ""
    print_banner(served, url, qr_text)

    settings = ServerSettings.from_config()
    run(create_app(served, settings), args.port, access_log=settings.access_log)
    return 0
