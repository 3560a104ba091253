import io

import qrcode


def make_qr(url: str) -> qrcode.QRCode:
    """Build a QR code for the share link (error correction level M)."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=1,
        border=2,
    )
    qr.add_data(url)
    qr.make(fit=True)
    return qr


def render_qr_ascii(url: str) -> str:
    """Render the share link as half-block text suitable for a terminal."""
    buf = io.StringIO()
    make_qr(url).print_ascii(out=buf, invert=True)
    return buf.getvalue()
