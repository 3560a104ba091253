import enum
from typing import Iterable, Optional

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import HTMLResponse, Response

from . import config
from .files import ServedFile
from .logging_config import log
from .progress import ProgressLine
from .responder import build_file_response
from .settings import ServerSettings


OPEN_IN_BROWSER_PAGE = (
    "<!doctype html><html><head><meta charset=\"utf-8\">"
    "<meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">"
    "<title>Open in browser</title></head>"
    "<body><h1>Tap the menu in the top-right corner and choose &quot;Open in browser&quot;</h1>"
    "<p>This app's built-in browser cannot download files.</p></body></html>"
)


class RequestKind(enum.Enum):
    PROBE = "probe"
    IN_APP_BROWSER = "in_app_browser"
    DOWNLOAD = "download"


def classify_request(path: str, user_agent: str, markers: Iterable[str]) -> RequestKind:
    """Sort an inbound request into probe / in-app browser / real download."""
    if "favicon" in str(path or ""):
        return RequestKind.PROBE
    ua = str(user_agent or "")
    if any(m and m in ua for m in markers):
        return RequestKind.IN_APP_BROWSER
    return RequestKind.DOWNLOAD


def build_router(served: ServedFile, settings: ServerSettings, reporter: Optional[ProgressLine] = None) -> APIRouter:
    """Route table: every path except favicon probes resolves to ``served``."""
    router = APIRouter()
    progress = reporter
    if progress is None and settings.progress_line:
        progress = ProgressLine()

    @router.api_route("/{path:path}", methods=["GET", "HEAD"])
    async def share(request: Request, path: str):
        kind = classify_request(request.url.path, request.headers.get("user-agent", ""), settings.in_app_markers)
        if kind is RequestKind.PROBE:
            return Response(status_code=404)
        if kind is RequestKind.IN_APP_BROWSER:
            remote = request.client.host if request.client else "unknown"
            log.info("In-app browser detected for %s, sent open-in-browser hint", remote)
            return HTMLResponse(OPEN_IN_BROWSER_PAGE)
        return build_file_response(request, served, settings, reporter=progress)

    return router


def create_app(served: ServedFile, settings: Optional[ServerSettings] = None, reporter: Optional[ProgressLine] = None) -> FastAPI:
    """Build the ASGI app serving ``served``; no socket is opened here."""
    settings = settings if settings is not None else ServerSettings.from_config()
    app = FastAPI(title=f"LanShare {config.VERSION}", docs_url=None, redoc_url=None, openapi_url=None)
    # Body messages must reach the server send directly, so no BaseHTTPMiddleware.
    app.include_router(build_router(served, settings, reporter))
    return app


def run(app: FastAPI, port: int, *, access_log: bool = False) -> None:
    """Serve ``app`` until the process is terminated."""
    log_level = "debug" if config.DEBUG else "info"
    if not config.LOG_ENABLED:
        log_level = "critical"
    uvicorn.run(app, host=config.HOST, port=int(port), log_level=log_level, access_log=access_log, log_config=None)
