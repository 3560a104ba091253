from dataclasses import dataclass, field
from typing import List, Optional

from . import config


TRANSFER_PRESETS = {
    "fast": {"chunk": 1024 * 1024},
    "balanced": {"chunk": 256 * 1024},
    "safe": {"chunk": 64 * 1024},
}


def pick_chunk_size(preset: str, chunk_override: Optional[int] = None) -> int:
    """Resolve the streaming chunk size from a preset name and an optional override."""
    name = str(preset or "balanced").lower()
    chunk = TRANSFER_PRESETS.get(name, TRANSFER_PRESETS["balanced"])["chunk"]
    if chunk_override:
        chunk = max(1024, int(chunk_override))
    return chunk


@dataclass
class ServerSettings:
    """Snapshot of the configuration the HTTP app is built with."""

    chunk_size: int = TRANSFER_PRESETS["balanced"]["chunk"]
    in_app_markers: List[str] = field(default_factory=lambda: ["MicroMessenger"])
    access_log: bool = False
    progress_line: bool = True

    @classmethod
    def from_config(cls) -> "ServerSettings":
        return cls(
            chunk_size=pick_chunk_size(config.TRANSFER_PRESET, config.TRANSFER_CHUNK),
            in_app_markers=list(config.IN_APP_MARKERS),
            access_log=bool(config.DEBUG),
            progress_line=bool(config.CONSOLE_LOG),
        )
