"""
Playback overlay configuration.

The playback page renders a set of deterrents: no context menu, a
PrintScreen warning, copy blocking inside the video container and a watermark
with the viewer's account identifier that moves through the four corners.
They are visual deterrents driven by the ``CONTENT_PROTECTION`` setting.
"""

import copy
from typing import Any, Dict, Iterable, Optional

from django.conf import settings

CORNERS = ("top-left", "top-right", "bottom-right", "bottom-left")

DEFAULT_CONTENT_PROTECTION: Dict[str, Any] = {
    "disable_context_menu": True,
    "block_print_screen": True,
    "print_screen_warning": "Screen recording is disabled.",
    "block_copy": True,
    "copy_scope_selector": ".video-container",
    "watermark": {
        "enabled": True,
        "interval_seconds": 5,
        "corners": list(CORNERS),
    },
}


def protection_settings() -> Dict[str, Any]:
    """Defaults overlaid with ``settings.CONTENT_PROTECTION``."""
    merged = copy.deepcopy(DEFAULT_CONTENT_PROTECTION)
    configured = getattr(settings, "CONTENT_PROTECTION", None) or {}
    for key, value in configured.items():
        if key == "watermark" and isinstance(value, dict):
            merged["watermark"].update(value)
        else:
            merged[key] = value
    return merged


class WatermarkCycle:
    """
    Corner sequence of the moving watermark.

    ``position_at(elapsed)`` answers where the watermark is after
    ``elapsed`` seconds; ``advance()`` steps one interval forward.
    """

    def __init__(self, interval_seconds: int = 5, corners: Optional[Iterable[str]] = None) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.corners = tuple(corners or CORNERS)
        self.interval_seconds = interval_seconds
        self._index = 0

    @property
    def current(self) -> str:
        return self.corners[self._index]

    def advance(self) -> str:
        self._index = (self._index + 1) % len(self.corners)
        return self.current

    def position_at(self, elapsed_seconds: float) -> str:
        step = int(elapsed_seconds // self.interval_seconds)
        return self.corners[step % len(self.corners)]


def overlay_config(user) -> Dict[str, Any]:
    """
    Overlay payload for the playback page of ``user``.
    """
    config = protection_settings()
    watermark = config["watermark"]
    identifier = (user.email or user.get_username()) if user is not None else ""
    return {
        "disable_context_menu": bool(config["disable_context_menu"]),
        "print_screen": {
            "blocked": bool(config["block_print_screen"]),
            "warning": config["print_screen_warning"],
        },
        "copy": {
            "blocked": bool(config["block_copy"]),
            "scope": config["copy_scope_selector"],
        },
        "watermark": {
            "enabled": bool(watermark["enabled"]),
            "text": identifier,
            "interval_seconds": watermark["interval_seconds"],
            "corners": list(watermark.get("corners") or CORNERS),
        },
    }
