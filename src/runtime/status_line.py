"""xmobar status line rendering for block snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pomodoro.constants import PHASE_COOLDOWN, PHASE_PAUSED, PHASE_RUNNING

from .messages import format_duration
from .session import FLASH_ERROR, FLASH_WARN, StatusFrame

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class StatusLineStyle:
    """Colours and thresholds used by the status line."""
    idle_color: str = "#AAAAAA"
    paused_color: str = "#AAAAAA"
    block_start_color: str = "#00FF00"
    block_end_color: str = "#FFFF00"
    cooldown_start_color: str = "#FF0000"
    cooldown_end_color: str = "#00FFFF"
    warn_background: str = "#FFFF00"
    error_background: str = "#FF0000"
    final_seconds_warning: int = 10
    cooldown_marker: str = "~"

    @classmethod
    def from_settings(cls, settings: Any) -> "StatusLineStyle":
        return cls(
            idle_color=settings.idle_color,
            paused_color=settings.paused_color,
            block_start_color=settings.block_start_color,
            block_end_color=settings.block_end_color,
            cooldown_start_color=settings.cooldown_start_color,
            cooldown_end_color=settings.cooldown_end_color,
            warn_background=settings.warn_background,
            error_background=settings.error_background,
            final_seconds_warning=settings.final_seconds_warning,
            cooldown_marker=settings.cooldown_marker,
        )


def parse_hex_color(value: str) -> RGB:
    """Parse `#RGB` or `#RRGGBB` into an RGB triple."""
    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Invalid colour: {value!r}")
    return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))


def fade_color(start: str, end: str, progress: float) -> str:
    """Blend from `start` to `end`; the quadratic weight keeps early progress close to `start`."""
    progress = min(1.0, max(0.0, progress))
    weight = progress * progress
    start_rgb = parse_hex_color(start)
    end_rgb = parse_hex_color(end)
    blended = [int(a + (b - a) * weight) for a, b in zip(start_rgb, end_rgb)]
    return "#{:02x}{:02x}{:02x}".format(*blended)


class StatusLineRenderer:
    def __init__(self, style: StatusLineStyle | None = None):
        self._style = style or StatusLineStyle()

    def render(self, frame: StatusFrame) -> str:
        style = self._style
        snapshot = frame.snapshot
        background = self._flash_background(frame.flash)

        if snapshot.phase == PHASE_PAUSED:
            return _markup(style.paused_color, background, format_duration(snapshot.remaining_seconds))

        if snapshot.phase in (PHASE_RUNNING, PHASE_COOLDOWN):
            remaining = snapshot.remaining_seconds
            if remaining < style.final_seconds_warning and remaining % 2 == 1:
                background = style.warn_background
            if snapshot.phase == PHASE_RUNNING:
                color = fade_color(
                    style.block_start_color,
                    style.block_end_color,
                    snapshot.elapsed_fraction,
                )
                return _markup(color, background, format_duration(remaining))
            color = fade_color(
                style.cooldown_start_color,
                style.cooldown_end_color,
                snapshot.elapsed_fraction,
            )
            return _markup(color, background, style.cooldown_marker + format_duration(remaining))

        return _markup(style.idle_color, background, "--")

    def _flash_background(self, flash: str | None) -> str:
        if flash == FLASH_ERROR:
            return self._style.error_background
        if flash == FLASH_WARN:
            return self._style.warn_background
        return ""


def _markup(foreground: str, background: str, text: str) -> str:
    colors = f"{foreground},{background}" if background else foreground
    return f"<fc={colors}>{text}</fc>"
