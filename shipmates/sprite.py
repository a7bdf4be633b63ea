"""Selecting animation frames from a sprite sheet."""

from __future__ import annotations

from dataclasses import dataclass

# Game frames each animation frame is shown for.
TICKS_PER_FRAME = 5


@dataclass
class FrameOpts:
    """Where an animation sits on a sheet and which game frame it is."""

    current_game_frame: int = 0
    frame_ox: int = 0
    frame_oy: int = 0
    frame_width: int = 0
    frame_height: int = 0
    frame_count: int = 1


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def frame_index(opts: FrameOpts) -> int:
    """The animation frame shown at the current game frame."""
    if opts.frame_count == 0:
        raise ValueError("frame_count must not be zero")
    step = _trunc_div(opts.current_game_frame, TICKS_PER_FRAME)
    return step - _trunc_div(step, opts.frame_count) * opts.frame_count


def frame_rect(opts: FrameOpts) -> tuple[int, int, int, int]:
    """The (x, y, width, height) area of the sheet for the current frame."""
    x = opts.frame_ox + frame_index(opts) * opts.frame_width
    return (x, opts.frame_oy, opts.frame_width, opts.frame_height)