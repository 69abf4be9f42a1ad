"""Utilities for turning wall-clock frames into simulation steps."""
from __future__ import annotations

import math
import time
from dataclasses import dataclass, field


@dataclass
class FrameTimer:
    """High resolution timer based on :func:`time.perf_counter`."""

    last_time: float = field(default_factory=time.perf_counter)

    def tick(self) -> float:
        now = time.perf_counter()
        dt = now - self.last_time
        self.last_time = now
        return dt


def clamp_frame_dt(delta: float, dt_max: float) -> float:
    """Clamp a frame delta into ``[0, dt_max]``.

    Frame hitches are absorbed by the cap instead of being split into
    sub-steps. NaN or non-positive deltas count as no time at all.
    """

    if math.isnan(delta) or delta <= 0.0:
        return 0.0
    return min(dt_max, delta)


__all__ = ["FrameTimer", "clamp_frame_dt"]
