from __future__ import annotations

from dataclasses import dataclass

import numpy as np


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


@dataclass
class CameraState:
    center: np.ndarray
    ppu: float


class Camera:
    """Fixed camera over the mission area, sized to a screen viewport.

    ``ppu`` is pixels per world unit. The viewport is the part of the window
    the simulation is drawn in; the side panel lives outside it.
    """

    def __init__(
        self,
        viewport: tuple[int, int, int, int],
        ppu: float,
        *,
        min_ppu: float = 0.2,
        max_ppu: float = 8.0,
    ) -> None:
        self._viewport = viewport
        self._min_ppu = min_ppu
        self._max_ppu = max_ppu
        self._state = CameraState(center=np.zeros(2, dtype=float), ppu=_clamp(ppu, min_ppu, max_ppu))

    @property
    def viewport(self) -> tuple[int, int, int, int]:
        return self._viewport

    def update_viewport(self, viewport: tuple[int, int, int, int]) -> None:
        self._viewport = viewport

    @property
    def ppu(self) -> float:
        return self._state.ppu

    def set_zoom(self, ppu: float) -> None:
        self._state.ppu = _clamp(ppu, self._min_ppu, self._max_ppu)

    def fit_radius(self, radius: float) -> None:
        """Zoom so a circle of ``radius`` fits inside the viewport."""

        _, _, width, height = self._viewport
        if radius <= 0.0:
            return
        self.set_zoom(min(width, height) / (2.0 * radius))

    def view_half_extents(self) -> tuple[float, float]:
        _, _, width, height = self._viewport
        ppu = max(self._state.ppu, 1e-9)
        return width / (2.0 * ppu), height / (2.0 * ppu)

    def world_to_screen(self, x: float, y: float) -> tuple[int, int]:
        left, top, width, height = self._viewport
        cx, cy = self._state.center
        sx = left + width // 2 + int((x - cx) * self._state.ppu)
        sy = top + height // 2 - int((y - cy) * self._state.ppu)
        return sx, sy

    def screen_to_world(self, sx: float, sy: float) -> tuple[float, float]:
        left, top, width, height = self._viewport
        cx, cy = self._state.center
        ppu = max(self._state.ppu, 1e-9)
        x = (sx - left - width / 2.0) / ppu + cx
        y = (top + height / 2.0 - sy) / ppu + cy
        return x, y

    def contains(self, sx: float, sy: float) -> bool:
        left, top, width, height = self._viewport
        return left <= sx < left + width and top <= sy < top + height
