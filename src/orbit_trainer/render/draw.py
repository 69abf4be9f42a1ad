from __future__ import annotations

import math
import random
from typing import Iterable, Sequence, TYPE_CHECKING

import pygame

from .camera import Camera

if TYPE_CHECKING:  # pragma: no cover
    from orbit_trainer.core.config import RenderCfg


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def generate_starfield(
    num_stars: int,
    *,
    size: tuple[int, int],
    rng: random.Random | None = None,
) -> list[tuple[int, int, int, int]]:
    """Return ``(x, y, radius, alpha)`` tuples for a static star backdrop."""

    rng = rng or random.Random()
    width, height = size
    stars: list[tuple[int, int, int, int]] = []
    for _ in range(num_stars):
        x = rng.randrange(max(1, width))
        y = rng.randrange(max(1, height))
        radius = rng.choice([1, 1, 1, 2])
        alpha = rng.randint(50, 200)
        stars.append((x, y, radius, alpha))
    return stars


def draw_starfield(surface: pygame.Surface, stars: Iterable[tuple[int, int, int, int]]) -> None:
    layer = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    for x, y, radius, alpha in stars:
        pygame.draw.circle(layer, (220, 230, 255, alpha), (x, y), radius)
    surface.blit(layer, (0, 0))


def draw_planet(
    surface: pygame.Surface,
    camera: Camera,
    radius: float,
    atmosphere_thickness: float,
    *,
    render_cfg: RenderCfg,
) -> None:
    center = camera.world_to_screen(0.0, 0.0)
    radius_px = max(1, int(radius * camera.ppu))
    atm_px = max(radius_px + 1, int((radius + atmosphere_thickness) * camera.ppu))
    glow = pygame.Surface((atm_px * 2, atm_px * 2), pygame.SRCALPHA)
    steps = 6
    for i in range(steps):
        frac = i / steps
        ring_radius = int(atm_px - (atm_px - radius_px) * frac)
        pygame.draw.circle(glow, (*render_cfg.atmosphere_color, int(12 + 18 * frac)), (atm_px, atm_px), ring_radius)
    surface.blit(glow, glow.get_rect(center=center))
    pygame.draw.circle(surface, render_cfg.planet_color, center, radius_px)


def draw_ring(
    surface: pygame.Surface,
    camera: Camera,
    radius: float,
    color: tuple[int, int, int],
    *,
    alpha: int = 160,
    width: int = 1,
    dashed: bool = False,
) -> None:
    center = camera.world_to_screen(0.0, 0.0)
    radius_px = int(radius * camera.ppu)
    if radius_px <= 0:
        return
    if not dashed:
        layer = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        pygame.draw.circle(layer, (*color, alpha), center, radius_px, width)
        surface.blit(layer, (0, 0))
        return
    segments = max(24, int(radius_px / 4))
    for i in range(0, segments, 2):
        a0 = 2.0 * math.pi * i / segments
        a1 = 2.0 * math.pi * (i + 1) / segments
        start = (center[0] + radius_px * math.cos(a0), center[1] + radius_px * math.sin(a0))
        end = (center[0] + radius_px * math.cos(a1), center[1] + radius_px * math.sin(a1))
        pygame.draw.line(surface, color, start, end, width)


def draw_target_band(
    surface: pygame.Surface,
    camera: Camera,
    band_min: float,
    band_max: float,
    *,
    render_cfg: RenderCfg,
    highlight: bool = False,
) -> None:
    center = camera.world_to_screen(0.0, 0.0)
    inner_px = int(band_min * camera.ppu)
    outer_px = int(band_max * camera.ppu)
    layer = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    alpha = render_cfg.band_alpha * 2 if highlight else render_cfg.band_alpha
    pygame.draw.circle(layer, (*render_cfg.band_color, min(255, alpha)), center, outer_px, max(1, outer_px - inner_px))
    pygame.draw.circle(layer, (*render_cfg.band_color, 200), center, outer_px, 1)
    pygame.draw.circle(layer, (*render_cfg.band_color, 200), center, inner_px, 1)
    surface.blit(layer, (0, 0))


def draw_trail(
    surface: pygame.Surface,
    camera: Camera,
    points: Sequence[tuple[float, float]],
    *,
    color: tuple[int, int, int],
    max_points: int = 600,
) -> None:
    """Draw the trail, fading older segments towards transparent."""

    sampled = downsample_points(points, max_points)
    if len(sampled) < 2:
        return
    layer = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    screen_points = [camera.world_to_screen(x, y) for x, y in sampled]
    count = len(screen_points)
    for i in range(1, count):
        alpha = int(255 * i / count)
        pygame.draw.line(layer, (*color, alpha), screen_points[i - 1], screen_points[i], 2)
    surface.blit(layer, (0, 0))


def draw_orbit_line(
    surface: pygame.Surface,
    color: tuple[int, int, int] | tuple[int, int, int, int],
    points: Sequence[tuple[int, int]],
    width: int,
) -> None:
    if len(points) < 2:
        return
    if width <= 1:
        pygame.draw.aalines(surface, color, False, points)
    else:
        pygame.draw.lines(surface, color, False, points, width)


def draw_satellite(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    *,
    color: tuple[int, int, int],
) -> None:
    if radius <= 0:
        return
    pygame.draw.circle(surface, color, position, radius)


def draw_arrow(
    surface: pygame.Surface,
    start: tuple[int, int],
    end: tuple[int, int],
    *,
    color: tuple[int, int, int],
    head_length: int,
    head_angle_deg: int,
    width: int = 2,
) -> None:
    if start == end:
        return
    pygame.draw.line(surface, color, start, end, width)
    angle = math.atan2(start[1] - end[1], end[0] - start[0])
    head_angle = math.radians(head_angle_deg)
    left = (
        int(end[0] - head_length * math.cos(angle - head_angle)),
        int(end[1] + head_length * math.sin(angle - head_angle)),
    )
    right = (
        int(end[0] - head_length * math.cos(angle + head_angle)),
        int(end[1] + head_length * math.sin(angle + head_angle)),
    )
    pygame.draw.polygon(surface, color, [end, left, right])


def draw_fuel_bar(
    surface: pygame.Surface,
    rect: pygame.Rect,
    fraction: float,
    *,
    good_color: tuple[int, int, int],
    warn_color: tuple[int, int, int],
) -> None:
    fraction = _clamp(fraction, 0.0, 1.0)
    pygame.draw.rect(surface, (40, 52, 70), rect, border_radius=4)
    fill = rect.copy()
    fill.width = int(rect.width * fraction)
    if fill.width > 0:
        pygame.draw.rect(surface, good_color if fraction > 0.25 else warn_color, fill, border_radius=4)
    pygame.draw.rect(surface, (120, 140, 170), rect, 1, border_radius=4)


def downsample_points(
    points: Sequence[tuple[float, float]], max_points: int
) -> list[tuple[float, float]]:
    if len(points) <= max_points:
        return list(points)
    step = max(1, math.ceil(len(points) / max_points))
    sampled = list(points[::step])
    if sampled[-1] != points[-1]:
        sampled.append(points[-1])
    return sampled
