"""Configuration dataclasses for the orbit trainer."""
from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping


class ConfigError(ValueError):
    """Raised when a configuration override cannot be applied."""


@dataclass(frozen=True)
class TrainerCfg:
    mu: float = 120_000.0
    dt_max: float = 1.0 / 30.0
    planet_radius: float = 70.0
    atmosphere_thickness: float = 20.0
    max_dv_per_burn_easy: float = 25.0
    aim_gain: float = 0.16
    aim_grab_radius: float = 20.0
    fuel_max: float = 160.0
    fuel_per_dv: float = 1.0
    trail_max_points: int = 1_400
    target_band_min_r: float = 225.0
    target_band_max_r: float = 285.0
    speed_tolerance_frac: float = 0.08
    min_speed_factor_easy: float = 0.85
    hold_required: float = 14.0
    target_dv: float = 55.0
    par_time: float = 38.0
    safe_min_r: float = 185.0
    safety_rate_per_second: float = 0.06
    dv_penalty_weight: float = 0.7
    time_penalty_weight: float = 0.8
    view_half_extents: tuple[float, float] = (520.0, 360.0)

    def __post_init__(self) -> None:
        if self.mu <= 0.0:
            raise ConfigError("mu must be positive")
        if self.dt_max <= 0.0:
            raise ConfigError("dt_max must be positive")
        if self.fuel_max < 0.0 or self.fuel_per_dv < 0.0:
            raise ConfigError("fuel settings must be non-negative")
        if self.target_band_min_r >= self.target_band_max_r:
            raise ConfigError("target band minimum must be below its maximum")
        if self.hold_required < 0.0:
            raise ConfigError("hold_required must be non-negative")

    @property
    def band_width(self) -> float:
        return self.target_band_max_r - self.target_band_min_r

    @property
    def band_mid_r(self) -> float:
        return 0.5 * (self.target_band_min_r + self.target_band_max_r)

    def inside_band(self, r: float) -> bool:
        return self.target_band_min_r <= r <= self.target_band_max_r

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any], base: "TrainerCfg | None" = None) -> "TrainerCfg":
        """Return a copy of *base* with *overrides* applied.

        Unknown keys raise :class:`ConfigError` so that typos in a config file
        do not silently fall back to the defaults.
        """

        base = base or cls()
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(overrides) - set(known))
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        values: dict[str, Any] = {}
        for key, value in overrides.items():
            if key == "view_half_extents":
                try:
                    half_w, half_h = value
                    values[key] = (float(half_w), float(half_h))
                except (TypeError, ValueError) as exc:
                    raise ConfigError("view_half_extents must be a pair of numbers") from exc
            elif key == "trail_max_points":
                try:
                    values[key] = int(value)
                except (TypeError, ValueError) as exc:
                    raise ConfigError("trail_max_points must be an integer") from exc
            else:
                try:
                    values[key] = float(value)
                except (TypeError, ValueError) as exc:
                    raise ConfigError(f"{key} must be numeric") from exc
        return replace(base, **values)


def load_trainer_cfg(path: str | Path, base: TrainerCfg | None = None) -> TrainerCfg:
    """Load a JSON override file on top of *base* (or the defaults)."""

    try:
        with Path(path).open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")
    return TrainerCfg.from_mapping(data, base)


@dataclass(frozen=True)
class RenderCfg:
    width: int = 1280
    height: int = 720
    view_margin_units: float = 60.0
    side_panel_width: int = 330
    background_color: tuple[int, int, int] = (4, 10, 18)
    planet_color: tuple[int, int, int] = (74, 144, 226)
    atmosphere_color: tuple[int, int, int] = (120, 190, 255)
    band_color: tuple[int, int, int] = (46, 209, 195)
    band_alpha: int = 48
    safety_ring_color: tuple[int, int, int] = (255, 96, 96)
    satellite_color: tuple[int, int, int] = (255, 255, 255)
    satellite_pixel_radius: int = 5
    trail_color: tuple[int, int, int] = (130, 200, 255)
    orbit_prediction_color: tuple[int, int, int, int] = (220, 236, 255, 90)
    velocity_arrow_color: tuple[int, int, int] = (84, 230, 255)
    gravity_arrow_color: tuple[int, int, int] = (255, 146, 146)
    aim_arrow_color: tuple[int, int, int] = (255, 210, 120)
    velocity_arrow_scale: float = 10.0
    gravity_arrow_scale: float = 2_300.0
    velocity_arrow_head_length: int = 9
    velocity_arrow_head_angle_deg: int = 26
    hud_text_color: tuple[int, int, int] = (234, 241, 255)
    hud_dim_text_color: tuple[int, int, int] = (160, 178, 204)
    hud_good_color: tuple[int, int, int] = (120, 230, 150)
    hud_warn_color: tuple[int, int, int] = (255, 176, 120)
    panel_background_color: tuple[int, int, int, int] = (12, 18, 30, 200)
    button_color: tuple[int, int, int, int] = (8, 32, 64, int(255 * 0.78))
    button_hover_color: tuple[int, int, int, int] = (18, 52, 94, int(255 * 0.88))
    button_text_color: tuple[int, int, int] = (234, 241, 255)
    button_border_color: tuple[int, int, int, int] = (88, 140, 255, int(255 * 0.55))
    button_radius: int = 14
    banner_color: tuple[int, int, int, int] = (12, 18, 30, int(255 * 0.85))
    banner_title_color: tuple[int, int, int] = (255, 214, 130)
    banner_duration: float = 8.0
    starfield_density: float = 1.0 / 2_600.0
    console_log_lines: int = 8


TRAINER_CFG = TrainerCfg()
RENDER_CFG = RenderCfg()


__all__ = [
    "ConfigError",
    "RENDER_CFG",
    "RenderCfg",
    "TRAINER_CFG",
    "TrainerCfg",
    "load_trainer_cfg",
]
