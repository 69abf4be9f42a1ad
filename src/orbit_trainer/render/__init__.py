"""Rendering helpers for the orbit trainer front end."""

from .camera import Camera
from .assets import get_text_surface, load_font, wrap_text
from .draw import (
    downsample_points,
    draw_arrow,
    draw_fuel_bar,
    draw_orbit_line,
    draw_planet,
    draw_ring,
    draw_satellite,
    draw_starfield,
    draw_target_band,
    draw_trail,
    generate_starfield,
)
from .ui import Button, ButtonVisualStyle, TextInput, build_text_panel

__all__ = [
    "Button",
    "ButtonVisualStyle",
    "Camera",
    "TextInput",
    "build_text_panel",
    "downsample_points",
    "draw_arrow",
    "draw_fuel_bar",
    "draw_orbit_line",
    "draw_planet",
    "draw_ring",
    "draw_satellite",
    "draw_starfield",
    "draw_target_band",
    "draw_trail",
    "generate_starfield",
    "get_text_surface",
    "load_font",
    "wrap_text",
]
