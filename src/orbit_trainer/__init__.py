"""Orbit Lab trainer: a two-body orbit insertion game engine."""

__version__ = "1.0.0"
