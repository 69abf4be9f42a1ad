from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

import pygame

from .assets import Color, get_text_surface


@dataclass(frozen=True)
class ButtonVisualStyle:
    base_color: Color
    hover_color: Color
    text_color: tuple[int, int, int]
    radius: int
    border_color: Color | None = None
    border_width: int = 0
    disabled_alpha: int = 90


class Button:
    """Rectangular button with hover feedback, a callback and an enabled check."""

    def __init__(
        self,
        rect: tuple[int, int, int, int],
        text: str,
        callback: Callable[[], None],
        *,
        style: ButtonVisualStyle,
        text_getter: Callable[[], str] | None = None,
        enabled: Callable[[], bool] | None = None,
    ) -> None:
        self.rect = pygame.Rect(rect)
        self._text = text
        self._callback = callback
        self._text_getter = text_getter
        self._enabled = enabled
        self._style = style

    def get_text(self) -> str:
        if self._text_getter is not None:
            return self._text_getter()
        return self._text

    def is_enabled(self) -> bool:
        return self._enabled is None or self._enabled()

    def draw(self, surface: pygame.Surface, font: pygame.font.Font, mouse_pos: tuple[int, int]) -> None:
        style = self._style
        enabled = self.is_enabled()
        hovered = enabled and self.rect.collidepoint(mouse_pos)
        color = style.hover_color if hovered else style.base_color
        button_surface = pygame.Surface(self.rect.size, pygame.SRCALPHA)
        pygame.draw.rect(button_surface, color, button_surface.get_rect(), border_radius=style.radius)
        if style.border_color is not None and style.border_width > 0:
            pygame.draw.rect(
                button_surface,
                style.border_color,
                button_surface.get_rect(),
                style.border_width,
                border_radius=style.radius,
            )
        text_surf = get_text_surface(font, self.get_text(), style.text_color)
        text_rect = text_surf.get_rect(center=button_surface.get_rect().center)
        button_surface.blit(text_surf, text_rect)
        if not enabled:
            button_surface.set_alpha(style.disabled_alpha)
        surface.blit(button_surface, self.rect.topleft)

    def handle_event(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos) and self.is_enabled():
                self._callback()
                return True
        return False


class TextInput:
    """Single-line text entry that hands its contents to ``on_submit`` on Enter."""

    def __init__(
        self,
        rect: tuple[int, int, int, int],
        on_submit: Callable[[str], None],
        *,
        placeholder: str = "",
        max_length: int = 48,
    ) -> None:
        self.rect = pygame.Rect(rect)
        self.text = ""
        self.active = False
        self._on_submit = on_submit
        self._placeholder = placeholder
        self._max_length = max_length

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Return ``True`` when the event was consumed by the input."""

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.active = self.rect.collidepoint(event.pos)
            return self.active
        if not self.active:
            return False
        if event.type == pygame.TEXTINPUT:
            if len(self.text) < self._max_length:
                self.text += event.text
            return True
        if event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                submitted, self.text = self.text, ""
                self._on_submit(submitted)
            elif event.key == pygame.K_BACKSPACE:
                self.text = self.text[:-1]
            elif event.key == pygame.K_ESCAPE:
                self.active = False
            return True
        return False

    def draw(
        self,
        surface: pygame.Surface,
        font: pygame.font.Font,
        *,
        text_color: tuple[int, int, int],
        placeholder_color: tuple[int, int, int],
    ) -> None:
        pygame.draw.rect(surface, (6, 14, 26), self.rect, border_radius=6)
        border = (118, 180, 255) if self.active else (60, 80, 110)
        pygame.draw.rect(surface, border, self.rect, 1, border_radius=6)
        if self.text:
            label = get_text_surface(font, "> " + self.text + ("_" if self.active else ""), text_color)
        else:
            label = get_text_surface(font, "> " + self._placeholder, placeholder_color)
        surface.blit(label, (self.rect.left + 8, self.rect.centery - label.get_height() // 2))


def build_text_panel(
    font: pygame.font.Font,
    lines: Sequence[tuple[str, tuple[int, int, int]]],
    *,
    background_color: Color,
    padding: tuple[int, int] = (14, 14),
    min_width: int = 0,
) -> pygame.Surface:
    if not lines:
        raise ValueError("lines must not be empty")
    padding_x, padding_y = padding
    line_height = font.get_linesize()
    width = max(min_width, max(font.size(text)[0] for text, _ in lines) + padding_x * 2)
    height = line_height * len(lines) + padding_y * 2
    panel_surface = pygame.Surface((width, height), pygame.SRCALPHA)
    pygame.draw.rect(panel_surface, background_color, panel_surface.get_rect(), border_radius=12)
    for idx, (text, color) in enumerate(lines):
        if not text:
            continue
        text_surf = get_text_surface(font, text, color)
        panel_surface.blit(text_surf, (padding_x, padding_y + idx * line_height))
    return panel_surface
