"""
Orbit Lab trainer - interactive front end
=========================================

Pygame window around :class:`orbit_trainer.mission.Simulation`. Easy mode
burns are aimed by dragging from the satellite; hard mode is flown with the
command console.

Keys: Space pause/resume, B burn (easy), R reset, D switch difficulty,
T trail, V vectors, M math HUD, Esc quit.
"""
from __future__ import annotations

import argparse
import sys
from dataclasses import replace

import numpy as np
import pygame
from pygame.locals import DOUBLEBUF, RESIZABLE

from orbit_trainer.core.config import RENDER_CFG, TRAINER_CFG, ConfigError, TrainerCfg, load_trainer_cfg
from orbit_trainer.core.logging_utils import RunLogger
from orbit_trainer.core.messages import CONSOLE
from orbit_trainer.core.physics import acceleration, compute_orbit_prediction
from orbit_trainer.core.settings import load_user_settings, save_user_settings
from orbit_trainer.core.timekeeping import FrameTimer
from orbit_trainer.data.difficulty import DIFFICULTY_DISPLAY_ORDER, get_difficulty
from orbit_trainer.mission.burns import AimedBurn, aim_burn, can_start_aim
from orbit_trainer.mission.simulation import Simulation
from orbit_trainer.render import (
    Button,
    ButtonVisualStyle,
    Camera,
    TextInput,
    build_text_panel,
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
    get_text_surface,
    load_font,
    wrap_text,
)

FONT_NAMES = ["consolas", "dejavusansmono", "couriernew", "monospace"]
PREDICTION_REFRESH_TICKS = 15


class TrainerApp:
    def __init__(self, cfg: TrainerCfg, difficulty: str, *, seed: int | None, log_runs: bool) -> None:
        self.base_cfg = cfg
        self.settings = load_user_settings()
        self.seed = seed
        self.log_runs = log_runs
        self.logger: RunLogger | None = None

        self.screen = pygame.display.set_mode((RENDER_CFG.width, RENDER_CFG.height), RESIZABLE | DOUBLEBUF)
        self.font = load_font(FONT_NAMES, 15)
        self.small_font = load_font(FONT_NAMES, 13)
        self.title_font = load_font(FONT_NAMES, 22, bold=True)
        self.camera = Camera(self._viewport(), 1.0)
        self.camera.fit_radius(cfg.target_band_max_r + RENDER_CFG.view_margin_units)
        self.stars = self._make_stars()

        self.show_trail = bool(self.settings["show_trail"])
        self.show_vectors = bool(self.settings["show_vectors"])
        self.show_math_hud = bool(self.settings["show_math_hud"])
        self.aiming = False
        self.aim: AimedBurn | None = None
        self.banner_until = 0.0
        self.wall_time = 0.0
        self.prediction: list[tuple[float, float]] = []
        self.prediction_age = PREDICTION_REFRESH_TICKS

        self.sim = self._build_simulation(difficulty)
        self.settings["difficulty"] = self.sim.profile.key
        self.console = TextInput((0, 0, 10, 10), self.submit_console, placeholder="prograde 10")
        self.buttons: list[Button] = []
        self._layout()

    # ------------------------------------------------------------------
    def _viewport(self) -> tuple[int, int, int, int]:
        width, height = self.screen.get_size()
        return 0, 0, max(1, width - RENDER_CFG.side_panel_width), height

    def _make_stars(self) -> list[tuple[int, int, int, int]]:
        width, height = self.screen.get_size()
        return generate_starfield(int(width * height * RENDER_CFG.starfield_density), size=(width, height))

    def _build_simulation(self, difficulty: str) -> Simulation:
        cfg = replace(self.base_cfg, view_half_extents=self.camera.view_half_extents())
        sim = Simulation(cfg, difficulty, seed=self.seed, trail_enabled=self.show_trail)
        if self.log_runs:
            self.logger = RunLogger(difficulty=sim.profile.key)
            sim.attach_logger(self.logger)
        return sim

    def _layout(self) -> None:
        width, height = self.screen.get_size()
        panel_x = width - RENDER_CFG.side_panel_width + 12
        style = ButtonVisualStyle(
            base_color=RENDER_CFG.button_color,
            hover_color=RENDER_CFG.button_hover_color,
            text_color=RENDER_CFG.button_text_color,
            radius=RENDER_CFG.button_radius,
            border_color=RENDER_CFG.button_border_color,
            border_width=1,
        )
        bw, bh, gap = 72, 32, 8
        y = height - bh - 12
        self.buttons = [
            Button((panel_x, y, bw, bh), "Run", self.sim_run, style=style),
            Button(
                (panel_x + (bw + gap), y, bw, bh),
                "Pause",
                self.sim_pause,
                style=style,
                text_getter=lambda: "Resume" if self.sim.state.running and self.sim.state.paused else "Pause",
            ),
            Button((panel_x + 2 * (bw + gap), y, bw, bh), "Reset", self.sim_reset, style=style),
            Button(
                (panel_x + 3 * (bw + gap), y - bh - gap, bw, bh),
                "Burn",
                self.burn_from_aim,
                style=style,
                enabled=lambda: self.sim.profile.allows_direct_burns,
            ),
            Button(
                (panel_x, y - bh - gap, 2 * bw + gap, bh),
                "Mode",
                self.toggle_difficulty,
                style=style,
                text_getter=lambda: f"Mode: {self.sim.profile.name}",
            ),
        ]
        self.console.rect = pygame.Rect(panel_x, y - 2 * (bh + gap), RENDER_CFG.side_panel_width - 24, bh)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def sim_run(self) -> None:
        self.sim.run()

    def sim_pause(self) -> None:
        self.sim.toggle_pause()

    def sim_reset(self) -> None:
        self.sim.reset()
        self.aim = None
        self.aiming = False
        self.banner_until = 0.0
        self.prediction_age = PREDICTION_REFRESH_TICKS

    def toggle_difficulty(self) -> None:
        keys = DIFFICULTY_DISPLAY_ORDER
        current = keys.index(self.sim.profile.key)
        self.set_difficulty(keys[(current + 1) % len(keys)])

    def set_difficulty(self, key: str) -> None:
        self.sim.set_difficulty(key)
        self.settings["difficulty"] = self.sim.profile.key
        self.aim = None
        self.aiming = False
        self.banner_until = 0.0
        self.prediction_age = PREDICTION_REFRESH_TICKS

    def submit_console(self, text: str) -> None:
        self.sim.enqueue_command(text)

    def burn_from_aim(self) -> None:
        if self.aim is None:
            self.sim.request_burn(np.zeros(2), 0.0)
            return
        self.sim.request_burn(self.aim.vector, self.aim.requested_magnitude)
        self.aim = None
        self.prediction_age = PREDICTION_REFRESH_TICKS

    def toggle_trail(self) -> None:
        self.show_trail = not self.show_trail
        self.settings["show_trail"] = self.show_trail
        self.sim.set_trail_enabled(self.show_trail)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def handle_event(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.VIDEORESIZE:
            self.screen = pygame.display.set_mode(event.size, RESIZABLE | DOUBLEBUF)
            self.camera.update_viewport(self._viewport())
            self.camera.fit_radius(self.base_cfg.target_band_max_r + RENDER_CFG.view_margin_units)
            self.stars = self._make_stars()
            self._layout()
            if self.sim.set_view_half_extents(self.camera.view_half_extents()):
                self.aim = None
                self.aiming = False
                self.prediction_age = PREDICTION_REFRESH_TICKS
            return True

        if self.sim.profile.uses_command_queue and self.console.handle_event(event):
            return True
        for button in self.buttons:
            if button.handle_event(event):
                return True

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.sim.profile.allows_direct_burns and self.camera.contains(*event.pos):
                point = np.array(self.camera.screen_to_world(*event.pos))
                if can_start_aim(self.sim.state.satellite.position, point, self.sim.cfg):
                    self.aiming = True
                    self.aim = aim_burn(self.sim.state.satellite.position, point, self.sim.cfg)
        elif event.type == pygame.MOUSEMOTION and self.aiming:
            point = np.array(self.camera.screen_to_world(*event.pos))
            self.aim = aim_burn(self.sim.state.satellite.position, point, self.sim.cfg)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.aiming = False
        elif event.type == pygame.KEYDOWN:
            return self.handle_key(event.key)
        return True

    def handle_key(self, key: int) -> bool:
        if key == pygame.K_ESCAPE:
            return False
        if key == pygame.K_SPACE:
            if self.sim.state.running:
                self.sim.toggle_pause()
            else:
                self.sim.run()
        elif key == pygame.K_b:
            self.burn_from_aim()
        elif key == pygame.K_r:
            self.sim_reset()
        elif key == pygame.K_d:
            self.toggle_difficulty()
        elif key == pygame.K_t:
            self.toggle_trail()
        elif key == pygame.K_v:
            self.show_vectors = not self.show_vectors
            self.settings["show_vectors"] = self.show_vectors
        elif key == pygame.K_m:
            self.show_math_hud = not self.show_math_hud
            self.settings["show_math_hud"] = self.show_math_hud
        return True

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------
    def update(self, frame_dt: float) -> None:
        self.wall_time += frame_dt
        was_complete = self.sim.state.flags.objective_complete
        if self.sim.advance(frame_dt) > 0.0:
            self.prediction_age += 1
        if not was_complete and self.sim.state.flags.objective_complete:
            self.banner_until = self.wall_time + RENDER_CFG.banner_duration
        if self.aiming and self.aim is not None:
            # Keep the aim anchored to the moving satellite.
            end = pygame.mouse.get_pos()
            point = np.array(self.camera.screen_to_world(*end))
            self.aim = aim_burn(self.sim.state.satellite.position, point, self.sim.cfg)
        if self.show_vectors and self.prediction_age >= PREDICTION_REFRESH_TICKS:
            sat = self.sim.state.satellite
            _, self.prediction = compute_orbit_prediction(sat.position, sat.velocity, self.sim.cfg)
            self.prediction_age = 0

    def draw(self) -> None:
        surface = self.screen
        cfg = self.sim.cfg
        snap = self.sim.snapshot()
        surface.fill(RENDER_CFG.background_color)
        draw_starfield(surface, self.stars)
        draw_target_band(
            surface,
            self.camera,
            cfg.target_band_min_r,
            cfg.target_band_max_r,
            render_cfg=RENDER_CFG,
            highlight=snap.band_ok,
        )
        if self.sim.profile.safety_enabled:
            draw_ring(surface, self.camera, cfg.safe_min_r, RENDER_CFG.safety_ring_color, dashed=True)
        draw_planet(surface, self.camera, cfg.planet_radius, cfg.atmosphere_thickness, render_cfg=RENDER_CFG)

        if self.show_vectors and self.prediction:
            points = [self.camera.world_to_screen(x, y) for x, y in self.prediction]
            draw_orbit_line(surface, RENDER_CFG.orbit_prediction_color, points, 1)
        if self.show_trail:
            draw_trail(surface, self.camera, self.sim.trail_points(), color=RENDER_CFG.trail_color)

        sat_screen = self.camera.world_to_screen(float(snap.position[0]), float(snap.position[1]))
        if self.show_vectors:
            v_end = snap.position + snap.velocity * RENDER_CFG.velocity_arrow_scale
            g_end = snap.position + acceleration(snap.position, cfg.mu) * RENDER_CFG.gravity_arrow_scale
            for end, color in (
                (v_end, RENDER_CFG.velocity_arrow_color),
                (g_end, RENDER_CFG.gravity_arrow_color),
            ):
                draw_arrow(
                    surface,
                    sat_screen,
                    self.camera.world_to_screen(float(end[0]), float(end[1])),
                    color=color,
                    head_length=RENDER_CFG.velocity_arrow_head_length,
                    head_angle_deg=RENDER_CFG.velocity_arrow_head_angle_deg,
                )
        if self.aim is not None and self.sim.profile.allows_direct_burns:
            # Arrow length matches the clamped burn, in aim-drag units.
            end = snap.position + self.aim.vector / cfg.aim_gain
            draw_arrow(
                surface,
                sat_screen,
                self.camera.world_to_screen(float(end[0]), float(end[1])),
                color=RENDER_CFG.aim_arrow_color,
                head_length=RENDER_CFG.velocity_arrow_head_length,
                head_angle_deg=RENDER_CFG.velocity_arrow_head_angle_deg,
            )
        draw_satellite(surface, sat_screen, RENDER_CFG.satellite_pixel_radius, color=RENDER_CFG.satellite_color)

        self.draw_side_panel(snap)
        if snap.running:
            self.draw_guidance()
        if snap.result is not None and self.wall_time < self.banner_until:
            self.draw_banner(snap)

    def draw_side_panel(self, snap) -> None:
        surface = self.screen
        cfg = self.sim.cfg
        width, height = surface.get_size()
        panel_rect = pygame.Rect(width - RENDER_CFG.side_panel_width, 0, RENDER_CFG.side_panel_width, height)
        pygame.draw.rect(surface, (8, 16, 28), panel_rect)
        x = panel_rect.left + 12
        y = 12
        text = RENDER_CFG.hud_text_color
        dim = RENDER_CFG.hud_dim_text_color
        good = RENDER_CFG.hud_good_color
        warn = RENDER_CFG.hud_warn_color

        surface.blit(get_text_surface(self.title_font, "Orbit Lab", text), (x, y))
        y += 32
        for line in wrap_text(snap.status, self.small_font, RENDER_CFG.side_panel_width - 24)[:3]:
            surface.blit(get_text_surface(self.small_font, line, warn), (x, y))
            y += self.small_font.get_linesize()
        y += 6

        m = snap.math
        v_mid = self.sim.evaluator.midpoint_speed
        if self.sim.profile.safety_enabled:
            speed_rule = f"Speed tol: {v_mid:.2f} +/- {cfg.speed_tolerance_frac * 100:.1f}%"
        else:
            speed_rule = f"Min speed: {snap.speed_target:.2f} u/s"
        lines = [
            (f"Band: {cfg.target_band_min_r:.0f} to {cfg.target_band_max_r:.0f}", good if snap.band_ok else dim),
            (f"v_circ: {m.circular_speed:.2f}  v: {m.v:.2f}", text),
            (speed_rule, good if snap.speed_ok else dim),
            (f"Entered band: {'yes' if snap.has_entered_band else 'no'}", good if snap.has_entered_band else dim),
            (f"Hold remaining: {snap.hold_time_remaining:.1f} s", text),
            (f"Score: {snap.score:.2f} / 100", text),
            (f"Delta-v: {snap.delta_v_used:.2f} / {cfg.target_dv:.2f}", text),
            (f"Time: {snap.elapsed_time:.2f} / {cfg.par_time:.2f} s", text),
            (f"Safety penalties: {snap.safety_penalty_weighted:.2f}", warn if snap.safety_penalty > 0 else dim),
        ]
        if self.show_math_hud:
            lines += [
                ("", text),
                (f"r = {m.r:.1f}", dim),
                (f"epsilon = {m.specific_energy:.2f}", dim),
                (f"h = {m.angular_momentum:.1f}", dim),
                (f"e = {m.eccentricity:.3f}", dim),
            ]
        panel = build_text_panel(
            self.font,
            lines,
            background_color=RENDER_CFG.panel_background_color,
            padding=(10, 8),
            min_width=RENDER_CFG.side_panel_width - 24,
        )
        surface.blit(panel, (x, y))
        y += panel.get_height() + 8

        surface.blit(get_text_surface(self.small_font, "Fuel", dim), (x, y))
        draw_fuel_bar(
            surface,
            pygame.Rect(x + 44, y + 2, RENDER_CFG.side_panel_width - 68, 12),
            snap.fuel_fraction,
            good_color=good,
            warn_color=warn,
        )
        y += 24

        if self.sim.profile.uses_command_queue:
            for line in wrap_text(self.sim.queue.describe(), self.small_font, RENDER_CFG.side_panel_width - 24)[:3]:
                surface.blit(get_text_surface(self.small_font, line, text), (x, y))
                y += self.small_font.get_linesize()
            for entry in self.sim.messages.latest(CONSOLE, RENDER_CFG.console_log_lines):
                if y > self.console.rect.top - self.small_font.get_linesize():
                    break
                surface.blit(get_text_surface(self.small_font, entry.text, dim), (x, y))
                y += self.small_font.get_linesize()
            self.console.draw(surface, self.small_font, text_color=text, placeholder_color=dim)
        else:
            hint = "Drag from the satellite to aim, then press B."
            surface.blit(get_text_surface(self.small_font, hint, dim), (x, y))

        mouse_pos = pygame.mouse.get_pos()
        for button in self.buttons:
            button.draw(surface, self.font, mouse_pos)

    def draw_guidance(self) -> None:
        _, _, vw, vh = self.camera.viewport
        lines = wrap_text(self.sim.speed_guidance(), self.small_font, min(520, vw - 40))
        panel = build_text_panel(
            self.small_font,
            [(line, RENDER_CFG.hud_text_color) for line in lines],
            background_color=RENDER_CFG.panel_background_color,
            padding=(10, 6),
        )
        self.screen.blit(panel, panel.get_rect(midbottom=(vw // 2, vh - 12)))

    def draw_banner(self, snap) -> None:
        result = snap.result
        _, _, vw, vh = self.camera.viewport
        lines = [
            (f"Mission complete - {result.medal.label}", RENDER_CFG.banner_title_color),
            (f"Final score: {result.score} / 100", RENDER_CFG.hud_text_color),
            (f"dv: {result.delta_v_used:.2f}/{result.target_dv:.2f}  Time: {result.elapsed_time:.2f}/{result.par_time:.2f}", RENDER_CFG.hud_text_color),
        ]
        lines += [(line, RENDER_CFG.hud_dim_text_color) for line in wrap_text(result.why_won(), self.small_font, 460)]
        panel = build_text_panel(self.font, lines, background_color=RENDER_CFG.banner_color, padding=(18, 14))
        self.screen.blit(panel, panel.get_rect(center=(vw // 2, vh // 3)))

    # ------------------------------------------------------------------
    def close(self) -> None:
        save_user_settings(self.settings)
        if self.logger is not None:
            self.logger.close()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Orbit Lab: insert a satellite into the target band.")
    parser.add_argument("--difficulty", choices=DIFFICULTY_DISPLAY_ORDER, help="Start in this difficulty")
    parser.add_argument("--config", help="JSON file overriding trainer constants")
    parser.add_argument("--seed", type=int, help="Seed for reproducible spawns")
    parser.add_argument("--log", action="store_true", help="Write a run log under data/runs/")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    cfg = TRAINER_CFG
    if args.config:
        try:
            cfg = load_trainer_cfg(args.config)
        except (OSError, ConfigError) as exc:
            print(f"Could not load config: {exc}", file=sys.stderr)
            return 2

    pygame.init()
    pygame.display.set_caption("Orbit Lab - orbit insertion trainer")
    difficulty = args.difficulty or get_difficulty(str(load_user_settings()["difficulty"])).key
    app = TrainerApp(cfg, difficulty, seed=args.seed, log_runs=args.log)
    timer = FrameTimer()
    clock = pygame.time.Clock()
    running = True
    try:
        while running:
            for event in pygame.event.get():
                if not app.handle_event(event):
                    running = False
                    break
            app.update(timer.tick())
            app.draw()
            pygame.display.flip()
            clock.tick(60)
    finally:
        app.close()
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
