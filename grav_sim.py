#!/usr/bin/env python3
"""
Gravity sandbox application entry point and UI/renderer coordination.

What this module does
- Starts two event loops: a Pygame rendering thread (viewport) and the Dear PyGui UI
  (running on the main thread).
- The viewport turns mouse and keyboard input into Simulation and Camera2D calls,
  steps the simulation once per frame, and draws every body as a fixed-size disc.
- The controls window shows the status bar and hosts the add-body and body-editor
  forms. It reads and writes simulation state only through Simulation methods.

State ownership
- Simulation (grav.simulation) holds the physics state and guards it with its own lock.
- UiState holds what the user is in the middle of doing: the interaction mode, the
  selected body id, and a pending add-body click. It never holds physics values.
- The camera belongs to the renderer; the controls window reaches it through
  renderer methods that take the renderer's camera lock.

Controls (viewport)
- Q quit, P/Space pause, Left/Right halve/double the time step, Up/Down zoom in/out,
  A add mode (pauses), D drag mode (resumes), R reverse time, S single step,
  F fit camera, Delete remove selected body.
- Drag mode: left-drag pans, left-click selects. Add mode: left-click places a
  body there (opens the add form prefilled). Wheel zooms about the cursor.

Running
1) Install dependencies: `pip install pygame dearpygui`
2) Run this module: `python grav_sim.py`
"""

import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Optional, Tuple

# GUI and Rendering libs
import pygame
from pygame import gfxdraw
import dearpygui.dearpygui as dpg

from grav.camera import Camera2D
from grav.constants import (
    BACKGROUND_COLOR,
    BODY_DRAW_RADIUS,
    DEFAULT_BODY_MASS,
    EARTH_MASS,
    HUD_COLOR,
    PICK_RADIUS_PX,
    SAFE_COORD_LIMIT,
    SELECTION_COLOR,
    SOLAR_MASS,
    VIEW_HEIGHT,
    VIEW_WIDTH,
    WHEEL_ZOOM_STEP,
    ZOOM_STEP,
)
from grav.presets import DEFAULT_PRESET, PRESETS
from grav.simulation import Simulation
from grav.utils import FieldSync, color_from_rgba255, color_to_rgb255, color_to_rgba255, try_float

logger = logging.getLogger("grav_sim")

MODE_DRAG = "Drag"
MODE_ADD = "Add"

ERROR_COLOR = (255, 120, 120)
OK_COLOR = (180, 220, 180)

# ============================================================
# UI staging state
# ============================================================

@dataclass
class UiState:
    """
    Transient interaction state shared by the viewport and controls threads.
    Access under `lock`.
    """
    mode: str = MODE_DRAG
    selected_id: Optional[int] = None
    pending_click: Optional[Tuple[float, float]] = None  # world position of an add-mode click
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

# ============================================================
# Pygame Renderer Thread
# ============================================================

class PygameRenderer(threading.Thread):
    """
    Pygame loop: input handling, one simulation step per frame, drawing.
    """
    def __init__(self, sim: Simulation, ui_state: UiState):
        super().__init__(daemon=True)
        self.sim = sim
        self.ui_state = ui_state
        self.camera = Camera2D()
        self.camera_lock = threading.RLock()
        self.surface = None
        self.clock = None
        self.dragging = False
        self.running = True

    # -----------------------
    # Camera access for the controls thread
    # -----------------------

    def fit_camera(self):
        """Adjust camera to fit all bodies into view with margin."""
        positions = self.sim.positions()
        with self.camera_lock:
            self.camera.fit(positions)

    def zoom(self, factor: float, pivot=None) -> float:
        with self.camera_lock:
            return self.camera.zoom(factor, pivot)

    def camera_scale(self) -> float:
        with self.camera_lock:
            return self.camera.scale

    # -----------------------
    # Main loop
    # -----------------------

    def run(self):
        pygame.init()
        pygame.display.set_caption("Gravity Sandbox - Viewport")
        self.surface = pygame.display.set_mode((VIEW_WIDTH, VIEW_HEIGHT), pygame.RESIZABLE)
        with self.camera_lock:
            self.camera.resize((VIEW_WIDTH, VIEW_HEIGHT))
        self.clock = pygame.time.Clock()

        while self.running:
            self.handle_events()
            self.sim.step()
            self.draw()
            self.clock.tick(60)

        pygame.quit()

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                with self.camera_lock:
                    self.camera.resize((event.w, event.h))

            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)

            elif event.type == pygame.MOUSEWHEEL:
                factor = 1.0 / WHEEL_ZOOM_STEP if event.y > 0 else WHEEL_ZOOM_STEP
                self.zoom(factor, pygame.mouse.get_pos())

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self.handle_click(pygame.mouse.get_pos())

            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self.dragging = False

            elif event.type == pygame.MOUSEMOTION and self.dragging:
                dx, dy = event.rel
                # the world follows the cursor
                with self.camera_lock:
                    self.camera.pan((-dx, -dy))

    def handle_click(self, mouse):
        with self.camera_lock:
            world = self.camera.view_to_world(mouse)
            pick_radius = self.camera.scale * PICK_RADIUS_PX
        with self.ui_state.lock:
            mode = self.ui_state.mode
        if mode == MODE_ADD:
            with self.ui_state.lock:
                self.ui_state.pending_click = world
            return
        body_id = self.sim.body_near(world, pick_radius)
        if body_id is not None:
            with self.ui_state.lock:
                self.ui_state.selected_id = body_id
        self.dragging = True

    def handle_key(self, key):
        sim = self.sim
        if key == pygame.K_q:
            self.running = False
        elif key in (pygame.K_p, pygame.K_SPACE):
            with self.ui_state.lock:
                mode = self.ui_state.mode
            if mode == MODE_DRAG:
                sim.toggle_pause()
        elif key == pygame.K_LEFT:
            sim.halve_time_step()
        elif key == pygame.K_RIGHT:
            sim.double_time_step()
        elif key == pygame.K_UP:
            self.zoom(1.0 / ZOOM_STEP)
        elif key == pygame.K_DOWN:
            self.zoom(ZOOM_STEP)
        elif key == pygame.K_a:
            set_mode(self.ui_state, sim, MODE_ADD)
        elif key == pygame.K_d:
            set_mode(self.ui_state, sim, MODE_DRAG)
        elif key == pygame.K_r:
            sim.reverse()
        elif key == pygame.K_s:
            sim.step_once()
        elif key == pygame.K_f:
            self.fit_camera()
        elif key == pygame.K_DELETE:
            delete_selected(self.ui_state, sim)

    def draw(self):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)

        bodies = self.sim.snapshot()
        with self.ui_state.lock:
            selected_id = self.ui_state.selected_id
            mode = self.ui_state.mode
        with self.camera_lock:
            screen_positions = [self.camera.world_to_view(b.position) for b in bodies]
            scale = self.camera.scale

        for b, screen_pos in zip(bodies, screen_positions):
            p = _safe_point(screen_pos)
            if p is None:
                continue
            gfxdraw.filled_circle(surf, p[0], p[1], BODY_DRAW_RADIUS, color_to_rgb255(b.color))
            gfxdraw.aacircle(surf, p[0], p[1], BODY_DRAW_RADIUS, color_to_rgb255(b.color))
            if b.body_id == selected_id:
                gfxdraw.aacircle(surf, p[0], p[1], BODY_DRAW_RADIUS + 4, SELECTION_COLOR)

        draw_text(surf, status_text(self.sim, mode, scale), 10, 10, HUD_COLOR)
        pygame.display.flip()

_cached_font = None

def draw_text(surface, text, x, y, color):
    global _cached_font
    if not pygame.font.get_init():
        pygame.font.init()
    if _cached_font is None:
        _cached_font = pygame.font.SysFont("consolas", 16)
    img = _cached_font.render(text, True, color)
    surface.blit(img, (x, y))

def _safe_point(pt):
    if not (math.isfinite(pt[0]) and math.isfinite(pt[1])):
        return None
    x, y = int(pt[0]), int(pt[1])
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None

# ============================================================
# Shared actions (viewport keys and controls buttons)
# ============================================================

def status_text(sim: Simulation, mode: str, scale: float) -> str:
    with sim.lock:
        paused = sim.paused
        dt = sim.time_step
        backward = sim.reversed
        n = len(sim.bodies)
    parts = []
    if paused:
        parts.append("PAUSED")
    parts.append(mode)
    parts.append(f"Scale: {scale:.3g} m/px")
    parts.append(f"Speed: {dt:.6g} s/step")
    if backward:
        parts.append("REVERSED")
    parts.append(f"Bodies: {n}")
    return " | ".join(parts)

def set_mode(ui_state: UiState, sim: Simulation, mode: str):
    """Entering add mode pauses; going back to drag mode resumes."""
    with ui_state.lock:
        previous = ui_state.mode
        ui_state.mode = mode
        if mode == MODE_DRAG:
            ui_state.pending_click = None
    if mode == previous:
        return
    if mode == MODE_ADD:
        sim.pause()
    else:
        sim.resume()

def delete_selected(ui_state: UiState, sim: Simulation) -> Optional[str]:
    """Remove the selected body; returns its name, or None if nothing was selected."""
    with ui_state.lock:
        body_id = ui_state.selected_id
        ui_state.selected_id = None
    if body_id is None:
        return None
    try:
        body = sim.remove_by_id(body_id)
    except KeyError:
        return None
    return body.name

# ============================================================
# Dear PyGui UI
# ============================================================

class UI:
    """
    Dear PyGui interface: status bar, presets, add-body form, body editor,
    simulation controls.
    """
    MASS_UNITS = ["kg", "Earth mass", "Solar mass"]

    def __init__(self, sim: Simulation, renderer: PygameRenderer, ui_state: UiState):
        self.sim = sim
        self.renderer = renderer
        self.ui_state = ui_state

        # Track selection to avoid overwriting edits during typing
        self._last_edit_selected_id = None
        self._list_ids = []
        self._dt_field = FieldSync()

        self._build_ui()

        dpg.set_frame_callback(1, self._post_setup)
        self._schedule_sync()

    def _post_setup(self):
        self.load_preset(DEFAULT_PRESET)

    def _schedule_sync(self):
        """Reschedule the periodic sync callback (~10Hz at 60 FPS)."""
        dpg.set_frame_callback(dpg.get_frame_count() + 6, self._sync_ui_with_sim)

    @staticmethod
    def mass_to_si(val: float, unit: str) -> float:
        if unit == "Earth mass":
            return val * EARTH_MASS
        elif unit == "Solar mass":
            return val * SOLAR_MASS
        return val

    # -----------------------
    # UI Construction
    # -----------------------

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='Gravity Sandbox - Controls', width=520, height=820)

        with dpg.window(label="Controls", width=500, height=800, pos=(10, 10), tag="main_window"):
            dpg.add_text("", tag="status_bar")
            dpg.add_text("", tag="energy_text")
            dpg.add_separator()

            with dpg.group(horizontal=True):
                dpg.add_text("Preset:")
                dpg.add_combo(list(PRESETS.keys()), default_value=DEFAULT_PRESET, width=240,
                              tag="preset_combo")
                dpg.add_button(label="Load", callback=lambda: self.load_preset(dpg.get_value("preset_combo")))
                dpg.add_button(label="Fit Camera", callback=self.renderer.fit_camera)

            dpg.add_separator()

            dpg.add_text("Add New Body")
            with dpg.group(horizontal=True):
                dpg.add_radio_button([MODE_DRAG, MODE_ADD], default_value=MODE_DRAG, horizontal=True,
                                     callback=lambda s, a, u: set_mode(self.ui_state, self.sim, a),
                                     tag="mode_radio")
            dpg.add_input_text(label="Name", default_value="", width=200, tag="add_name")
            with dpg.group(horizontal=True):
                dpg.add_input_text(label="Mass", default_value=f"{DEFAULT_BODY_MASS:.4e}", width=120,
                                   tag="add_mass")
                dpg.add_combo(self.MASS_UNITS, label="Unit", default_value="kg", width=120,
                              tag="add_mass_unit")
            with dpg.group(horizontal=True):
                dpg.add_input_text(label="Pos X (m)", default_value="0.0", width=150, tag="add_pos_x")
                dpg.add_input_text(label="Pos Y (m)", default_value="0.0", width=150, tag="add_pos_y")
            with dpg.group(horizontal=True):
                dpg.add_input_text(label="Vel X (m/s)", default_value="0.0", width=150, tag="add_vel_x")
                dpg.add_input_text(label="Vel Y (m/s)", default_value="0.0", width=150, tag="add_vel_y")
            dpg.add_color_edit(default_value=(255, 255, 255, 255), label="Color", width=220, tag="add_color")
            dpg.add_button(label="Add Body", callback=self._on_add_body_clicked)
            dpg.add_text("", tag="status_msg")

            dpg.add_separator()

            dpg.add_text("Bodies")
            dpg.add_listbox(items=[], width=480, num_items=6, callback=self._on_select_body,
                            tag="body_list")

            dpg.add_text("Edit Selected Body")
            dpg.add_input_text(label="Name", default_value="", width=200, tag="edit_name")
            with dpg.group(horizontal=True):
                dpg.add_input_text(label="Mass", default_value="", width=120, tag="edit_mass")
                dpg.add_combo(self.MASS_UNITS, label="Unit", default_value="kg", width=120,
                              tag="edit_mass_unit")
            with dpg.group(horizontal=True):
                dpg.add_input_text(label="Pos X (m)", default_value="", width=150, tag="edit_pos_x")
                dpg.add_input_text(label="Pos Y (m)", default_value="", width=150, tag="edit_pos_y")
            with dpg.group(horizontal=True):
                dpg.add_input_text(label="Vel X (m/s)", default_value="", width=150, tag="edit_vel_x")
                dpg.add_input_text(label="Vel Y (m/s)", default_value="", width=150, tag="edit_vel_y")
            dpg.add_color_edit(default_value=(255, 255, 255, 255), label="Color", width=220, tag="edit_color")
            with dpg.group(horizontal=True):
                dpg.add_button(label="Apply Edits", callback=self._apply_selected_body_edits)
                dpg.add_button(label="Delete Selected", callback=self._delete_selected)

            dpg.add_separator()

            dpg.add_text("Simulation Controls")
            with dpg.group(horizontal=True):
                dpg.add_button(label="Play/Pause", callback=self._toggle_play)
                dpg.add_button(label="Step", callback=self._step_once)
                dpg.add_button(label="Reverse", callback=self._reverse)
            with dpg.group(horizontal=True):
                dpg.add_input_text(label="Time step (s)", default_value="", width=150, tag="dt_input")
                dpg.add_button(label="Set", callback=self._set_time_step)
                dpg.add_button(label="/2", callback=lambda: self._after_dt_change(self.sim.halve_time_step()))
                dpg.add_button(label="x2", callback=lambda: self._after_dt_change(self.sim.double_time_step()))
            with dpg.group(horizontal=True):
                dpg.add_button(label="Zoom in", callback=lambda: self.renderer.zoom(1.0 / ZOOM_STEP))
                dpg.add_button(label="Zoom out", callback=lambda: self.renderer.zoom(ZOOM_STEP))

        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)
        self._dt_field.mark(self.sim.time_step)
        dpg.set_value("dt_input", f"{self.sim.time_step:.6g}")

    # -----------------------
    # UI Callbacks
    # -----------------------

    def _set_status(self, msg: str, color=OK_COLOR):
        dpg.set_value("status_msg", msg)
        dpg.configure_item("status_msg", color=color)

    def _set_error(self, msg: str):
        logger.warning(msg)
        self._set_status(msg, ERROR_COLOR)

    def _read_vec(self, x_tag: str, y_tag: str):
        x = try_float(dpg.get_value(x_tag))
        y = try_float(dpg.get_value(y_tag))
        if x is None or y is None:
            return None
        return (x, y)

    def _on_add_body_clicked(self):
        mass_val = try_float(dpg.get_value("add_mass"))
        pos = self._read_vec("add_pos_x", "add_pos_y")
        vel = self._read_vec("add_vel_x", "add_vel_y")
        if mass_val is None or pos is None or vel is None:
            self._set_error("Invalid numeric input.")
            return
        mass_si = self.mass_to_si(mass_val, dpg.get_value("add_mass_unit"))
        name = dpg.get_value("add_name").strip() or None
        color = color_from_rgba255(dpg.get_value("add_color"))
        try:
            body_id = self.sim.add_body(mass_si, pos, vel, color=color, name=name)
        except ValueError as e:
            self._set_error(str(e))
            return
        with self.ui_state.lock:
            self.ui_state.selected_id = body_id
            self.ui_state.pending_click = None
        body = self.sim.get_body(body_id)
        self._refresh_body_list()
        self._set_status(f"Added '{body.name if body else body_id}'.")

    def _refresh_body_list(self):
        bodies = self.sim.snapshot()
        self._list_ids = [b.body_id for b in bodies]
        items = [f"{b.body_id}: {b.name}" for b in bodies]
        dpg.configure_item("body_list", items=items)
        with self.ui_state.lock:
            selected_id = self.ui_state.selected_id
        if selected_id in self._list_ids:
            dpg.set_value("body_list", items[self._list_ids.index(selected_id)])

    def _on_select_body(self, sender, app_data, user_data):
        # app_data is the selected "<id>: <name>" string
        if not app_data:
            return
        body_id = int(app_data.split(":", 1)[0])
        with self.ui_state.lock:
            self.ui_state.selected_id = body_id
        self._populate_edit_fields_from_selected()
        self._last_edit_selected_id = body_id

    def _populate_edit_fields_from_selected(self):
        with self.ui_state.lock:
            selected_id = self.ui_state.selected_id
        with self.sim.lock:
            b = self.sim.get_body(selected_id)
            if b is None:
                return
            name, mass, pos, vel, color = b.name, b.mass, b.position, b.velocity, b.color
        dpg.set_value("edit_name", name)
        dpg.set_value("edit_mass_unit", "kg")
        dpg.set_value("edit_mass", f"{mass:.6e}")
        dpg.set_value("edit_pos_x", f"{pos[0]:.6e}")
        dpg.set_value("edit_pos_y", f"{pos[1]:.6e}")
        dpg.set_value("edit_vel_x", f"{vel[0]:.6e}")
        dpg.set_value("edit_vel_y", f"{vel[1]:.6e}")
        dpg.set_value("edit_color", color_to_rgba255(color))

    def _apply_selected_body_edits(self):
        with self.ui_state.lock:
            selected_id = self.ui_state.selected_id
        mass_val = try_float(dpg.get_value("edit_mass"))
        pos = self._read_vec("edit_pos_x", "edit_pos_y")
        vel = self._read_vec("edit_vel_x", "edit_vel_y")
        if mass_val is None or pos is None or vel is None:
            self._set_error("Invalid inputs in edit form.")
            return
        mass_si = self.mass_to_si(mass_val, dpg.get_value("edit_mass_unit"))
        color = color_from_rgba255(dpg.get_value("edit_color"))
        name = dpg.get_value("edit_name").strip() or None
        # resolve the id at the moment of the edit; the body may be gone
        with self.sim.lock:
            idx = self.sim.index_of(selected_id)
            if idx is None:
                self._set_error("No body selected to edit.")
                return
            try:
                self.sim.edit_body(idx, mass=mass_si, position=pos, velocity=vel,
                                   color=color, name=name)
            except (ValueError, IndexError) as e:
                self._set_error(str(e))
                return
        self._refresh_body_list()
        self._set_status("Applied edits to selected body.")

    def _delete_selected(self):
        name = delete_selected(self.ui_state, self.sim)
        self._refresh_body_list()
        if name is None:
            self._set_error("No body selected.")
        else:
            self._set_status(f"Deleted '{name}'.")

    def _toggle_play(self):
        paused = self.sim.toggle_pause()
        self._set_status(f"Simulation {'Paused' if paused else 'Playing'}.")

    def _step_once(self):
        self.sim.step_once()
        self._set_status("Stepped once.")

    def _reverse(self):
        backward = self.sim.reverse()
        self._set_status(f"Time runs {'backward' if backward else 'forward'}.")

    def _set_time_step(self):
        dt = try_float(dpg.get_value("dt_input"))
        if dt is None:
            self._set_error("Invalid time step.")
            return
        try:
            stored = self.sim.set_time_step(dt)
        except ValueError as e:
            self._set_error(str(e))
            return
        self._after_dt_change(stored)

    def _after_dt_change(self, stored: float):
        # Reflect the clamped value back into the field
        self._dt_field.mark(stored)
        dpg.set_value("dt_input", f"{stored:.6g}")
        self._set_status(f"Time step set to {stored:.6g} s.")

    def load_preset(self, name: str):
        preset = PRESETS.get(name)
        if preset is None:
            self._set_error(f"Unknown preset '{name}'.")
            return
        self.sim.replace_bodies(preset.build())
        stored = self.sim.set_time_step(preset.time_step)
        with self.ui_state.lock:
            self.ui_state.selected_id = None
            self.ui_state.pending_click = None
        logger.info("loaded preset %s", name)
        self.renderer.fit_camera()
        self._refresh_body_list()
        self._after_dt_change(stored)
        self._set_status(f"Loaded preset: {name}")

    def _sync_ui_with_sim(self):
        """
        Periodic UI update: status bar, time step field, body list, selection and a pending
        add-mode click from the viewport.
        """
        with self.ui_state.lock:
            mode = self.ui_state.mode
            pending = self.ui_state.pending_click
            selected_id = self.ui_state.selected_id
            # a body removed elsewhere invalidates the selection
            if selected_id is not None and self.sim.index_of(selected_id) is None:
                self.ui_state.selected_id = selected_id = None

        dpg.set_value("status_bar", status_text(self.sim, mode, self.renderer.camera_scale()))
        dpg.set_value("energy_text", f"Total energy: {self.sim.total_energy():.4e} J")
        dpg.set_value("mode_radio", mode)

        # keyboard dt changes happen on the viewport thread
        dt = self.sim.time_step
        if self._dt_field.needs_update(dt):
            dpg.set_value("dt_input", f"{dt:.6g}")

        if pending is not None:
            dpg.set_value("add_pos_x", f"{pending[0]:.6e}")
            dpg.set_value("add_pos_y", f"{pending[1]:.6e}")
            dpg.set_value("add_vel_x", "0.0")
            dpg.set_value("add_vel_y", "0.0")
            dpg.set_value("add_mass", f"{DEFAULT_BODY_MASS:.4e}")
            dpg.set_value("add_mass_unit", "kg")
            with self.ui_state.lock:
                if self.ui_state.pending_click == pending:
                    self.ui_state.pending_click = None
            self._set_status(f"Placing body at ({pending[0]:.3e}, {pending[1]:.3e}) m. Press Add Body.")

        with self.sim.lock:
            ids = [b.body_id for b in self.sim.bodies]
        if ids != self._list_ids:
            self._refresh_body_list()

        # Only repopulate edit fields when selection changes to avoid clobbering user edits
        if selected_id != self._last_edit_selected_id:
            self._populate_edit_fields_from_selected()
            self._last_edit_selected_id = selected_id
            self._refresh_body_list()

        if not self.renderer.is_alive():
            dpg.stop_dearpygui()
            return
        self._schedule_sync()

# ============================================================
# Application Entry
# ============================================================

def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    sim = Simulation()
    ui_state = UiState()

    renderer = PygameRenderer(sim, ui_state)
    renderer.start()

    ui = UI(sim, renderer, ui_state)

    # Space toggles play/pause in the controls window too
    with dpg.handler_registry():
        def key_press(sender, app_data):
            if app_data == dpg.mvKey_Spacebar:
                ui._toggle_play()
        dpg.add_key_press_handler(callback=key_press)

    try:
        dpg.start_dearpygui()
    finally:
        renderer.running = False
        renderer.join(timeout=2.0)
        dpg.destroy_context()

if __name__ == "__main__":
    main()
