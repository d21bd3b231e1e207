#!/usr/bin/env python3
"""
Shared constants for the gravity sandbox (SI units unless stated otherwise).

Clamp bounds live here so the simulation and camera agree on them; both classes
accept overrides in their constructors.
"""

# Physical constants
G = 6.674e-11  # m^3 kg^-1 s^-2
SOLAR_MASS = 1.989e30  # kg
EARTH_MASS = 5.97e24  # kg
AU = 1.5e11  # m, rounded

# Default mass placed by a single click in add mode
DEFAULT_BODY_MASS = SOLAR_MASS

# Time step (seconds of simulation time per step)
DEFAULT_TIME_STEP = 8192.0
MIN_TIME_STEP = 1.0
MAX_TIME_STEP = 1e10

# Camera scale (world meters per pixel); larger is further zoomed out
DEFAULT_SCALE = 1e9
MIN_SCALE = 1.0
MAX_SCALE = 1e15
ZOOM_STEP = 2.0  # keyboard zoom factor
WHEEL_ZOOM_STEP = 1.1

# Rendering (viewport)
VIEW_WIDTH = 1000
VIEW_HEIGHT = 800
BODY_DRAW_RADIUS = 7  # pixels, every body is drawn the same size
PICK_RADIUS_PX = 12
BACKGROUND_COLOR = (0, 0, 0)
SELECTION_COLOR = (255, 255, 0)
HUD_COLOR = (200, 200, 200)
DEFAULT_BODY_COLOR = (1.0, 1.0, 1.0, 1.0)  # RGBA floats in [0, 1]

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000
