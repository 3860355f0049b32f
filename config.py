# Roomba Pro Simulation - Configuration
# All tunable parameters in one place

# =============================================================================
# WORLD (plane coordinates, metres)
# =============================================================================
FLOOR_LEFT = -3.5
FLOOR_RIGHT = 3.5
FLOOR_TOP = -2.5
FLOOR_BOTTOM = 2.5
OVERHANG_BUFFER = 0.2  # Robot may hang this far past the floor edge

# =============================================================================
# ROBOT
# =============================================================================
ROBOT_BASE_SPEED = 2.0
ROBOT_SUCTION = 1
ROBOT_BIN_CAPACITY = 200.0
ROBOT_RADIUS = 0.15  # Drawing only

# =============================================================================
# BATTERY
# =============================================================================
BATTERY_ENERGY_MAX = 2500.0

# =============================================================================
# ECONOMY
# =============================================================================
MONEY_PER_PARTICLE_SPEED = 0.1   # money += n * speed * this
BIN_PER_PARTICLE = 0.15          # bin += n * this
ENERGY_PER_SPEED = 0.4           # energy -= speed * this + n * ENERGY_PER_PARTICLE
ENERGY_PER_PARTICLE = 1.0
COMPLETION_THRESHOLD = 0.995

# =============================================================================
# UPGRADES
# =============================================================================
UPGRADE_COSTS = {
    'capacity': [50, 75, 100, 150, 200],
    'suction': [60, 90, 120, 180, 240],
    'speed': [60, 90, 120, 180, 240],
    'battery': [80, 120, 160, 240, 320],
    'auto': [300],
}
CAPACITY_PER_LEVEL = 75.0
BATTERY_PER_LEVEL = 750.0
SPEED_PER_LEVEL = 0.5
SUCTION_BASE_RADIUS = 0.2
SUCTION_PER_LEVEL = 0.05

# =============================================================================
# DIRT
# =============================================================================
DIRT_COUNT = 2000
DIRT_INDEX_CELL = 0.25  # Spatial index bucket size

# =============================================================================
# MOVEMENT
# =============================================================================
ACCELERATION = 0.0008    # Velocity gained per ms toward the target
SPEED_SCALE = 0.01       # Converts robot speed rating to plane units per tick
FRICTION = 0.98          # Velocity kept per tick
ARRIVAL_RADIUS = 0.1
ORBIT_RADIUS = 0.3
ORBIT_RATE = 0.001       # Radians per ms of simulation time
ORBIT_GAIN = 0.002

# =============================================================================
# TARGETING
# =============================================================================
CLUSTER_CELL_SIZE = 0.5
CLEAN_ENOUGH_RADIUS = 0.4
CLEAN_ENOUGH_COUNT = 3
STILL_SPEED = 0.01
EDGE_MARGIN = 0.5
STILL_WINDOW_MS = 2000.0
EDGE_HUG_WINDOW_MS = 3000.0
NUDGE_DURATION_MS = 1000.0
NUDGE_LOCK_MS = 2000.0
NUDGE_SPREAD = 1.0       # Nudge point lands within +/- this of the centre
NUDGE_JITTER = 0.01      # Velocity kick on nudge, +/- this per axis
AI_LOCK_MS = 2500.0
AI_HOLD_MS = 5000.0
MANUAL_LOCK_MS = 900.0
DISTANCE_WEIGHT = 0.5
REVISIT_WEIGHT = 0.1

# =============================================================================
# CLOCK
# =============================================================================
MAX_TICK_MS = 100.0      # Larger deltas are treated as stalls
BACKGROUND_WAKE_MS = 200
BACKGROUND_STEPS = 5
BACKGROUND_STEP_MS = 16.0

# =============================================================================
# NOTICES / PERSISTENCE
# =============================================================================
NOTICE_DURATION_MS = 3000.0
SAVE_DIR = '.roomba_saves'
AUTOSAVE_INTERVAL_MS = 2000

# =============================================================================
# DISPLAY
# =============================================================================
SCREEN_WIDTH = 1200
SCREEN_HEIGHT = 800
FPS = 60
PIXELS_PER_METRE = 120
HUD_WIDTH = 300
DEBUG_FONT_SIZE = 18
HEATMAP_ALPHA = 140
NOTICES_SHOWN = 3

# =============================================================================
# COLORS
# =============================================================================
COLOR_BG = (15, 23, 42)
COLOR_FLOOR = (241, 245, 249)
COLOR_WALL = (148, 163, 184)
COLOR_FRAME = (59, 130, 246)
COLOR_DIRT = (139, 69, 19)
COLOR_ROBOT_BODY = (45, 55, 72)
COLOR_ROBOT_TOP = (26, 32, 44)
COLOR_TARGET = (239, 68, 68)
COLOR_HUD_BG = (30, 41, 59)
COLOR_TEXT = (226, 232, 240)
COLOR_NOTICE = (250, 204, 21)

# LED Colors by status
LED_OK = (16, 185, 129)
LED_EMPTY = (245, 158, 11)
LED_FULL = (239, 68, 68)
