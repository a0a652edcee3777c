"""
Central constants for the aquarium engine.

Equipment lookup tables, water-quality thresholds, alert trigger levels and
action limits shared across modules. Tunable model parameters live in
config.py; these values describe hardware and fixed rules.
"""

# ============================================================================
# Time
# ============================================================================

HOURS_PER_DAY = 24  # One tick = one simulated hour


# ============================================================================
# Tank Geometry
# ============================================================================

# Glass walls + bottom of a cube-shaped tank, colonizable by bacteria
TANK_GLASS_FACES = 5
LITERS_TO_CM3 = 1000.0

# Plant slots: three plants per five US gallons of capacity
LITERS_PER_5_GALLONS = 18.927
PLANTS_PER_5_GALLONS = 3


# ============================================================================
# Filter
# ============================================================================

FILTER_TYPES = ('sponge', 'hob', 'canister', 'sump')

# Bacteria surface area provided by filter media (cm^2)
FILTER_SURFACE = {
    'sponge': 8000,
    'hob': 15000,
    'canister': 25000,
    'sump': 40000,
}

# Target turnovers per hour and hard flow cap (L/h) per filter type
FILTER_TARGET_TURNOVER = {
    'sponge': 4,
    'hob': 6,
    'canister': 8,
    'sump': 10,
}
FILTER_MAX_FLOW_LPH = {
    'sponge': 300,
    'hob': 1250,
    'canister': 4500,
    'sump': float('inf'),
}


# ============================================================================
# Powerhead
# ============================================================================

POWERHEAD_FLOW_LPH = {
    240: 908,
    400: 1514,
    600: 2271,
    850: 3218,
}


# ============================================================================
# Substrate and Hardscape
# ============================================================================

SUBSTRATE_TYPES = ('none', 'sand', 'gravel', 'aqua_soil')

# Substrate bacteria surface per liter of tank capacity (cm^2/L)
SUBSTRATE_SURFACE_PER_LITER = {
    'none': 0,
    'sand': 400,
    'gravel': 800,
    'aqua_soil': 1200,
}

# Which substrates each plant rooting requirement accepts
SUBSTRATE_COMPATIBILITY = {
    'none': ('none', 'sand', 'gravel', 'aqua_soil'),
    'sand': ('sand', 'aqua_soil'),
    'aqua_soil': ('aqua_soil',),
}

HARDSCAPE_TYPES = ('neutral_rock', 'calcite_rock', 'driftwood', 'plastic_decoration')

# Bacteria surface per hardscape item (cm^2)
HARDSCAPE_SURFACE = {
    'neutral_rock': 400,
    'calcite_rock': 400,
    'driftwood': 650,
    'plastic_decoration': 100,
}


# ============================================================================
# Lid, Air Pump, CO2 Generator
# ============================================================================

LID_TYPES = ('none', 'mesh', 'full', 'sealed')

AIR_PUMP_BASE_OUTPUT_LPH = 60.0
AIR_PUMP_MAX_CAPACITY_L = 400.0
AIR_PUMP_FLOW_PER_AIR_LPH = 0.1  # Bubble uplift as fraction of air output

CO2_DOSING_RATE = 1.5  # mg/L per hour per bubble/sec
BUBBLE_RATE_OPTIONS = (0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5, 4.0, 4.5, 5.0)


# ============================================================================
# Auto Top-Off, Auto Doser, Auto Feeder
# ============================================================================

ATO_WATER_LEVEL_THRESHOLD = 0.99  # Fraction of capacity that triggers refill

AUTO_DOSER_MIN_ML = 0.5
AUTO_DOSER_MAX_ML = 10.0

AUTO_FEEDER_MIN_GRAMS = 0.1
AUTO_FEEDER_MAX_GRAMS = 2.0


# ============================================================================
# Water Quality Thresholds (ppm)
# ============================================================================

AMMONIA_SAFE_THRESHOLD = 0.02
AMMONIA_WARNING_THRESHOLD = 0.05
AMMONIA_DANGER_THRESHOLD = 0.1

NITRITE_SAFE_THRESHOLD = 0.1
NITRITE_WARNING_THRESHOLD = 0.5
NITRITE_DANGER_THRESHOLD = 1.0

NITRATE_SAFE_THRESHOLD = 20
NITRATE_WARNING_THRESHOLD = 40
NITRATE_DANGER_THRESHOLD = 80


# ============================================================================
# Alert Thresholds
# ============================================================================

WATER_LEVEL_CRITICAL_THRESHOLD = 0.2  # Fraction of capacity
HIGH_ALGAE_THRESHOLD = 80.0
HIGH_AMMONIA_THRESHOLD = AMMONIA_DANGER_THRESHOLD
HIGH_NITRITE_THRESHOLD = NITRITE_DANGER_THRESHOLD
HIGH_NITRATE_THRESHOLD = NITRATE_DANGER_THRESHOLD
LOW_OXYGEN_THRESHOLD = 4.0  # mg/L
HIGH_CO2_THRESHOLD = 30.0  # mg/L


# ============================================================================
# Action Limits
# ============================================================================

MIN_DOSE_ML = 0.1
MAX_DOSE_ML = 50.0

MIN_SCRUB_ALGAE = 5.0
SCRUB_MIN_PERCENT = 0.1   # Scrub removes 10-30% of algae
SCRUB_PERCENT_RANGE = 0.2

WATER_CHANGE_FRACTIONS = (0.1, 0.25, 0.5, 0.9)
TRIM_TARGET_SIZES = (50, 85, 100)

DEFAULT_PLANT_SIZE = 50.0
INITIAL_FISH_HEALTH = 100.0
INITIAL_FISH_HUNGER = 30.0

MAX_PLANT_SIZE = 200.0  # Hard cap, % of mature size


# ============================================================================
# Runner
# ============================================================================

TICK_TIME_WINDOW = 100       # Ticks in rolling timing average
TICK_SUMMARY_INTERVAL = 24   # Print summary every simulated day
