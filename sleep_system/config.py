"""
Sleep-System Configuration.
All settings via environment variables with sensible defaults.
"""

import os
from pathlib import Path

# --- Paths ---
BASE_DIR = Path(os.getenv("SLEEP_DATA_DIR", "/data"))
DB_PATH = BASE_DIR / "sleep.db"

# --- Auth ---
API_KEY = os.getenv("SLEEP_API_KEY", "")

# --- Dashboard ---
API_URL = os.getenv("SLEEP_API_URL", "http://localhost:8000")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# --- Sleep duration ---
OPTIMAL_SLEEP_MIN = int(os.getenv("OPTIMAL_SLEEP_MIN", "480"))   # 8h, debt reference
MIN_SLEEP_MIN = 420     # below 7h: critical violation + undersleep penalty
MAX_SLEEP_MIN = 540     # above 9h: oversleep penalty
UNDERSLEEP_PENALTY_PER_H = 15.0
OVERSLEEP_PENALTY_PER_H = 10.0
DEBT_PENALTY_PER_H = 5.0

# --- Circadian targets ---
TARGET_BEDTIME = os.getenv("TARGET_BEDTIME", "22:30")
TARGET_WAKETIME = os.getenv("TARGET_WAKETIME", "06:30")
CIRCADIAN_TOLERANCE_MIN = 90
CIRCADIAN_BED_WEIGHT = 0.3
CIRCADIAN_WAKE_WEIGHT = 0.2
BEDTIME_DEVIATION_LIMIT_MIN = 120

# --- Caffeine ---
# Exponential elimination, t1/2 ~5h for an average adult
CAFFEINE_HALF_LIFE_H = 5.0
CAFFEINE_PENALTY_PER_MG = 0.15
CAFFEINE_LIMIT_MG = 50

# --- Alcohol ---
# Linear (zero-order) clearance, Widmark-style rough estimate
ALCOHOL_BAC_PER_UNIT = 0.02
ALCOHOL_CLEARANCE_PER_H = 0.015
ALCOHOL_BAC_PENALTY_FACTOR = 100.0
ALCOHOL_FRAGMENTATION_PER_UNIT = 8.0
ALCOHOL_LIMIT_UNITS = 2

# --- Environment defaults ---
DEFAULT_ENVIRONMENT = {
    "temperatureF": 68,
    "lightLux": 0,
    "noiseDB": 30,
    "bedroomOnly": True,
}
ENV_TEMP_RANGE_F = (60, 67)
ENV_LIGHT_MAX_LUX = 50
ENV_NOISE_MAX_DB = 30
ENV_AXIS_BONUS = 5

# --- Weekly analytics ---
WEEKLY_WINDOW_DAYS = 7
WEEKDAY_COUNT = 5
DEBT_RECOVERY_THRESHOLD_MIN = 120
JETLAG_THRESHOLD_MIN = 90
CAFFEINE_VIOLATION_THRESHOLD = 3
SCREEN_VIOLATION_THRESHOLD = 4
QUALITY_OVERRIDE_THRESHOLD = 60
