"""
Sleep-Engine: deterministic penalty models and the nightly quality score.

Factors modeled (all relative to the logged bedtime):
  - Caffeine: exponential elimination, t1/2 = 5h
      remaining = SUM_i mg_i * 0.5^(h_i / 5)
      penalty   = remaining * 0.15
  - Alcohol: zero-order (linear) BAC clearance
      BAC_i     = max(0, units_i * 0.02 - 0.015 * h_i)
      penalty   = SUM BAC_i * 100 + SUM units_i * 8   (fragmentation)
  - Exercise, screens, meals: proximity thresholds to bedtime
  - Circadian: circular deviation from 22:30 / 06:30 beyond 90 min
  - Environment: temperature, light, noise, bedroom-only usage

Quality score:
  100 - (duration + debt + circadian + caffeine + alcohol
         + exercise + screens + meals + environment penalties)
      + environment bonus
  Clamped to [0, 100]

h_i is always hours_before(event_time, bedtime): the forward distance on
the 24h dial, so an event at 23:30 with bedtime 00:30 is 1h before.
"""

from sleep_system.config import (
    OPTIMAL_SLEEP_MIN,
    MIN_SLEEP_MIN,
    MAX_SLEEP_MIN,
    UNDERSLEEP_PENALTY_PER_H,
    OVERSLEEP_PENALTY_PER_H,
    DEBT_PENALTY_PER_H,
    TARGET_BEDTIME,
    TARGET_WAKETIME,
    CIRCADIAN_TOLERANCE_MIN,
    CIRCADIAN_BED_WEIGHT,
    CIRCADIAN_WAKE_WEIGHT,
    CAFFEINE_HALF_LIFE_H,
    CAFFEINE_PENALTY_PER_MG,
    ALCOHOL_BAC_PER_UNIT,
    ALCOHOL_CLEARANCE_PER_H,
    ALCOHOL_BAC_PENALTY_FACTOR,
    ALCOHOL_FRAGMENTATION_PER_UNIT,
    ENV_TEMP_RANGE_F,
    ENV_LIGHT_MAX_LUX,
    ENV_NOISE_MAX_DB,
    ENV_AXIS_BONUS,
)
from sleep_system.core.clock import (
    circular_deviation,
    format_duration,
    format_number,
    forward_span,
    hours_before,
    round_half_up,
)


# ── Sleep window ─────────────────────────────────────────────────────

def calculate_sleep_duration(bedtime: str, waketime: str) -> int:
    """Minutes asleep; a waketime earlier on the dial is the next morning."""
    return forward_span(bedtime, waketime)


def calculate_sleep_debt(duration_min: int) -> int:
    return max(0, OPTIMAL_SLEEP_MIN - duration_min)


# ── Decay models ─────────────────────────────────────────────────────

def caffeine_penalty(entries: list[dict], bedtime: str) -> dict:
    """
    Residual caffeine at bedtime via half-life decay, summed over intakes.
    Returns {penalty, remaining (mg)}.
    """
    if not entries:
        return {"penalty": 0.0, "remaining": 0.0}

    remaining = 0.0
    for entry in entries:
        h = hours_before(entry["time"], bedtime)
        remaining += entry["mg"] * 0.5 ** (h / CAFFEINE_HALF_LIFE_H)

    return {"penalty": remaining * CAFFEINE_PENALTY_PER_MG, "remaining": remaining}


def alcohol_penalty(entries: list[dict], bedtime: str) -> dict:
    """
    Remaining BAC at bedtime plus a fragmentation charge per unit.
    Fragmentation applies even when the BAC has fully cleared.
    """
    if not entries:
        return {"penalty": 0.0, "fragmentationPenalty": 0.0, "remainingBAC": 0.0}

    total_bac = 0.0
    total_units = 0.0
    for entry in entries:
        h = hours_before(entry["time"], bedtime)
        initial_bac = entry["units"] * ALCOHOL_BAC_PER_UNIT
        total_bac += max(0.0, initial_bac - ALCOHOL_CLEARANCE_PER_H * h)
        total_units += entry["units"]

    fragmentation = total_units * ALCOHOL_FRAGMENTATION_PER_UNIT
    bac_penalty = total_bac * ALCOHOL_BAC_PENALTY_FACTOR
    return {
        "penalty": bac_penalty + fragmentation,
        "fragmentationPenalty": fragmentation,
        "remainingBAC": total_bac,
    }


# ── Timing models ────────────────────────────────────────────────────

def exercise_penalty(entries: list[dict], bedtime: str) -> dict:
    total = 0.0
    for entry in entries:
        h = hours_before(entry["time"], bedtime)
        if entry["intensity"] == "high" and h < 3:
            total += (3 - h) * 10
        if entry["type"] == "cardio" and h < 2:
            total += 15
        if entry["intensity"] == "medium" and h < 2:
            total += (2 - h) * 5
    return {"penalty": total}


def screen_penalty(entries: list[dict], bedtime: str) -> dict:
    """Keyed on when the session ended. Passive content only pays the blue-light charge."""
    total = 0.0
    for entry in entries:
        h = hours_before(entry["endTime"], bedtime)
        if h < 2:
            total += 20
        if entry["contentType"] == "active" and h < 1:
            total += 30
        if entry["contentType"] == "moderate" and h < 1:
            total += 15
    return {"penalty": total}


def meal_penalty(entries: list[dict], bedtime: str) -> dict:
    total = 0.0
    for entry in entries:
        h = hours_before(entry["time"], bedtime)
        if entry["size"] == "large" and h < 3:
            total += (3 - h) * 8
        if entry["macroProfile"] == "high-fat" and h < 4:
            total += (4 - h) * 5
        if entry["macroProfile"] == "high-protein" and h < 2:
            total += 10
    return {"penalty": total}


# ── Circadian ────────────────────────────────────────────────────────

def circadian_alignment(bedtime: str, waketime: str) -> dict:
    """
    Deviation from the target sleep window. The first 90 min either way are free;
    beyond that bedtime drift costs 0.3/min and waketime drift 0.2/min.
    """
    bed_dev = circular_deviation(bedtime, TARGET_BEDTIME)
    wake_dev = circular_deviation(waketime, TARGET_WAKETIME)

    penalty = (
        max(0, bed_dev - CIRCADIAN_TOLERANCE_MIN) * CIRCADIAN_BED_WEIGHT
        + max(0, wake_dev - CIRCADIAN_TOLERANCE_MIN) * CIRCADIAN_WAKE_WEIGHT
    )
    return {"penalty": penalty, "bedDeviation": bed_dev, "wakeDeviation": wake_dev}


# ── Environment ──────────────────────────────────────────────────────

def environment_score(environment: dict) -> dict:
    """Each axis lands either in bonus or in penalties, never both."""
    bonus = 0.0
    penalties = 0.0

    temp = environment["temperatureF"]
    low, high = ENV_TEMP_RANGE_F
    if low <= temp <= high:
        bonus += ENV_AXIS_BONUS
    elif temp < low:
        penalties += (low - temp) * 2
    else:
        penalties += (temp - high) * 2

    light = environment["lightLux"]
    if light < ENV_LIGHT_MAX_LUX:
        bonus += ENV_AXIS_BONUS
    else:
        penalties += (light - ENV_LIGHT_MAX_LUX) * 0.1

    noise = environment["noiseDB"]
    if noise < ENV_NOISE_MAX_DB:
        bonus += ENV_AXIS_BONUS
    else:
        penalties += (noise - ENV_NOISE_MAX_DB) * 0.5

    if environment["bedroomOnly"]:
        bonus += ENV_AXIS_BONUS

    return {"bonus": bonus, "penalties": penalties}


# ── Quality score ────────────────────────────────────────────────────

def duration_penalty(duration_min: int) -> float:
    if duration_min < MIN_SLEEP_MIN:
        return (MIN_SLEEP_MIN - duration_min) / 60 * UNDERSLEEP_PENALTY_PER_H
    if duration_min > MAX_SLEEP_MIN:
        return (duration_min - MAX_SLEEP_MIN) / 60 * OVERSLEEP_PENALTY_PER_H
    return 0.0


def score_entry(entry: dict) -> dict:
    """
    Combine every factor into the 0-100 quality score.

    Expects a normalized entry (see entries.normalize_entry) with sleepDuration and
    sleepDebt already set. Returns {score, breakdown}; each breakdown item is
    {displayValue, penalty} where penalty is the signed, rounded contribution.
    The environment item carries bonus - penalties, so it can be positive.
    """
    bedtime = entry["bedtime"]
    duration = entry["sleepDuration"]
    debt = entry["sleepDebt"]
    env = entry["environment"]

    dur_pen = duration_penalty(duration)
    debt_pen = (debt / 60) * DEBT_PENALTY_PER_H
    circadian = circadian_alignment(bedtime, entry["waketime"])
    caffeine = caffeine_penalty(entry["caffeine"], bedtime)
    alcohol = alcohol_penalty(entry["alcohol"], bedtime)
    exercise = exercise_penalty(entry["exercise"], bedtime)
    screens = screen_penalty(entry["screens"], bedtime)
    meals = meal_penalty(entry["meals"], bedtime)
    environment = environment_score(env)

    total_units = sum(a["units"] for a in entry["alcohol"])

    breakdown = {
        "sleepDuration": {
            "displayValue": format_duration(duration),
            "penalty": -round_half_up(dur_pen),
        },
        "sleepDebt": {
            "displayValue": format_duration(debt),
            "penalty": -round_half_up(debt_pen),
        },
        "circadian": {
            "displayValue": (
                f"Bed: {circadian['bedDeviation']}m, Wake: {circadian['wakeDeviation']}m"
            ),
            "penalty": -round_half_up(circadian["penalty"]),
        },
        "caffeine": {
            "displayValue": f"{round_half_up(caffeine['remaining'])}mg remaining",
            "penalty": -round_half_up(caffeine["penalty"]),
        },
        "alcohol": {
            "displayValue": f"{format_number(total_units)} units",
            "penalty": -round_half_up(alcohol["penalty"]),
        },
        "exercise": {
            "displayValue": f"{len(entry['exercise'])} sessions",
            "penalty": -round_half_up(exercise["penalty"]),
        },
        "screens": {
            "displayValue": f"{len(entry['screens'])} sessions",
            "penalty": -round_half_up(screens["penalty"]),
        },
        "meals": {
            "displayValue": f"{len(entry['meals'])} meals",
            "penalty": -round_half_up(meals["penalty"]),
        },
        "environment": {
            "displayValue": (
                f"{format_number(env['temperatureF'])}°F, "
                f"{format_number(env['lightLux'])}lux, "
                f"{format_number(env['noiseDB'])}dB"
            ),
            "penalty": round_half_up(environment["bonus"] - environment["penalties"]),
        },
    }

    total_penalty = (
        dur_pen + debt_pen + circadian["penalty"]
        + caffeine["penalty"] + alcohol["penalty"]
        + exercise["penalty"] + screens["penalty"] + meals["penalty"]
        + environment["penalties"]
    )
    raw_score = round_half_up(100 - total_penalty + environment["bonus"])
    score = max(0, min(100, raw_score))

    return {"score": score, "breakdown": breakdown}

