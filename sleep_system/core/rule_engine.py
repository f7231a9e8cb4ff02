"""
Rule engine: hard sleep-hygiene rules, checked independently per night.

Every violation message is rendered from a ViolationKind template. Weekly
analytics groups by kind, so stored messages are mapped back to their kind
with ViolationKind.classify instead of splitting on the first colon.

Rules (fixed evaluation order, any number may fire):
  1. Sleep duration below 7h (critical)
  2. More than 50mg caffeine left at bedtime
  3. More than 2 units of alcohol
  4. High-intensity exercise within 3h of bedtime (per session)
  5. Screen use ending within 1h of bedtime (per session)
  6. Bedtime more than 120 min off the circadian target

Medium-intensity exercise and moderate screen content cost score points
(see sleep_engine) but never raise a violation.
"""

import re
from enum import Enum
from typing import Optional

from sleep_system.config import (
    MIN_SLEEP_MIN,
    CAFFEINE_LIMIT_MG,
    ALCOHOL_LIMIT_UNITS,
    BEDTIME_DEVIATION_LIMIT_MIN,
)
from sleep_system.core.clock import (
    format_duration,
    format_number,
    format_tenths,
    forward_span,
    hours_before,
    round_half_up,
)
from sleep_system.core.sleep_engine import caffeine_penalty, circadian_alignment


class ViolationKind(Enum):
    """Kind key, grouping label and message template of each rule."""

    SHORT_SLEEP = (
        "short_sleep",
        "CRITICAL",
        "CRITICAL: Sleep duration {duration} is below minimum 7h",
    )
    CAFFEINE = (
        "caffeine",
        "Caffeine remaining at bedtime",
        "Caffeine remaining at bedtime: {mg}mg (limit: 50mg)",
    )
    ALCOHOL = (
        "alcohol",
        "Alcohol consumption",
        "Alcohol consumption: {units} units (limit: 2 units)",
    )
    LATE_EXERCISE = (
        "late_exercise",
        "High intensity exercise within 3h of bedtime",
        "High intensity exercise within 3h of bedtime ({hours}h before)",
    )
    LATE_SCREEN = (
        "late_screen",
        "Screen time within 1h of bedtime",
        "Screen time within 1h of bedtime ({minutes}min before)",
    )
    BEDTIME_DRIFT = (
        "bedtime_drift",
        "Bedtime far from optimal",
        "Bedtime {deviation}min from optimal (limit: 120min)",
    )

    def __init__(self, key: str, label: str, template: str):
        self.key = key
        self.label = label
        self.template = template
        pattern = re.sub(r"\\\{\w+\\\}", ".+?", re.escape(template))
        self.pattern = re.compile(f"^{pattern}$")

    def format(self, **fields) -> str:
        return self.template.format(**fields)

    @classmethod
    def classify(cls, message: str) -> Optional["ViolationKind"]:
        """Map a rendered message back to its kind (None for foreign text)."""
        for kind in cls:
            if kind.pattern.match(message):
                return kind
        return None


def evaluate_rules(entry: dict) -> list[str]:
    """
    Run every rule against a normalized entry with sleepDuration set.
    Returns the violation messages in rule order.
    """
    violations = []
    bedtime = entry["bedtime"]

    # 1. Duration
    if entry["sleepDuration"] < MIN_SLEEP_MIN:
        violations.append(ViolationKind.SHORT_SLEEP.format(
            duration=format_duration(entry["sleepDuration"]),
        ))

    # 2. Caffeine cutoff
    caffeine = caffeine_penalty(entry["caffeine"], bedtime)
    if caffeine["remaining"] > CAFFEINE_LIMIT_MG:
        violations.append(ViolationKind.CAFFEINE.format(
            mg=round_half_up(caffeine["remaining"]),
        ))

    # 3. Alcohol
    total_units = sum(a["units"] for a in entry["alcohol"])
    if total_units > ALCOHOL_LIMIT_UNITS:
        violations.append(ViolationKind.ALCOHOL.format(units=format_number(total_units)))

    # 4. Exercise timing
    for session in entry["exercise"]:
        h = hours_before(session["time"], bedtime)
        if session["intensity"] == "high" and h < 3:
            violations.append(ViolationKind.LATE_EXERCISE.format(
                hours=format_tenths(h),
            ))

    # 5. Screen cutoff
    for screen in entry["screens"]:
        minutes = forward_span(screen["endTime"], bedtime)
        if minutes < 60:
            violations.append(ViolationKind.LATE_SCREEN.format(minutes=minutes))

    # 6. Circadian alignment
    circadian = circadian_alignment(bedtime, entry["waketime"])
    if circadian["bedDeviation"] > BEDTIME_DEVIATION_LIMIT_MIN:
        violations.append(ViolationKind.BEDTIME_DRIFT.format(
            deviation=circadian["bedDeviation"],
        ))

    return violations
