"""
Weekly analytics over the most recent stored nights (at most 7).

  - Debt trend: mean and total sleep debt of the window
  - Social jetlag: mean wake time of the first 5 vs. the last 2 entries
    (positional split, needs exactly 7 entries)
  - Consistency: population std-dev of bedtime minute offsets,
    score = max(0, 100 - stdDev)
  - Violation frequency: counts per ViolationKind, most frequent first
  - Adjustments: fixed rule table over the aggregates above
"""

import statistics
from collections import Counter
from typing import Optional

from sleep_system.config import (
    WEEKLY_WINDOW_DAYS,
    WEEKDAY_COUNT,
    DEBT_RECOVERY_THRESHOLD_MIN,
    JETLAG_THRESHOLD_MIN,
    CAFFEINE_VIOLATION_THRESHOLD,
    SCREEN_VIOLATION_THRESHOLD,
    QUALITY_OVERRIDE_THRESHOLD,
)
from sleep_system.core.clock import average_time, circular_deviation, to_minutes
from sleep_system.core.rule_engine import ViolationKind

ADJUSTMENTS = {
    "debt": {
        "title": "Sleep Debt Recovery",
        "text": "Extend sleep window by 30-60 minutes for next 3 nights. Target bedtime 30min earlier.",
    },
    "jetlag": {
        "title": "Social Jetlag Correction",
        "text": "Weekend wake time must not exceed weekday average + 60 minutes. Set alarm.",
    },
    "caffeine": {
        "title": "Caffeine Cutoff Enforcement",
        "text": "No caffeine after 2:00 PM. Half-life model shows 100mg at 2PM = 25mg at 10PM.",
    },
    "screens": {
        "title": "Screen Curfew",
        "text": (
            "Implement 2-hour screen cutoff. Use amber glasses if unavoidable. "
            "Blue light blocks melatonin."
        ),
    },
    "override": {
        "title": "System Override",
        "text": "Quality below threshold. Enforce all hard rules for 7 days. No exceptions.",
    },
}


def last_window(entries: list[dict], days: int = WEEKLY_WINDOW_DAYS) -> list[dict]:
    """The most recent `days` entries, date ascending."""
    return sorted(entries, key=lambda e: e["date"])[-days:]


# ── Aggregates ───────────────────────────────────────────────────────

def calculate_social_jetlag(window: list[dict]) -> int:
    """
    Minutes between the average weekday and weekend wake time.
    Weekdays are the first 5 entries of a full 7-entry window, weekends the
    last 2, regardless of the calendar. Shorter windows return 0.
    """
    if len(window) != WEEKLY_WINDOW_DAYS:
        return 0

    weekdays = window[:WEEKDAY_COUNT]
    weekends = window[WEEKDAY_COUNT:]
    avg_weekday_wake = average_time([e["waketime"] for e in weekdays])
    avg_weekend_wake = average_time([e["waketime"] for e in weekends])
    return circular_deviation(avg_weekday_wake, avg_weekend_wake)


def jetlag_label(minutes: int) -> str:
    if minutes > 90:
        return "High misalignment"
    if minutes > 30:
        return "Moderate"
    return "Good alignment"


def bedtime_consistency(window: list[dict]) -> dict:
    """Spread of bedtimes; linear minute offsets, so 23:50 and 00:10 are far apart."""
    if not window:
        return {"stdDev": 0.0, "score": 100.0, "label": consistency_label(0.0)}

    std_dev = statistics.pstdev([to_minutes(e["bedtime"]) for e in window])
    return {
        "stdDev": round(std_dev, 1),
        "score": round(max(0.0, 100 - std_dev), 1),
        "label": consistency_label(std_dev),
    }


def consistency_label(std_dev: float) -> str:
    if std_dev < 30:
        return "Very consistent"
    if std_dev < 60:
        return "Moderate"
    return "Inconsistent"


def quality_label(avg_quality: float) -> str:
    if avg_quality >= 80:
        return "Excellent"
    if avg_quality >= 60:
        return "Good"
    if avg_quality >= 40:
        return "Fair"
    return "Poor"


def violation_frequency(window: list[dict]) -> list[dict]:
    """
    Count violations per kind, most frequent first (ties keep first-seen order).
    Messages that match no known kind are grouped by their text before the
    first colon.
    """
    counts = Counter()
    for entry in window:
        for message in entry.get("violations", []):
            kind = ViolationKind.classify(message)
            if kind is not None:
                key, label = kind.key, kind.label
            else:
                key, label = None, message.split(":")[0]
            counts[(key, label)] += 1

    return [
        {"kind": key, "label": label, "count": count}
        for (key, label), count in counts.most_common()
    ]


def recommend_adjustments(
    total_debt: int,
    jetlag: int,
    frequency: list[dict],
    avg_quality: float,
) -> list[dict]:
    """Evaluate the adjustment table in fixed order; several may fire."""
    kind_counts = {item["kind"]: item["count"] for item in frequency if item["kind"]}
    adjustments = []

    if total_debt > DEBT_RECOVERY_THRESHOLD_MIN:
        adjustments.append(dict(ADJUSTMENTS["debt"]))
    if jetlag > JETLAG_THRESHOLD_MIN:
        adjustments.append(dict(ADJUSTMENTS["jetlag"]))
    if kind_counts.get(ViolationKind.CAFFEINE.key, 0) >= CAFFEINE_VIOLATION_THRESHOLD:
        adjustments.append(dict(ADJUSTMENTS["caffeine"]))
    if kind_counts.get(ViolationKind.LATE_SCREEN.key, 0) >= SCREEN_VIOLATION_THRESHOLD:
        adjustments.append(dict(ADJUSTMENTS["screens"]))
    if avg_quality < QUALITY_OVERRIDE_THRESHOLD:
        adjustments.append(dict(ADJUSTMENTS["override"]))

    return adjustments


# ── Report ───────────────────────────────────────────────────────────

def weekly_report(entries: list[dict]) -> Optional[dict]:
    """
    Full weekly analytics over the last 7 entries of `entries`.
    Returns None when there is nothing stored yet.
    """
    window = last_window(entries)
    if not window:
        return None

    total_debt = sum(e["sleepDebt"] for e in window)
    avg_debt = total_debt / len(window)
    avg_quality = sum(e["qualityScore"] for e in window) / len(window)
    jetlag = calculate_social_jetlag(window)
    frequency = violation_frequency(window)

    return {
        "period": {
            "start": window[0]["date"],
            "end": window[-1]["date"],
            "days": len(window),
        },
        "debtTrend": {
            "average": round(avg_debt, 1),
            "total": total_debt,
            "state": "Accumulating deficit" if total_debt > 0 else "Well rested",
        },
        "socialJetlag": {
            "minutes": jetlag,
            "label": jetlag_label(jetlag),
        },
        "averageQuality": {
            "value": round(avg_quality, 1),
            "label": quality_label(avg_quality),
        },
        "consistency": bedtime_consistency(window),
        "violationFrequency": frequency,
        "adjustments": recommend_adjustments(total_debt, jetlag, frequency, avg_quality),
    }
