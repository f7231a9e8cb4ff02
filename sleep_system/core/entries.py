"""
Entry derivation: turns a raw draft into the fully derived SleepEntry.

Derived fields are never trusted from the caller; they are recomputed from
the raw fields on every call, so re-deriving a stored entry is a no-op.
"""

from sleep_system.config import DEFAULT_ENVIRONMENT
from sleep_system.core.rule_engine import evaluate_rules
from sleep_system.core.sleep_engine import (
    calculate_sleep_debt,
    calculate_sleep_duration,
    score_entry,
)

EVENT_LISTS = ("caffeine", "alcohol", "meals", "exercise", "screens")


def normalize_entry(draft: dict) -> dict:
    """
    Copy the raw fields of a draft, defaulting absent lists to [] and absent
    environment keys to DEFAULT_ENVIRONMENT. Derived fields are dropped.
    """
    entry = {
        "date": draft["date"],
        "bedtime": draft["bedtime"],
        "waketime": draft["waketime"],
    }
    for key in EVENT_LISTS:
        entry[key] = [dict(item) for item in (draft.get(key) or [])]
    entry["environment"] = {**DEFAULT_ENVIRONMENT, **(draft.get("environment") or {})}
    return entry


def derive_entry(draft: dict) -> dict:
    """Normalize a draft and attach duration, debt, violations, score and breakdown."""
    entry = normalize_entry(draft)
    entry["sleepDuration"] = calculate_sleep_duration(entry["bedtime"], entry["waketime"])
    entry["sleepDebt"] = calculate_sleep_debt(entry["sleepDuration"])
    entry["violations"] = evaluate_rules(entry)

    result = score_entry(entry)
    entry["qualityScore"] = result["score"]
    entry["breakdown"] = result["breakdown"]
    return entry
