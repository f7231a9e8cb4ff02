"""
Export: store snapshot as JSON and the plain-text weekly report.
"""

import json
from datetime import datetime
from typing import Optional

from sleep_system.core.clock import format_duration, round_half_up
from sleep_system.core.weekly_engine import (
    calculate_social_jetlag,
    last_window,
    violation_frequency,
)

RULE_WIDTH = 50


def cumulative_sleep_debt(entries: list[dict]) -> int:
    """Total debt in minutes across every stored night."""
    return sum(e.get("sleepDebt", 0) for e in entries)


def data_summary(entries: list[dict]) -> dict:
    if not entries:
        return {
            "totalEntries": 0,
            "dateRange": "No data",
            "avgQualityScore": 0,
            "totalSleepDebt": 0,
        }
    ordered = sorted(entries, key=lambda e: e["date"])
    avg_quality = sum(e["qualityScore"] for e in ordered) / len(ordered)
    return {
        "totalEntries": len(ordered),
        "dateRange": f"{ordered[0]['date']} to {ordered[-1]['date']}",
        "avgQualityScore": round_half_up(avg_quality),
        "totalSleepDebt": cumulative_sleep_debt(ordered),
    }


def export_json(entries: list[dict]) -> str:
    return json.dumps(entries, indent=2, ensure_ascii=False)


def export_filename(kind: str, now: Optional[datetime] = None) -> str:
    """sleep-system-data-2024-05-01.json / sleep-system-weekly-report-2024-05-01.txt"""
    day = (now or datetime.now()).strftime("%Y-%m-%d")
    if kind == "json":
        return f"sleep-system-data-{day}.json"
    return f"sleep-system-weekly-report-{day}.txt"


def weekly_report_text(entries: list[dict], generated_at: Optional[datetime] = None) -> Optional[str]:
    """
    Formatted weekly report over the last 7 entries.
    Returns None when there is nothing to report.
    """
    window = last_window(entries)
    if not window:
        return None

    generated_at = generated_at or datetime.now()
    avg_quality = sum(e["qualityScore"] for e in window) / len(window)
    total_debt = sum(e["sleepDebt"] for e in window)
    jetlag = calculate_social_jetlag(window)

    lines = [
        "SLEEP SYSTEM - WEEKLY REPORT",
        "=" * RULE_WIDTH,
        "",
        f"Generated: {generated_at.isoformat()}",
        f"Period: {window[0]['date']} to {window[-1]['date']}",
        "",
        "SUMMARY",
        "-" * RULE_WIDTH,
        f"Average Quality Score: {round_half_up(avg_quality)}/100",
        f"Total Sleep Debt: {format_duration(total_debt)}",
        f"Social Jetlag: {jetlag} minutes",
        "",
        "DAILY ENTRIES",
        "-" * RULE_WIDTH,
    ]

    for entry in window:
        lines += [
            "",
            f"Date: {entry['date']}",
            f"  Sleep: {entry['bedtime']} - {entry['waketime']} "
            f"({format_duration(entry['sleepDuration'])})",
            f"  Quality Score: {entry['qualityScore']}/100",
            f"  Sleep Debt: {format_duration(entry['sleepDebt'])}",
        ]
        if entry.get("violations"):
            lines.append("  Violations:")
            lines += [f"    - {v}" for v in entry["violations"]]

    lines += ["", "", "VIOLATION FREQUENCY", "-" * RULE_WIDTH]
    frequency = violation_frequency(window)
    if frequency:
        lines += [f"{item['label']}: {item['count']}x" for item in frequency]
    else:
        lines.append("No violations")

    return "\n".join(lines) + "\n"
