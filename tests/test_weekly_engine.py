from sleep_system.core.entries import derive_entry
from sleep_system.core.rule_engine import ViolationKind
from sleep_system.core.weekly_engine import (
    bedtime_consistency,
    calculate_social_jetlag,
    jetlag_label,
    last_window,
    recommend_adjustments,
    violation_frequency,
    weekly_report,
)


def _week(wakes, bedtime="22:30", start_day=1):
    return [
        derive_entry({"date": f"2024-05-{start_day + i:02d}", "bedtime": bedtime, "waketime": wake})
        for i, wake in enumerate(wakes)
    ]


def test_last_window_sorts_and_truncates():
    entries = _week(["06:30"] * 9)
    shuffled = entries[::-1]
    window = last_window(shuffled)
    assert [e["date"] for e in window] == [f"2024-05-{d:02d}" for d in range(3, 10)]


def test_identical_bedtimes_are_very_consistent():
    result = bedtime_consistency(_week(["06:30"] * 7))
    assert result == {"stdDev": 0.0, "score": 100.0, "label": "Very consistent"}


def test_spread_bedtimes():
    window = [{"bedtime": "22:00"}, {"bedtime": "23:00"}]
    result = bedtime_consistency(window)
    assert result["stdDev"] == 30.0
    assert result["score"] == 70.0
    assert result["label"] == "Moderate"


def test_social_jetlag_needs_full_week():
    assert calculate_social_jetlag(_week(["06:30"] * 6)) == 0


def test_social_jetlag_weekday_vs_weekend():
    week = _week(["06:30"] * 5 + ["09:00", "09:00"])
    assert calculate_social_jetlag(week) == 150
    assert jetlag_label(150) == "High misalignment"
    assert jetlag_label(45) == "Moderate"
    assert jetlag_label(30) == "Good alignment"


def test_violation_frequency_groups_by_kind():
    caffeine = ViolationKind.CAFFEINE.format(mg=60)
    screen = ViolationKind.LATE_SCREEN.format(minutes=10)
    window = [
        {"violations": [screen, caffeine]},
        {"violations": [caffeine, ViolationKind.CAFFEINE.format(mg=90)]},
        {"violations": ["Legacy note: something"]},
    ]
    assert violation_frequency(window) == [
        {"kind": "caffeine", "label": "Caffeine remaining at bedtime", "count": 3},
        {"kind": "late_screen", "label": "Screen time within 1h of bedtime", "count": 1},
        {"kind": None, "label": "Legacy note", "count": 1},
    ]


def test_adjustments_fire_in_table_order():
    frequency = [
        {"kind": "late_screen", "label": "Screen time within 1h of bedtime", "count": 4},
        {"kind": "caffeine", "label": "Caffeine remaining at bedtime", "count": 3},
    ]
    titles = [a["title"] for a in recommend_adjustments(121, 91, frequency, 59.9)]
    assert titles == [
        "Sleep Debt Recovery",
        "Social Jetlag Correction",
        "Caffeine Cutoff Enforcement",
        "Screen Curfew",
        "System Override",
    ]


def test_adjustments_quiet_week():
    assert recommend_adjustments(120, 90, [], 60) == []


def test_weekly_report_empty():
    assert weekly_report([]) is None


def test_weekly_report_full_week():
    report = weekly_report(_week(["06:30"] * 5 + ["09:00", "09:00"]))
    assert report["period"] == {"start": "2024-05-01", "end": "2024-05-07", "days": 7}
    assert report["debtTrend"] == {"average": 0.0, "total": 0, "state": "Well rested"}
    assert report["socialJetlag"] == {"minutes": 150, "label": "High misalignment"}
    assert report["consistency"]["label"] == "Very consistent"
    assert report["violationFrequency"] == []
    assert [a["title"] for a in report["adjustments"]] == ["Social Jetlag Correction"]


def test_weekly_report_short_nights():
    report = weekly_report(_week(["05:00"] * 3, bedtime="00:00"))
    assert report["period"]["days"] == 3
    assert report["debtTrend"]["total"] == 3 * 180
    assert report["debtTrend"]["state"] == "Accumulating deficit"
    assert report["socialJetlag"]["minutes"] == 0
    assert report["violationFrequency"][0] == {
        "kind": "short_sleep", "label": "CRITICAL", "count": 3,
    }
    titles = [a["title"] for a in report["adjustments"]]
    assert titles[0] == "Sleep Debt Recovery"
