"""
Streamlit Sleep-Dashboard.
Main page: nightly log form (sleep window, caffeine, alcohol, meals,
exercise, screens, bedroom environment) with score, violations and breakdown.
Sidebar: Weekly report, History, Data & Export.
Talks to the FastAPI backend only; no scoring happens here.
"""

import json
from datetime import datetime, time

import httpx
import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from sleep_system.config import API_KEY, API_URL, DEFAULT_ENVIRONMENT

HEADERS = {"x-api-key": API_KEY} if API_KEY else {}


def api_get(path: str, params: dict | None = None) -> dict | list:
    try:
        r = httpx.get(f"{API_URL}{path}", params=params, headers=HEADERS, timeout=10)
        r.raise_for_status()
        return r.json()
    except Exception as e:
        st.error(f"API Error: {e}")
        return {}


def api_get_text(path: str) -> str:
    try:
        r = httpx.get(f"{API_URL}{path}", headers=HEADERS, timeout=10)
        r.raise_for_status()
        return r.text
    except Exception as e:
        st.error(f"API Error: {e}")
        return ""


def api_post(path: str, data: dict | None = None, params: dict | None = None) -> dict:
    try:
        r = httpx.post(f"{API_URL}{path}", json=data, params=params, headers=HEADERS, timeout=10)
        r.raise_for_status()
        return r.json()
    except Exception as e:
        st.error(f"API Error: {e}")
        return {}


def fmt_minutes(minutes: float) -> str:
    minutes = int(minutes)
    return f"{minutes // 60}h {minutes % 60}m"


# --- Plotly mobile-friendly helper ---
PLOTLY_MOBILE_CONFIG = {
    "displayModeBar": False,
    "scrollZoom": False,
    "staticPlot": False,
    "responsive": True,
}

PLOTLY_MOBILE_LAYOUT = dict(
    dragmode=False,
    template="plotly_dark",
    margin=dict(l=40, r=20, t=40, b=35),
    legend=dict(orientation="h", yanchor="bottom", y=1.02),
    xaxis=dict(fixedrange=True),
    yaxis=dict(fixedrange=True),
)


def mobile_chart(fig, height=350, **kwargs):
    """Render a Plotly chart with mobile-friendly settings (no accidental zoom/pan)."""
    fig.update_layout(**PLOTLY_MOBILE_LAYOUT, height=height, **kwargs)
    st.plotly_chart(fig, use_container_width=True, config=PLOTLY_MOBILE_CONFIG)


# --- Event editors ---
# Column name -> column_config, per event list
EVENT_COLUMNS = {
    "caffeine": {
        "time": st.column_config.TextColumn("Time", validate=r"^\d{2}:\d{2}$", required=True),
        "mg": st.column_config.NumberColumn("Amount (mg)", min_value=0, max_value=500, default=100),
    },
    "alcohol": {
        "time": st.column_config.TextColumn("Time", validate=r"^\d{2}:\d{2}$", required=True),
        "units": st.column_config.NumberColumn("Units", min_value=0.0, max_value=20.0, step=0.5, default=1.0),
    },
    "meals": {
        "time": st.column_config.TextColumn("Time", validate=r"^\d{2}:\d{2}$", required=True),
        "size": st.column_config.SelectboxColumn("Size", options=["small", "medium", "large"], default="medium"),
        "macroProfile": st.column_config.SelectboxColumn(
            "Macros", options=["balanced", "high-carb", "high-protein", "high-fat"], default="balanced",
        ),
    },
    "exercise": {
        "time": st.column_config.TextColumn("Time", validate=r"^\d{2}:\d{2}$", required=True),
        "type": st.column_config.SelectboxColumn("Type", options=["strength", "cardio", "flexibility"], default="cardio"),
        "intensity": st.column_config.SelectboxColumn("Intensity", options=["low", "medium", "high"], default="medium"),
        "durationMin": st.column_config.NumberColumn("Duration (min)", min_value=5, max_value=300, default=30),
    },
    "screens": {
        "startTime": st.column_config.TextColumn("Start", validate=r"^\d{2}:\d{2}$", required=True),
        "endTime": st.column_config.TextColumn("End", validate=r"^\d{2}:\d{2}$", required=True),
        "contentType": st.column_config.SelectboxColumn(
            "Content", options=["passive", "moderate", "active"], default="passive",
        ),
    },
}

EVENT_TITLES = {
    "caffeine": "Caffeine",
    "alcohol": "Alcohol",
    "meals": "Meals",
    "exercise": "Exercise",
    "screens": "Screens",
}


def event_editor(kind: str, rows: list[dict]) -> list[dict]:
    """Editable table for one event list; returns plain JSON records."""
    columns = EVENT_COLUMNS[kind]
    df = pd.DataFrame(rows, columns=list(columns))
    edited = st.data_editor(
        df,
        column_config=columns,
        num_rows="dynamic",
        use_container_width=True,
        hide_index=True,
        key=f"editor_{kind}_{st.session_state.get('loaded_date', '')}",
    )
    edited = edited.dropna(how="any")
    return json.loads(edited.to_json(orient="records"))


def render_result(entry: dict):
    """Score, violations and per-factor breakdown of a derived entry."""
    m1, m2, m3 = st.columns(3)
    m1.metric("Quality Score", f"{entry['qualityScore']}/100")
    m2.metric("Sleep", fmt_minutes(entry["sleepDuration"]))
    m3.metric("Sleep Debt", fmt_minutes(entry["sleepDebt"]))

    if entry["violations"]:
        st.subheader("Rule Violations")
        for v in entry["violations"]:
            st.error(v)
    else:
        st.success("No Violations")

    breakdown = entry["breakdown"]
    names = list(breakdown)
    values = [breakdown[n]["penalty"] for n in names]
    fig = go.Figure(go.Bar(
        x=values,
        y=names,
        orientation="h",
        marker_color=["#2ecc71" if v >= 0 else "#e74c3c" for v in values],
        text=[breakdown[n]["displayValue"] for n in names],
        textposition="auto",
    ))
    mobile_chart(fig, height=380, title="Breakdown")


# --- Page Config ---
st.set_page_config(
    page_title="Sleep-System",
    page_icon=None,
    layout="wide",
    initial_sidebar_state="collapsed",
)

# Mobile-first CSS
st.markdown("""
<style>
    .block-container {
        padding-top: 0.3rem;
        padding-left: 0.5rem;
        padding-right: 0.5rem;
        max-width: 100%;
    }
    div[data-testid="stMetric"] {
        background-color: #1e1e2e;
        border: 1px solid #333;
        border-radius: 10px;
        padding: 8px 10px;
    }
    .stButton > button {
        min-height: 52px;
        font-size: 1rem;
        border-radius: 10px;
    }
</style>
""", unsafe_allow_html=True)

# =========================================================
# SIDEBAR: Navigation + Header stats
# =========================================================
PAGES = ["Log Night", "Weekly Report", "History", "Data & Export"]

with st.sidebar:
    st.header("Sleep-System")
    current_page = st.radio("Navigation", PAGES, index=0, label_visibility="collapsed")
    st.divider()
    stats = api_get("/api/summary")
    if isinstance(stats, dict) and "totalEntries" in stats:
        st.metric("Total Sleep Debt", stats.get("totalSleepDebtDisplay", "0h 0m"))
        st.metric("Avg Quality", f"{stats.get('avgQualityScore', 0)}")
        st.metric("Social Jetlag", f"{stats.get('socialJetlag', 0)}m")


# =========================================================
# PAGE: Log Night (default)
# =========================================================
if current_page == "Log Night":
    st.subheader("1 — Sleep Window")
    entry_date = st.date_input("Date", value=datetime.now().date())
    date_str = entry_date.isoformat()

    if st.button("Load existing entry", use_container_width=True):
        existing = api_get(f"/api/entry/{date_str}")
        if isinstance(existing, dict) and existing.get("date"):
            st.session_state["draft"] = existing
            st.session_state["loaded_date"] = date_str
            st.rerun()
        else:
            st.info(f"No entry for {date_str}")

    draft = st.session_state.get("draft", {})
    if draft.get("date") != date_str:
        draft = {}

    def _time_value(key: str, fallback: time) -> time:
        raw = draft.get(key)
        return datetime.strptime(raw, "%H:%M").time() if raw else fallback

    tc1, tc2 = st.columns(2)
    with tc1:
        bedtime = st.time_input("Bedtime", value=_time_value("bedtime", time(22, 30)))
    with tc2:
        waketime = st.time_input("Wake time", value=_time_value("waketime", time(6, 30)))

    st.divider()
    st.subheader("2 — Day Log")
    events = {}
    for kind, title in EVENT_TITLES.items():
        with st.expander(title, expanded=bool(draft.get(kind))):
            events[kind] = event_editor(kind, draft.get(kind, []))

    st.divider()
    st.subheader("3 — Bedroom Environment")
    env = {**DEFAULT_ENVIRONMENT, **draft.get("environment", {})}
    ec1, ec2 = st.columns(2)
    with ec1:
        temp = st.number_input("Temperature (°F)", 40.0, 100.0, float(env["temperatureF"]), 1.0)
        light = st.number_input("Light (lux)", 0.0, 1000.0, float(env["lightLux"]), 5.0)
    with ec2:
        noise = st.number_input("Noise (dB)", 0.0, 120.0, float(env["noiseDB"]), 1.0)
        bedroom_only = st.checkbox("Bedroom used only for sleep", value=bool(env["bedroomOnly"]))

    if st.button("Calculate & Save", type="primary", use_container_width=True):
        payload = {
            "date": date_str,
            "bedtime": bedtime.strftime("%H:%M"),
            "waketime": waketime.strftime("%H:%M"),
            **events,
            "environment": {
                "temperatureF": temp,
                "lightLux": light,
                "noiseDB": noise,
                "bedroomOnly": bedroom_only,
            },
        }
        r = api_post("/api/entry", payload)
        if r.get("status") == "ok":
            st.session_state["draft"] = r["entry"]
            st.success("Entry replaced" if r.get("replaced") else "Entry saved")
            render_result(r["entry"])
    elif draft.get("qualityScore") is not None:
        st.divider()
        st.subheader("Stored Result")
        render_result(draft)


# =========================================================
# PAGE: Weekly Report
# =========================================================
elif current_page == "Weekly Report":
    st.header("Weekly Report")
    weekly = api_get("/api/weekly")

    if not (isinstance(weekly, dict) and weekly.get("found")):
        st.info("No data")
    else:
        period = weekly["period"]
        st.caption(f"{period['start']} to {period['end']} ({period['days']} nights)")

        debt = weekly["debtTrend"]
        jetlag = weekly["socialJetlag"]
        quality = weekly["averageQuality"]
        consistency = weekly["consistency"]

        w1, w2, w3, w4 = st.columns(4)
        w1.metric("Avg Debt", f"{round(debt['average'])}m")
        w1.caption(debt["state"])
        w2.metric("Social Jetlag", f"{jetlag['minutes']}m")
        w2.caption(jetlag["label"])
        w3.metric("Avg Quality", f"{round(quality['value'])}")
        w3.caption(quality["label"])
        w4.metric("Consistency", f"{round(consistency['score'])}")
        w4.caption(f"{consistency['label']} (σ {consistency['stdDev']} min)")

        st.divider()
        st.subheader("Violation Frequency")
        frequency = weekly["violationFrequency"]
        if frequency:
            df_freq = pd.DataFrame(frequency)
            fig = go.Figure(go.Bar(
                x=df_freq["count"], y=df_freq["label"], orientation="h", marker_color="#e67e22",
            ))
            mobile_chart(fig, height=300, yaxis=dict(fixedrange=True, autorange="reversed"))
        else:
            st.success("No violations this week")

        st.subheader("Adjustments")
        if weekly["adjustments"]:
            for adj in weekly["adjustments"]:
                st.warning(f"**{adj['title']}**  \n{adj['text']}")
        else:
            st.success("System operating within parameters")

        entries = api_get("/api/entries", {"limit": 7})
        if isinstance(entries, list) and entries:
            df = pd.DataFrame(entries)
            fig = go.Figure()
            fig.add_trace(go.Scatter(
                x=df["date"], y=df["qualityScore"], name="Quality", mode="lines+markers",
            ))
            fig.add_trace(go.Bar(
                x=df["date"], y=df["sleepDebt"], name="Debt (min)", yaxis="y2", opacity=0.5,
            ))
            mobile_chart(
                fig, height=320, title="Last 7 nights",
                yaxis=dict(fixedrange=True, range=[0, 100], title="Score"),
                yaxis2=dict(fixedrange=True, overlaying="y", side="right", title="Debt"),
            )


# =========================================================
# PAGE: History
# =========================================================
elif current_page == "History":
    st.header("History")
    entries = api_get("/api/entries")
    if isinstance(entries, list) and entries:
        df = pd.DataFrame(entries)
        df["sleep"] = df["sleepDuration"].apply(fmt_minutes)
        df["violations"] = df["violations"].apply(len)

        fig = go.Figure(go.Scatter(x=df["date"], y=df["qualityScore"], mode="lines+markers"))
        mobile_chart(fig, height=300, title="Quality Score", yaxis=dict(fixedrange=True, range=[0, 100]))

        st.dataframe(
            df[["date", "bedtime", "waketime", "sleep", "sleepDebt", "qualityScore", "violations"]]
            .sort_values("date", ascending=False),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("No entries yet")


# =========================================================
# PAGE: Data & Export
# =========================================================
elif current_page == "Data & Export":
    st.header("Data & Export")
    summary = api_get("/api/summary")
    if isinstance(summary, dict) and summary:
        st.json({k: summary[k] for k in ("totalEntries", "dateRange", "avgQualityScore", "totalSleepDebt")})

    today = datetime.now().strftime("%Y-%m-%d")
    dc1, dc2 = st.columns(2)
    with dc1:
        st.download_button(
            "Export JSON",
            data=api_get_text("/api/export/json"),
            file_name=f"sleep-system-data-{today}.json",
            mime="application/json",
            use_container_width=True,
        )
    with dc2:
        if summary.get("totalEntries"):
            st.download_button(
                "Export Weekly Report",
                data=api_get_text("/api/export/weekly-report"),
                file_name=f"sleep-system-weekly-report-{today}.txt",
                mime="text/plain",
                use_container_width=True,
            )
        else:
            st.caption("No data to export")

    st.divider()
    with st.expander("Reset System"):
        st.warning("This will delete ALL sleep data. This cannot be undone.")
        sure = st.checkbox("I am sure")
        final = st.checkbox("FINAL WARNING: All data will be permanently deleted.", disabled=not sure)
        if st.button("Reset", type="primary", disabled=not (sure and final)):
            r = api_post("/api/reset", params={"confirm": "true"})
            if r.get("status") == "ok":
                st.session_state.pop("draft", None)
                st.success(f"{r.get('deleted', 0)} entries deleted")
                st.rerun()
