"""
FastAPI API routes for the Sleep-System.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from sleep_system import config
from sleep_system.core import database
from sleep_system.core.clock import format_duration
from sleep_system.core.entries import derive_entry
from sleep_system.core.export import (
    cumulative_sleep_debt,
    data_summary,
    export_filename,
    export_json,
    weekly_report_text,
)
from sleep_system.core.weekly_engine import calculate_social_jetlag, last_window, weekly_report

log = logging.getLogger("sleep.api")

router = APIRouter(prefix="/api")

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


# --- Auth ---

def verify_api_key(x_api_key: str = Header(default="")):
    if config.API_KEY and x_api_key != config.API_KEY:
        raise HTTPException(status_code=401, detail="Invalid API key")


# --- Models ---

class CaffeineIntake(BaseModel):
    time: str = Field(..., pattern=TIME_PATTERN)
    mg: float = Field(..., ge=0)


class AlcoholIntake(BaseModel):
    time: str = Field(..., pattern=TIME_PATTERN)
    units: float = Field(..., ge=0)


class Meal(BaseModel):
    time: str = Field(..., pattern=TIME_PATTERN)
    size: str = Field(..., pattern="^(small|medium|large)$")
    macroProfile: str = Field(..., pattern="^(balanced|high-carb|high-protein|high-fat)$")


class ExerciseSession(BaseModel):
    time: str = Field(..., pattern=TIME_PATTERN)
    type: str = Field(..., pattern="^(strength|cardio|flexibility)$")
    intensity: str = Field(..., pattern="^(low|medium|high)$")
    durationMin: int = Field(30, ge=0)


class ScreenSession(BaseModel):
    startTime: str = Field(..., pattern=TIME_PATTERN)
    endTime: str = Field(..., pattern=TIME_PATTERN)
    contentType: str = Field(..., pattern="^(passive|moderate|active)$")


class Environment(BaseModel):
    temperatureF: float = config.DEFAULT_ENVIRONMENT["temperatureF"]
    lightLux: float = Field(config.DEFAULT_ENVIRONMENT["lightLux"], ge=0)
    noiseDB: float = Field(config.DEFAULT_ENVIRONMENT["noiseDB"], ge=0)
    bedroomOnly: bool = config.DEFAULT_ENVIRONMENT["bedroomOnly"]


class SleepEntryRequest(BaseModel):
    date: str = Field(..., pattern=DATE_PATTERN)
    bedtime: str = Field(..., pattern=TIME_PATTERN)
    waketime: str = Field(..., pattern=TIME_PATTERN)
    caffeine: list[CaffeineIntake] = []
    alcohol: list[AlcoholIntake] = []
    meals: list[Meal] = []
    exercise: list[ExerciseSession] = []
    screens: list[ScreenSession] = []
    environment: Environment = Environment()


# --- Scoring & entries ---

@router.post("/score", dependencies=[Depends(verify_api_key)])
def score_draft(req: SleepEntryRequest):
    """Derive score, violations and breakdown for a draft without saving it."""
    return derive_entry(req.model_dump())


@router.post("/entry", dependencies=[Depends(verify_api_key)])
def save_entry(req: SleepEntryRequest):
    """Derive a draft and store it, replacing any entry for the same date."""
    replaced = database.find_by_date(req.date) is not None
    entry = derive_entry(req.model_dump())
    database.upsert_entry(entry)
    log.info(
        "Entry %s %s: score %d, %d violations",
        entry["date"], "replaced" if replaced else "created",
        entry["qualityScore"], len(entry["violations"]),
    )
    return {"status": "ok", "replaced": replaced, "entry": entry}


@router.get("/entry/{date}", dependencies=[Depends(verify_api_key)])
def get_entry(date: str):
    entry = database.find_by_date(date)
    if not entry:
        raise HTTPException(status_code=404, detail="Entry not found")
    return entry


@router.get("/entries", dependencies=[Depends(verify_api_key)])
def get_entries(limit: Optional[int] = Query(None, ge=1)):
    """All entries (date ascending), or only the most recent `limit`."""
    if limit is not None:
        return database.last_entries(limit)
    return database.list_entries()


# --- Analytics ---

@router.get("/weekly", dependencies=[Depends(verify_api_key)])
def get_weekly():
    """Weekly analytics over the last 7 stored nights."""
    report = weekly_report(database.last_entries(config.WEEKLY_WINDOW_DAYS))
    if report is None:
        return {"found": False}
    return {"found": True, **report}


@router.get("/summary", dependencies=[Depends(verify_api_key)])
def get_summary():
    """Store summary plus the header stats (cumulative debt, average quality, jetlag)."""
    entries = database.list_entries()
    summary = data_summary(entries)
    return {
        **summary,
        "totalSleepDebtDisplay": format_duration(cumulative_sleep_debt(entries)),
        "socialJetlag": calculate_social_jetlag(last_window(entries)),
    }


# --- Export ---

@router.get("/export/json", dependencies=[Depends(verify_api_key)])
def export_store_json():
    body = export_json(database.list_entries())
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_filename("json")}"'},
    )


@router.get("/export/weekly-report", dependencies=[Depends(verify_api_key)])
def export_weekly_report():
    report = weekly_report_text(database.last_entries(config.WEEKLY_WINDOW_DAYS))
    if report is None:
        raise HTTPException(status_code=404, detail="No data to export")
    return PlainTextResponse(
        report,
        headers={"Content-Disposition": f'attachment; filename="{export_filename("report")}"'},
    )


# --- Maintenance ---

@router.post("/reset", dependencies=[Depends(verify_api_key)])
def reset_store(confirm: bool = False):
    """Delete ALL sleep data. Requires ?confirm=true."""
    if not confirm:
        raise HTTPException(status_code=400, detail="Reset requires confirm=true")
    deleted = database.reset_entries()
    log.warning("Store reset: %d entries deleted", deleted)
    return {"deleted": deleted, "status": "ok"}


@router.get("/status")
def status():
    """Health check endpoint."""
    return {
        "service": "sleep-system",
        "status": "ok",
        "version": "1.0.0",
        "timestamp": datetime.now().isoformat(),
        "targets": {
            "bedtime": config.TARGET_BEDTIME,
            "waketime": config.TARGET_WAKETIME,
            "optimal_sleep_min": config.OPTIMAL_SLEEP_MIN,
        },
    }
