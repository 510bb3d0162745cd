from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from models.errors import NotFound
from models.records import Metric
from services.monitor import MonitorService, build_default_monitor


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_monitor() -> MonitorService:
    return build_default_monitor()


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
def ui_index(
    request: Request,
    hours: Optional[int] = Query(None),
    monitor: MonitorService = Depends(get_monitor),
) -> HTMLResponse:
    try:
        current = monitor.current_status()
    except NotFound:
        current = None

    report = monitor.stats(hours)
    try:
        analysis = monitor.analysis(report.hours)
    except NotFound:
        analysis = None

    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "current": current,
            "report": report,
            "analysis": analysis,
            "metrics": [metric.value for metric in Metric],
            "recent": monitor.history(limit=20),
        },
    )
