"""Month history endpoints: calendar view and Excel export."""

import re
from datetime import datetime

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response

from api.dependencies import get_intratime_client, get_now, require_session, verify_api_key
from api.errors import api_error
from api.models.responses import ErrorCodes, MonthHistoryResponse
from core.errors import FetchError
from core.intratime_client import IntratimeClient
from core.session import Session
from models.clocking import DayHistory
from services.calendar import build_month_calendar
from services.history import fetch_month_history, history_by_date, month_range
from services.holidays import holidays_in_range
from services.reports import create_month_history_workbook

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _parse_month(request: Request, month: str) -> tuple[int, int]:
    if not MONTH_PATTERN.match(month):
        raise api_error(
            request,
            status.HTTP_400_BAD_REQUEST,
            f"Invalid month: {month}",
            ErrorCodes.INVALID_REQUEST,
            ["Month must use the YYYY-MM format"],
        )
    year, month_num = month.split("-")
    return int(year), int(month_num)


async def _load_month(
    request: Request, client: IntratimeClient, session: Session, month: str
) -> list[DayHistory]:
    try:
        return await fetch_month_history(client, session, month)
    except FetchError as e:
        raise api_error(
            request, status.HTTP_502_BAD_GATEWAY, str(e), ErrorCodes.UPSTREAM_ERROR
        )


@router.get("/history/{month}", response_model=MonthHistoryResponse)
async def get_month_history(
    request: Request,
    month: str,
    session: Session = Depends(require_session),
    client: IntratimeClient = Depends(get_intratime_client),
    now: datetime = Depends(get_now),
):
    """Monday-first calendar of a month with daily and weekly hours."""
    year, month_num = _parse_month(request, month)
    history = await _load_month(request, client, session, month)

    start, end = month_range(month)
    holidays = {h.date: h.name for h in holidays_in_range(start, end)}
    calendar = build_month_calendar(year, month_num, history_by_date(history), holidays, now)
    return MonthHistoryResponse.from_calendar(calendar)


@router.get("/history/{month}/export")
async def export_month_history(
    request: Request,
    month: str,
    session: Session = Depends(require_session),
    client: IntratimeClient = Depends(get_intratime_client),
):
    """Download a month's clockings as an Excel workbook."""
    year, month_num = _parse_month(request, month)
    history = await _load_month(request, client, session, month)

    content = create_month_history_workbook(year, month_num, history)
    filename = f"fichajes_{year}-{month_num:02d}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
