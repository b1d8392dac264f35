"""Bank holiday lookup endpoint."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies import verify_api_key
from api.errors import api_error
from api.models.responses import ErrorCodes, HolidayResponse
from services.holidays import holidays_in_range

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])


@router.get("/holidays", response_model=list[HolidayResponse])
async def list_holidays(
    request: Request,
    start: Annotated[date, Query(description="First day (inclusive)")],
    end: Annotated[date, Query(description="Last day (inclusive)")],
):
    if end < start:
        raise api_error(
            request,
            status.HTTP_400_BAD_REQUEST,
            "End date is before start date",
            ErrorCodes.INVALID_REQUEST,
        )
    return [HolidayResponse(date=h.date, name=h.name) for h in holidays_in_range(start, end)]
