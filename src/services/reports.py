"""
Report generation utilities for month history exports.
"""

from datetime import date
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from models.clocking import ClockKind, DayHistory
from services.hours import format_hours

HISTORY_HEADERS = ["Date", "Entry", "Pause", "Resume", "Exit", "Hours", "Hours (h:m)"]


def format_date_display(d: date) -> str:
    """Format date as D/M/YYYY (platform-safe, no zero-padding)."""
    return f"{d.day}/{d.month}/{d.year}"


def format_month_title(year: int, month: int) -> str:
    """Format month as 'November 2026'."""
    return date(year, month, 1).strftime("%B %Y")


def history_row(day: DayHistory) -> list:
    """Spreadsheet row for one day: earliest entry/pause/resume, latest exit."""
    return [
        format_date_display(day.date),
        day.first_time(ClockKind.ENTRY),
        day.first_time(ClockKind.PAUSE),
        day.first_time(ClockKind.RESUME),
        day.last_time(ClockKind.EXIT),
        day.total_hours,
        format_hours(day.total_hours),
    ]


def write_history_sheet(ws, history: list[DayHistory]):
    """
    Write the month history to a worksheet.

    Rows are in ascending date order, followed by a SUM row for the hours column.
    """
    for col_idx, header in enumerate(HISTORY_HEADERS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)

    days = sorted(history, key=lambda h: h.date)
    for row_idx, day in enumerate(days, start=2):
        for col_idx, value in enumerate(history_row(day), start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)

    # Total row
    hours_col = get_column_letter(HISTORY_HEADERS.index("Hours") + 1)
    total_row = len(days) + 2
    label = ws.cell(row=total_row, column=1, value="Total")
    label.font = Font(bold=True)
    if days:
        ws.cell(row=total_row, column=HISTORY_HEADERS.index("Hours") + 1,
                value=f"=SUM({hours_col}2:{hours_col}{total_row - 1})")
    else:
        ws.cell(row=total_row, column=HISTORY_HEADERS.index("Hours") + 1, value=0)
    ws.cell(row=total_row, column=len(HISTORY_HEADERS),
            value=format_hours(sum(d.total_hours for d in days)))

    for col_idx in range(1, len(HISTORY_HEADERS) + 1):
        ws.column_dimensions[get_column_letter(col_idx)].width = 14


def create_month_history_workbook(year: int, month: int, history: list[DayHistory]) -> bytes:
    """Create an Excel workbook with the month's clocked history and return its bytes."""
    wb = Workbook()
    ws = wb.active
    ws.title = "History"
    write_history_sheet(ws, history)
    wb.properties.title = f"Clock-in history {format_month_title(year, month)}"

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
