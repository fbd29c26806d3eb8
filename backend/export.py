"""
Spreadsheet export of task lists

Writes an .xlsx workbook with a single "Tasks" sheet: a bold, grey header
row followed by one row per task, in the order given. Cell timestamps and
the default file name both use UTC, the clock tasks are stored in.
"""
from datetime import datetime
from io import BytesIO
from typing import Iterable, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from backend.models import Task, utcnow

SHEET_TITLE = "Tasks"
HEADERS = ["ID", "Title", "Description", "Status", "Priority", "Created At", "Updated At", "Due Date"]
DATE_FORMAT = "%Y-%m-%d %H:%M"
FILENAME_FORMAT = "tasks_%Y%m%d_%H%M%S.xlsx"
CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_HEADER_FONT = Font(bold=True)
_HEADER_FILL = PatternFill(fill_type="solid", start_color="C0C0C0", end_color="C0C0C0")
_MAX_COLUMN_WIDTH = 80


def _fmt(value: Optional[datetime]) -> str:
    # strftime is locale-independent for numeric directives
    return value.strftime(DATE_FORMAT) if value is not None else ""


def task_row(task: Task) -> list:
    return [
        task.id,
        task.title,
        task.description if task.description is not None else "",
        task.status.name,
        task.priority.name,
        _fmt(task.created_at),
        _fmt(task.updated_at),
        _fmt(task.due_date),
    ]


def _fit_columns(ws, rows: List[list]) -> None:
    for idx in range(len(HEADERS)):
        longest = max(len(str(r[idx])) for r in rows)
        ws.column_dimensions[get_column_letter(idx + 1)].width = min(longest + 2, _MAX_COLUMN_WIDTH)


def render_tasks_workbook(tasks: Iterable[Task]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append(HEADERS)
    for cell in ws[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL

    rows = [HEADERS]
    for task in tasks:
        row = task_row(task)
        ws.append(row)
        rows.append(row)

    _fit_columns(ws, rows)

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def export_filename(now: Optional[datetime] = None) -> str:
    return (now or utcnow()).strftime(FILENAME_FORMAT)
