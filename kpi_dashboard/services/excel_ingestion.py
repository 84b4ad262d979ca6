"""
Excel Ingestion Service

Reads the weekly KPI workbook and accumulates its rows into weekly records.

Column order (first worksheet, header row skipped):
    name, position, week_start, week_end, days_worked, verifications,
    cv_added (ignored, always stored as 0), recommendations, interviews, placements

Re-uploading the same employee+week adds onto the stored values; only the
uploader is replaced. A bad row is reported and skipped, the rest of the
batch still lands. Every batch is written to upload_logs.
"""
import io
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, List, Optional, Sequence

import xlrd
from openpyxl import load_workbook
from openpyxl.utils.datetime import from_excel
from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kpi_dashboard.core.exceptions import RowValidationError
from kpi_dashboard.models.employee import Employee, Position
from kpi_dashboard.models.upload_log import UploadLog
from kpi_dashboard.models.weekly_kpi import WeeklyKPI, METRIC_FIELDS

logger = logging.getLogger(__name__)

COLUMN_COUNT = 10
MAX_DAYS_WORKED = 7
ACCUMULATED_FIELDS = METRIC_FIELDS + ("days_worked",)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
XLS_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


@dataclass
class KPIRow:
    name: str
    position: Position
    week_start: date
    week_end: date
    days_worked: int
    verifications: int
    recommendations: int
    interviews: int
    placements: int


@dataclass
class IngestionResult:
    success: bool = True
    rows_processed: int = 0
    rows_success: int = 0
    rows_failed: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.success:
            return f"Successfully processed {self.rows_success} rows"
        return f"Processed with errors: {self.rows_success} success, {self.rows_failed} failed"


def to_int(value: Any) -> int:
    """Lenient integer parse: numbers truncate, strings use their leading digits, anything else is 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else 0
    return 0


def parse_sheet_date(value: Any, label: str) -> date:
    """Accepts date/datetime cells, ISO strings and spreadsheet serial numbers."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            text = value.strip()
            if text[-1:] in ("Z", "z"):
                text = text[:-1] + "+00:00"
            return datetime.fromisoformat(text).date()
        except ValueError:
            raise RowValidationError("Invalid date format")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            converted = from_excel(value)
        except (ValueError, OverflowError, TypeError):
            raise RowValidationError("Invalid date format")
        if isinstance(converted, datetime):
            return converted.date()
        raise RowValidationError("Invalid date format")
    raise RowValidationError(f"Invalid {label} date")


def parse_row(row: Sequence[Any]) -> KPIRow:
    cells = list(row) + [None] * (COLUMN_COUNT - len(row))
    (name, position, week_start, week_end, days_worked,
     verifications, _cv_ignored, recommendations, interviews, placements) = cells[:COLUMN_COUNT]

    if not isinstance(name, str) or not name.strip():
        raise RowValidationError("Missing or invalid name")

    position_value = position.strip() if isinstance(position, str) else position
    try:
        parsed_position = Position(position_value)
    except ValueError:
        raise RowValidationError(f'Invalid position "{position}". Must be: Sourcer, Rekruter, or TAC')

    start = parse_sheet_date(week_start, "week start")
    end = parse_sheet_date(week_end, "week end")

    days = to_int(days_worked)
    if days < 0 or days > MAX_DAYS_WORKED:
        raise RowValidationError(f"Days worked must be between 0 and {MAX_DAYS_WORKED}")

    return KPIRow(
        name=name.strip(),
        position=parsed_position,
        week_start=start,
        week_end=end,
        days_worked=days,
        verifications=max(0, to_int(verifications)),
        recommendations=max(0, to_int(recommendations)),
        interviews=max(0, to_int(interviews)),
        placements=max(0, to_int(placements)),
    )


def get_or_create_employee(db: Session, name: str, position: Position) -> Employee:
    employee = db.query(Employee).filter(Employee.name == name).first()
    if employee is None:
        employee = Employee(name=name, position=position, is_active=True)
        db.add(employee)
        db.flush()
        logger.info(f"Created employee '{name}' ({position.value}) from upload")
    return employee


def _insert_for(db: Session):
    if db.get_bind().dialect.name == "postgresql":
        return postgresql_insert
    return sqlite_insert


def upsert_weekly_record(db: Session, employee_id: int, kpi: KPIRow, uploaded_by: Optional[int]) -> None:
    """Insert the week, or add onto the existing one, in a single statement."""
    existing_days = (
        db.query(WeeklyKPI.days_worked)
        .filter(WeeklyKPI.employee_id == employee_id, WeeklyKPI.week_start == kpi.week_start)
        .scalar()
    )
    if existing_days is not None and existing_days + kpi.days_worked > MAX_DAYS_WORKED:
        raise RowValidationError(
            f"Accumulated days worked for week {kpi.week_start.isoformat()} would exceed {MAX_DAYS_WORKED}"
        )

    insert = _insert_for(db)
    stmt = insert(WeeklyKPI).values(
        employee_id=employee_id,
        week_start=kpi.week_start,
        week_end=kpi.week_end,
        year=kpi.week_start.year,
        month=kpi.week_start.month,
        week_number=kpi.week_start.isocalendar()[1],
        verifications=kpi.verifications,
        cv_added=0,
        recommendations=kpi.recommendations,
        interviews=kpi.interviews,
        placements=kpi.placements,
        days_worked=kpi.days_worked,
        uploaded_by=uploaded_by,
    )
    table = WeeklyKPI.__table__
    accumulate = {name: table.c[name] + stmt.excluded[name] for name in ACCUMULATED_FIELDS}
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.employee_id, table.c.week_start],
        set_={**accumulate, "uploaded_by": stmt.excluded.uploaded_by, "uploaded_at": func.now()},
    )
    db.execute(stmt)


def _xls_cell(cell, datemode: int) -> Any:
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if cell.ctype == xlrd.XL_CELL_DATE:
        try:
            return xlrd.xldate_as_datetime(cell.value, datemode)
        except xlrd.xldate.XLDateError:
            return cell.value
    return cell.value


def _read_xls_rows(content: bytes):
    book = xlrd.open_workbook(file_contents=content, on_demand=True)
    try:
        sheet = book.sheet_by_index(0)
        rows = []
        for index in range(1, sheet.nrows):
            cells = tuple(_xls_cell(cell, book.datemode) for cell in sheet.row(index))
            if not cells or cells[0] is None or cells[0] == "":
                continue
            rows.append((index + 1, cells))
        return rows
    finally:
        book.release_resources()


def read_rows(content: bytes):
    """
    (worksheet row number, cells) for every data row with a non-empty first cell.

    Legacy .xls workbooks are recognised by their compound-document signature
    and read with xlrd; everything else goes through openpyxl.
    """
    if content.startswith(XLS_SIGNATURE):
        return _read_xls_rows(content)

    workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        rows = []
        for row_number, cells in enumerate(sheet.iter_rows(min_row=2, values_only=True), start=2):
            if not cells or cells[0] is None or cells[0] == "":
                continue
            rows.append((row_number, cells))
        return rows
    finally:
        workbook.close()


def ingest_workbook(db: Session, content: bytes, filename: str, uploaded_by: Optional[int]) -> IngestionResult:
    result = IngestionResult()

    try:
        rows = read_rows(content)
    except Exception as e:
        logger.warning(f"Unreadable workbook '{filename}': {e}")
        result.success = False
        result.errors.append(f"File processing error: {e}")
        rows = []

    for row_number, cells in rows:
        result.rows_processed += 1
        try:
            kpi = parse_row(cells)
            with db.begin_nested():
                employee = get_or_create_employee(db, kpi.name, kpi.position)
                upsert_weekly_record(db, employee.id, kpi, uploaded_by)
            result.rows_success += 1
        except RowValidationError as e:
            result.rows_failed += 1
            result.errors.append(f"Row {row_number}: {e}")
        except IntegrityError as e:
            logger.warning(f"Row {row_number} of '{filename}' violated a constraint: {e.orig}")
            result.rows_failed += 1
            result.errors.append(f"Row {row_number}: Database constraint violated")

    if result.rows_failed:
        result.success = False

    db.add(UploadLog(
        filename=filename,
        rows_processed=result.rows_processed,
        rows_success=result.rows_success,
        rows_failed=result.rows_failed,
        errors=result.errors,
        uploaded_by=uploaded_by,
    ))
    db.commit()

    logger.info(
        f"Ingested '{filename}': {result.rows_success}/{result.rows_processed} rows",
        extra={"rows_failed": result.rows_failed, "uploaded_by": uploaded_by},
    )
    return result
