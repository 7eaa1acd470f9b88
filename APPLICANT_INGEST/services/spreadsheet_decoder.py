import logging
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional

import xlrd
from openpyxl import load_workbook

from core.errors import DecodeError, EmptySheetError

logger = logging.getLogger(__name__)

XLSX_MAGIC = b"PK\x03\x04"
XLS_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _normalize_number(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _header_labels(header_row: Iterable[Any]) -> List[Optional[str]]:
    labels: List[Optional[str]] = []
    seen = set()
    for cell in header_row:
        label = None if _is_empty(cell) else str(_normalize_number(cell)).strip()
        if label in seen:
            label = None
        elif label is not None:
            seen.add(label)
        labels.append(label)
    return labels


def _rows_to_records(rows: Iterable[List[Any]]) -> List[Dict[str, Any]]:
    rows = iter(rows)
    header = next(rows, None)
    if header is None:
        raise EmptySheetError("Excel file is empty")

    labels = _header_labels(header)
    records = []
    for row in rows:
        record = {}
        for label, value in zip(labels, row):
            if label is None or _is_empty(value):
                continue
            record[label] = _normalize_number(value)
        if record:
            records.append(record)

    if not records:
        raise EmptySheetError("Excel file is empty")
    return records


def _read_xlsx_rows(raw: bytes) -> List[List[Any]]:
    try:
        wb = load_workbook(BytesIO(raw), read_only=True, data_only=True)
    except Exception as e:
        raise DecodeError(f"Unable to read Excel file: {e}") from e
    try:
        if not wb.worksheets:
            raise DecodeError("Excel file contains no sheets")
        ws = wb.worksheets[0]
        # read-only worksheets parse their XML lazily, while iterating
        try:
            return [list(row) for row in ws.iter_rows(values_only=True)]
        except Exception as e:
            raise DecodeError(f"Unable to read Excel file: {e}") from e
    finally:
        wb.close()


def _read_xls_rows(raw: bytes) -> List[List[Any]]:
    try:
        book = xlrd.open_workbook(file_contents=raw)
    except Exception as e:
        raise DecodeError(f"Unable to read Excel file: {e}") from e
    if book.nsheets == 0:
        raise DecodeError("Excel file contains no sheets")

    try:
        sheet = book.sheet_by_index(0)
        rows = []
        for r in range(sheet.nrows):
            row = []
            for cell in sheet.row(r):
                if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                    row.append(None)
                elif cell.ctype == xlrd.XL_CELL_DATE:
                    row.append(xlrd.xldate_as_datetime(cell.value, book.datemode))
                else:
                    row.append(cell.value)
            rows.append(row)
    except Exception as e:
        raise DecodeError(f"Unable to read Excel file: {e}") from e
    return rows


def decode_spreadsheet(raw: bytes) -> List[Dict[str, Any]]:
    """Decode the first sheet of an .xlsx or .xls file into header-keyed rows.

    Blank cells are left out of each row mapping and fully blank rows are
    skipped. Raises DecodeError for unreadable input and EmptySheetError when
    the first sheet has no data rows.
    """
    if raw.startswith(XLSX_MAGIC):
        rows = _read_xlsx_rows(raw)
    elif raw.startswith(XLS_MAGIC):
        rows = _read_xls_rows(raw)
    else:
        raise DecodeError("Unable to read Excel file: unrecognised file format")

    records = _rows_to_records(rows)
    logger.info(f"Decoded {len(records)} data rows from spreadsheet")
    return records
