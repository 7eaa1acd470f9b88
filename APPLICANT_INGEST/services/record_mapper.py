import math
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional

COLUMN_MAP = {
    "Applicant Name":       "applicant_name",
    "District":             "district",
    "Taluka":               "taluka",
    "Year":                 "year",
    "Portal":               "portal",
    "Scheme Name":          "scheme_name",
    "Application Date":     "application_date",
    "Status":               "status",
    "Amount Sanctioned":    "amount_sanctioned",
    "Beneficiary Category": "beneficiary_category",
    "Gender":               "gender",
    "Age":                  "age",
    "Mobile":               "mobile",
    "Email":                "email",
    "Aadhaar No":           "aadhaar_no",
}

INTEGER_FIELDS = {"year", "age"}
NUMERIC_FIELDS = {"amount_sanctioned"}


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).replace(",", "").strip())
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _coerce(field: str, value: Any) -> Any:
    if field in INTEGER_FIELDS:
        return _to_int(value)
    if field in NUMERIC_FIELDS:
        return _to_float(value)
    return _to_text(value)


def map_row(row: Dict[str, Any], uploaded_at: Optional[datetime] = None) -> Dict[str, Any]:
    record = {field: _coerce(field, row.get(label)) for label, field in COLUMN_MAP.items()}
    record["upload_date"] = uploaded_at or datetime.now(timezone.utc)
    return record


def map_rows(rows: Iterable[Dict[str, Any]], uploaded_at: Optional[datetime] = None) -> List[Dict[str, Any]]:
    uploaded_at = uploaded_at or datetime.now(timezone.utc)
    return [map_row(row, uploaded_at) for row in rows]
