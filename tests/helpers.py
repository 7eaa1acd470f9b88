"""Spreadsheet row builders shared by the test modules."""

from typing import Any, Dict, List, Optional

HEADERS = [
    "Applicant Name", "District", "Taluka", "Year", "Portal", "Scheme Name",
    "Application Date", "Status", "Amount Sanctioned", "Beneficiary Category",
    "Gender", "Age", "Mobile", "Email", "Aadhaar No",
]


def applicant_row(name: str, aadhaar: Optional[Any] = None, overrides: Optional[Dict[str, Any]] = None) -> List[Any]:
    """One spreadsheet row in HEADERS order; overrides are keyed by header label."""
    values = {
        "Applicant Name": name,
        "District": "Pune",
        "Taluka": "Haveli",
        "Year": 2023,
        "Portal": "MahaDBT",
        "Scheme Name": "Post Matric Scholarship",
        "Application Date": "2023-06-01",
        "Status": "Approved",
        "Amount Sanctioned": 15000,
        "Beneficiary Category": "SC",
        "Gender": "Female",
        "Age": 21,
        "Mobile": "9876543210",
        "Email": f"{name.lower().replace(' ', '.')}@example.in",
        "Aadhaar No": aadhaar,
    }
    values.update(overrides or {})
    return [values[h] for h in HEADERS]
