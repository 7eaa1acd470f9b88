"""
tests/conftest.py

Shared fixtures for the applicant ingest test suite.

Every test runs against a fresh in-memory SQLite database. The StaticPool keeps
one connection alive so the schema created here is the one the app sees, and
the app's get_db dependency is overridden to hand out sessions bound to it.
Spreadsheet fixtures are built at test time: .xlsx with openpyxl, legacy .xls
with xlwt.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "100000"
os.environ["UPLOAD_RATE_LIMIT_MAX_REQUESTS"] = "100000"

import zipfile
from datetime import datetime
from io import BytesIO
from typing import Any, Callable, List, Optional

import pytest
import xlwt
from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import Base, get_db
import models.applicant_record  # noqa: F401  registers the table on Base.metadata
from helpers import HEADERS


@pytest.fixture()
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    from main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture()
def build_xlsx() -> Callable[..., bytes]:
    def _build(rows: List[List[Any]], headers: Optional[List[str]] = None, extra_sheet: bool = False) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = "Applicants"
        if headers is None:
            headers = HEADERS
        if headers:
            ws.append(headers)
        for row in rows:
            ws.append(row)
        if extra_sheet:
            other = wb.create_sheet("Other")
            other.append(["Applicant Name", "Aadhaar No"])
            other.append(["Should Not Appear", "999999999999"])
        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    return _build


@pytest.fixture()
def build_xls() -> Callable[..., bytes]:
    """Legacy BIFF workbooks for the xlrd path; datetime cells get a date format."""
    def _build(rows: List[List[Any]], headers: Optional[List[str]] = None) -> bytes:
        wb = xlwt.Workbook()
        ws = wb.add_sheet("Applicants")
        date_style = xlwt.easyxf(num_format_str="YYYY-MM-DD")
        if headers is None:
            headers = HEADERS
        for c, label in enumerate(headers):
            ws.write(0, c, label)
        for r, row in enumerate(rows, start=1):
            for c, value in enumerate(row):
                if value is None:
                    continue
                if isinstance(value, datetime):
                    ws.write(r, c, value, date_style)
                else:
                    ws.write(r, c, value)
        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    return _build


@pytest.fixture()
def corrupt_first_sheet() -> Callable[[bytes], bytes]:
    """Rewrite an .xlsx so its first worksheet XML is cut in half."""
    def _corrupt(raw: bytes) -> bytes:
        source = zipfile.ZipFile(BytesIO(raw))
        buffer = BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as target:
            for item in source.infolist():
                data = source.read(item.filename)
                if item.filename == "xl/worksheets/sheet1.xml":
                    data = data[: len(data) // 2]
                target.writestr(item, data)
        return buffer.getvalue()

    return _corrupt
