from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from typing import Optional
from core.database import get_db
from core.config import (
    ALLOWED_SPREADSHEET_EXTENSIONS,
    ALLOWED_SPREADSHEET_MIME_TYPES,
    IS_PRODUCTION,
    MAX_UPLOAD_SIZE_BYTES,
    MAX_UPLOAD_SIZE_MB,
)
from core.errors import DecodeError, EmptySheetError, NoValidDataError, PersistenceError
from schemas.applicant_schema import UploadResponse
from services.ingest_service import IngestService
import logging
import os

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Spreadsheet Upload"])


def _is_spreadsheet(file: UploadFile) -> bool:
    file_ext = os.path.splitext(file.filename or "")[1].lower()
    return file.content_type in ALLOWED_SPREADSHEET_MIME_TYPES or file_ext in ALLOWED_SPREADSHEET_EXTENSIONS


@router.post("/upload", response_model=UploadResponse)
async def upload_spreadsheet(
    file: Optional[UploadFile] = File(None, description="Excel workbook (.xls or .xlsx). Max 10MB"),
    db: Session = Depends(get_db),
):
    if file is None or not file.filename:
        raise HTTPException(400, "No file uploaded")

    if not _is_spreadsheet(file):
        raise HTTPException(400, "Only Excel files (.xls, .xlsx) are allowed")

    contents = await file.read(MAX_UPLOAD_SIZE_BYTES + 1)
    if len(contents) > MAX_UPLOAD_SIZE_BYTES:
        raise HTTPException(400, f"File is too large. Maximum size is {MAX_UPLOAD_SIZE_MB}MB.")

    try:
        summary = await run_in_threadpool(IngestService.ingest, db, contents)
    except (DecodeError, EmptySheetError, NoValidDataError) as e:
        logger.warning(f"Rejected upload {file.filename}: {e}")
        raise HTTPException(400, str(e))
    except PersistenceError as e:
        logger.error(f"Upload error for {file.filename}: {e}", exc_info=True)
        message = "Failed to process file" if IS_PRODUCTION else f"Failed to process file: {e}"
        raise HTTPException(500, message)

    logger.info(f"Upload {file.filename} processed: {summary.model_dump()}")
    return UploadResponse(**summary.model_dump())
