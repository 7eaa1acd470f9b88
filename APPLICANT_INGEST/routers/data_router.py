from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional
from core.database import get_db
from core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from schemas.applicant_schema import ApplicantDetailResponse, ApplicantListResponse, MessageResponse, StatsResponse
from services.applicant_data_service import ApplicantDataService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Applicant Data"])


@router.get("/data", response_model=ApplicantListResponse)
def list_applicant_data(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    district: Optional[str] = Query(None),
    taluka: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    year: Optional[int] = Query(None),
    gender: Optional[str] = Query(None),
    scheme_name: Optional[str] = Query(None, alias="schemeName"),
    beneficiary_category: Optional[str] = Query(None, alias="beneficiaryCategory"),
    search: Optional[str] = Query(None, description="Matches name, mobile, email or Aadhaar"),
    db: Session = Depends(get_db),
):
    filters = {
        "district":            district,
        "taluka":              taluka,
        "status":              status,
        "year":                year,
        "gender":              gender,
        "schemeName":          scheme_name,
        "beneficiaryCategory": beneficiary_category,
        "search":              search,
    }
    try:
        return ApplicantDataService.list_records(db=db, page=page, limit=limit, filters=filters)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching data: {e}", exc_info=True)
        raise HTTPException(500, "Failed to fetch data")


@router.get("/data/{record_id}", response_model=ApplicantDetailResponse)
def get_applicant_record(record_id: int, db: Session = Depends(get_db)):
    try:
        return ApplicantDataService.get_record(db=db, record_id=record_id)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching record {record_id}: {e}", exc_info=True)
        raise HTTPException(500, "Failed to fetch record")


@router.delete("/data", response_model=MessageResponse)
def delete_all_applicant_data(db: Session = Depends(get_db)):
    try:
        return ApplicantDataService.delete_all(db=db)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting data: {e}", exc_info=True)
        raise HTTPException(500, "Failed to delete data")


@router.get("/stats", response_model=StatsResponse)
def get_stats(db: Session = Depends(get_db)):
    try:
        return ApplicantDataService.stats(db=db)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching stats: {e}", exc_info=True)
        raise HTTPException(500, "Failed to fetch statistics")
