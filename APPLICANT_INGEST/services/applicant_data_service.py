import logging
import math
from sqlalchemy.orm import Session
from fastapi import HTTPException
from repositories.applicant_record_repository import ApplicantRecordRepository
from schemas.applicant_schema import (
    ApplicantDetailResponse,
    ApplicantListResponse,
    ApplicantRecordOut,
    MessageResponse,
    StatsResponse,
)
from typing import Any, Dict

logger = logging.getLogger(__name__)


class ApplicantDataService:

    @staticmethod
    def list_records(db: Session, page: int, limit: int, filters: Dict[str, Any]) -> ApplicantListResponse:
        active_filters = {k: v for k, v in filters.items() if v is not None and v != ""}
        records, total = ApplicantRecordRepository.search(
            db, active_filters, limit=limit, offset=(page - 1) * limit
        )
        return ApplicantListResponse(
            total_records    = total,
            current_page     = page,
            total_pages      = math.ceil(total / limit),
            records_per_page = limit,
            filters          = active_filters,
            data             = [ApplicantRecordOut.model_validate(r) for r in records],
        )

    @staticmethod
    def get_record(db: Session, record_id: int) -> ApplicantDetailResponse:
        record = ApplicantRecordRepository.get_by_id(db, record_id)
        if not record:
            raise HTTPException(404, "Record not found")
        return ApplicantDetailResponse(data=ApplicantRecordOut.model_validate(record))

    @staticmethod
    def delete_all(db: Session) -> MessageResponse:
        deleted = ApplicantRecordRepository.delete_all(db)
        logger.warning(f"Deleted all applicant records ({deleted})")
        return MessageResponse(success=True, message=f"Deleted {deleted} records")

    @staticmethod
    def stats(db: Session) -> StatsResponse:
        latest = ApplicantRecordRepository.get_latest(db)
        return StatsResponse(
            total_records      = ApplicantRecordRepository.count_all(db),
            latest_upload_date = latest.upload_date if latest else None,
        )
