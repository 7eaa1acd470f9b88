from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from core.errors import PersistenceError
from models.applicant_record import ApplicantRecord, InsertOutcome
from typing import Any, Dict, List, Optional, Tuple

TEXT_FILTER_FIELDS = {
    "district":            ApplicantRecord.district,
    "taluka":              ApplicantRecord.taluka,
    "status":              ApplicantRecord.status,
    "gender":              ApplicantRecord.gender,
    "schemeName":          ApplicantRecord.scheme_name,
    "beneficiaryCategory": ApplicantRecord.beneficiary_category,
}

SEARCH_FIELDS = [
    ApplicantRecord.applicant_name,
    ApplicantRecord.mobile,
    ApplicantRecord.email,
    ApplicantRecord.aadhaar_no,
]


def _contains_pattern(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ApplicantRecordRepository:

    @staticmethod
    def insert(db: Session, record: Dict[str, Any]) -> InsertOutcome:
        # empty keys are stored as NULL so they never collide
        aadhaar_no = record.get("aadhaar_no") or None
        applicant = ApplicantRecord(**{**record, "aadhaar_no": aadhaar_no})
        try:
            db.add(applicant)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            try:
                existing = ApplicantRecordRepository.get_by_aadhaar_no(db, aadhaar_no) if aadhaar_no else None
            except SQLAlchemyError as lookup_error:
                raise PersistenceError(str(lookup_error)) from lookup_error
            if existing is not None:
                return InsertOutcome.REJECTED_DUPLICATE_KEY
            raise PersistenceError(str(e.orig)) from e
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(str(e)) from e
        return InsertOutcome.SAVED

    @staticmethod
    def get_by_id(db: Session, record_id: int) -> Optional[ApplicantRecord]:
        return db.query(ApplicantRecord).filter(ApplicantRecord.id == record_id).first()

    @staticmethod
    def get_by_aadhaar_no(db: Session, aadhaar_no: str) -> Optional[ApplicantRecord]:
        return db.query(ApplicantRecord).filter(ApplicantRecord.aadhaar_no == aadhaar_no).first()

    @staticmethod
    def search(db: Session, filters: Dict[str, Any], limit: int = 100, offset: int = 0) -> Tuple[List[ApplicantRecord], int]:
        query = db.query(ApplicantRecord)

        for name, column in TEXT_FILTER_FIELDS.items():
            if filters.get(name):
                query = query.filter(column.ilike(_contains_pattern(filters[name]), escape="\\"))

        if filters.get("year") is not None:
            query = query.filter(ApplicantRecord.year == filters["year"])

        if filters.get("search"):
            pattern = _contains_pattern(filters["search"])
            query = query.filter(or_(*[column.ilike(pattern, escape="\\") for column in SEARCH_FIELDS]))

        total = query.count()
        records = query.order_by(
            ApplicantRecord.upload_date.desc(), ApplicantRecord.id.desc()
        ).offset(offset).limit(limit).all()
        return records, total

    @staticmethod
    def count_all(db: Session) -> int:
        return db.query(ApplicantRecord).count()

    @staticmethod
    def get_latest(db: Session) -> Optional[ApplicantRecord]:
        return db.query(ApplicantRecord).order_by(
            ApplicantRecord.upload_date.desc(), ApplicantRecord.id.desc()
        ).first()

    @staticmethod
    def delete_all(db: Session) -> int:
        deleted = db.query(ApplicantRecord).delete(synchronize_session=False)
        db.commit()
        return deleted
