from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime, Integer, Float, Index, BigInteger
from core.database import Base
import enum


class InsertOutcome(str, enum.Enum):
    SAVED                  = "SAVED"
    REJECTED_DUPLICATE_KEY = "REJECTED_DUPLICATE_KEY"


class ApplicantRecord(Base):
    __tablename__ = "applicant_records"

    # spreadsheet cells are free text, so text columns carry no length limit
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    applicant_name = Column(Text, nullable=True)
    district = Column(String, nullable=True)
    taluka = Column(String, nullable=True)
    year = Column(Integer, nullable=True)
    portal = Column(Text, nullable=True)
    scheme_name = Column(Text, nullable=True)
    application_date = Column(Text, nullable=True)
    status = Column(Text, nullable=True)
    amount_sanctioned = Column(Float, nullable=True)
    beneficiary_category = Column(Text, nullable=True)
    gender = Column(Text, nullable=True)
    age = Column(Integer, nullable=True)
    mobile = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    # NULLs never collide under a UNIQUE constraint, so records without an Aadhaar are exempt
    aadhaar_no = Column(String, unique=True, nullable=True)
    upload_date = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (
        Index("idx_upload_date", "upload_date"),
        Index("idx_district_taluka", "district", "taluka"),
    )
