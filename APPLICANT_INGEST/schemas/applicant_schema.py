from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IngestSummary(CamelModel):
    records_processed: int
    unique_records_saved: int
    duplicates_removed: int


class UploadResponse(IngestSummary):
    success: bool = True
    message: str = "File uploaded successfully"


class ApplicantRecordOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    applicant_name: Optional[str] = None
    district: Optional[str] = None
    taluka: Optional[str] = None
    year: Optional[int] = None
    portal: Optional[str] = None
    scheme_name: Optional[str] = None
    application_date: Optional[str] = None
    status: Optional[str] = None
    amount_sanctioned: Optional[float] = None
    beneficiary_category: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    aadhaar_no: Optional[str] = None
    upload_date: datetime


class ApplicantListResponse(CamelModel):
    success: bool = True
    total_records: int
    current_page: int
    total_pages: int
    records_per_page: int
    filters: Dict[str, Any]
    data: List[ApplicantRecordOut]


class ApplicantDetailResponse(CamelModel):
    success: bool = True
    data: ApplicantRecordOut


class StatsResponse(CamelModel):
    success: bool = True
    total_records: int
    latest_upload_date: Optional[datetime] = None


class MessageResponse(CamelModel):
    success: bool
    message: str
