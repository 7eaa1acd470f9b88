import logging
from sqlalchemy.orm import Session
from core.errors import NoValidDataError
from models.applicant_record import InsertOutcome
from repositories.applicant_record_repository import ApplicantRecordRepository
from schemas.applicant_schema import IngestSummary
from services.deduplication import reconcile
from services.record_mapper import map_rows
from services.spreadsheet_decoder import decode_spreadsheet
from utils.masking import mask_aadhaar

logger = logging.getLogger(__name__)


class IngestService:

    @staticmethod
    def ingest(db: Session, raw: bytes) -> IngestSummary:
        """Decode, map, reconcile and persist one uploaded spreadsheet.

        Records are committed one at a time. A PersistenceError stops the loop
        and propagates, leaving earlier inserts in place. duplicates_removed is
        always records_processed - unique_records_saved, so it covers rows
        dropped in-batch as well as rows rejected by the Aadhaar constraint.
        """
        rows = decode_spreadsheet(raw)
        records_processed = len(rows)

        records = reconcile(map_rows(rows))
        if not records:
            raise NoValidDataError("No valid data found in Excel file")

        saved_count = 0
        rejected_count = 0
        for record in records:
            outcome = ApplicantRecordRepository.insert(db, record)
            if outcome == InsertOutcome.SAVED:
                saved_count += 1
            else:
                rejected_count += 1
                logger.info(f"Skipped existing Aadhaar {mask_aadhaar(record['aadhaar_no'])}")

        logger.info(
            f"Ingest complete: {records_processed} processed, "
            f"{len(records)} after reconciliation, "
            f"{saved_count} saved, {rejected_count} already stored"
        )

        return IngestSummary(
            records_processed    = records_processed,
            unique_records_saved = saved_count,
            duplicates_removed   = records_processed - saved_count,
        )
