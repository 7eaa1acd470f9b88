"""Tests for the persistence gateway against an in-memory SQLite store."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import String
from sqlalchemy.exc import OperationalError

from core.errors import PersistenceError
from models.applicant_record import ApplicantRecord, InsertOutcome
from repositories.applicant_record_repository import ApplicantRecordRepository

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _record(aadhaar=None, name="Asha Patil", minutes=0, **fields):
    record = {
        "applicant_name": name,
        "aadhaar_no": aadhaar,
        "upload_date": BASE_TIME + timedelta(minutes=minutes),
    }
    record.update(fields)
    return record


class TestInsert:
    def test_new_record_is_saved(self, db_session):
        outcome = ApplicantRecordRepository.insert(db_session, _record("123412341234"))

        assert outcome == InsertOutcome.SAVED
        assert ApplicantRecordRepository.count_all(db_session) == 1

    def test_saved_record_is_immediately_readable(self, db_session, session_factory):
        ApplicantRecordRepository.insert(db_session, _record("123412341234"))

        other = session_factory()
        try:
            stored = ApplicantRecordRepository.get_by_aadhaar_no(other, "123412341234")
        finally:
            other.close()

        assert stored is not None
        assert stored.applicant_name == "Asha Patil"

    def test_existing_key_is_rejected(self, db_session):
        ApplicantRecordRepository.insert(db_session, _record("123412341234", name="First"))

        outcome = ApplicantRecordRepository.insert(db_session, _record("123412341234", name="Second"))

        assert outcome == InsertOutcome.REJECTED_DUPLICATE_KEY
        assert ApplicantRecordRepository.count_all(db_session) == 1
        assert ApplicantRecordRepository.get_by_aadhaar_no(db_session, "123412341234").applicant_name == "First"

    def test_rejection_leaves_session_usable(self, db_session):
        ApplicantRecordRepository.insert(db_session, _record("123412341234"))
        ApplicantRecordRepository.insert(db_session, _record("123412341234"))

        outcome = ApplicantRecordRepository.insert(db_session, _record("555566667777"))

        assert outcome == InsertOutcome.SAVED
        assert ApplicantRecordRepository.count_all(db_session) == 2

    @pytest.mark.parametrize("missing_key", [None, ""])
    def test_records_without_key_are_always_saved(self, db_session, missing_key):
        for i in range(3):
            outcome = ApplicantRecordRepository.insert(db_session, _record(missing_key, name=f"No Key {i}"))
            assert outcome == InsertOutcome.SAVED

        assert ApplicantRecordRepository.count_all(db_session) == 3
        assert db_session.query(ApplicantRecord).filter(ApplicantRecord.aadhaar_no.is_(None)).count() == 3

    def test_long_free_text_is_stored_whole(self, db_session):
        mobile = "98765 43210 / 98765 43211"
        status = "Approved by district committee, pending disbursal " * 4

        outcome = ApplicantRecordRepository.insert(
            db_session, _record("123412341234", mobile=mobile, status=status)
        )

        assert outcome == InsertOutcome.SAVED
        stored = ApplicantRecordRepository.get_by_aadhaar_no(db_session, "123412341234")
        assert stored.mobile == mobile
        assert stored.status == status

    def test_text_columns_have_no_length_limit(self):
        for column in ApplicantRecord.__table__.columns:
            if isinstance(column.type, String):
                assert column.type.length is None, column.name

    def test_other_storage_faults_raise(self, db_session, monkeypatch):
        def broken_commit():
            raise OperationalError("INSERT", {}, Exception("database is locked"))

        monkeypatch.setattr(db_session, "commit", broken_commit)

        with pytest.raises(PersistenceError):
            ApplicantRecordRepository.insert(db_session, _record("123412341234"))


class TestReads:
    @pytest.fixture()
    def seeded(self, db_session):
        rows = [
            _record("111111111111", "Asha Patil", 0, district="Pune", taluka="Haveli", year=2023,
                    status="Approved", gender="Female", scheme_name="Post Matric Scholarship",
                    beneficiary_category="SC", mobile="9876500001", email="asha@example.in"),
            _record("222222222222", "Ravi Jadhav", 1, district="Nashik", taluka="Niphad", year=2022,
                    status="Pending", gender="Male", scheme_name="Free Ship Card",
                    beneficiary_category="OBC", mobile="9876500002", email="ravi@example.in"),
            _record(None, "Meena Shinde", 2, district="PUNE", taluka="Mulshi", year=2023,
                    status="Rejected", gender="Female", scheme_name="Post Matric Scholarship",
                    beneficiary_category="ST", mobile="9876500003", email="meena@example.in"),
        ]
        for row in rows:
            ApplicantRecordRepository.insert(db_session, row)
        return db_session

    def test_search_without_filters_is_newest_first(self, seeded):
        records, total = ApplicantRecordRepository.search(seeded, {})

        assert total == 3
        assert [r.applicant_name for r in records] == ["Meena Shinde", "Ravi Jadhav", "Asha Patil"]

    def test_text_filters_are_case_insensitive_substrings(self, seeded):
        records, total = ApplicantRecordRepository.search(seeded, {"district": "pun"})

        assert total == 2
        assert {r.applicant_name for r in records} == {"Asha Patil", "Meena Shinde"}

    def test_year_filter_is_exact(self, seeded):
        records, total = ApplicantRecordRepository.search(seeded, {"year": 2022})

        assert total == 1
        assert records[0].applicant_name == "Ravi Jadhav"

    def test_filters_combine(self, seeded):
        _, total = ApplicantRecordRepository.search(
            seeded, {"schemeName": "matric", "beneficiaryCategory": "st", "gender": "female"}
        )

        assert total == 1

    def test_search_spans_identity_fields(self, seeded):
        by_mobile, _ = ApplicantRecordRepository.search(seeded, {"search": "500002"})
        by_aadhaar, _ = ApplicantRecordRepository.search(seeded, {"search": "1111"})
        by_email, _ = ApplicantRecordRepository.search(seeded, {"search": "MEENA@"})

        assert [r.applicant_name for r in by_mobile] == ["Ravi Jadhav"]
        assert [r.applicant_name for r in by_aadhaar] == ["Asha Patil"]
        assert [r.applicant_name for r in by_email] == ["Meena Shinde"]

    def test_like_wildcards_are_literal(self, seeded):
        _, total = ApplicantRecordRepository.search(seeded, {"search": "%"})

        assert total == 0

    def test_pagination(self, seeded):
        page, total = ApplicantRecordRepository.search(seeded, {}, limit=2, offset=2)

        assert total == 3
        assert [r.applicant_name for r in page] == ["Asha Patil"]

    def test_latest_and_count(self, seeded):
        assert ApplicantRecordRepository.count_all(seeded) == 3
        assert ApplicantRecordRepository.get_latest(seeded).applicant_name == "Meena Shinde"

    def test_delete_all(self, seeded):
        assert ApplicantRecordRepository.delete_all(seeded) == 3
        assert ApplicantRecordRepository.count_all(seeded) == 0
        assert ApplicantRecordRepository.get_latest(seeded) is None
