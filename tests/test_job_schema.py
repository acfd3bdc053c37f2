"""Tests for job data and record model validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from conftest import make_ai_payload
from job_hunter.models.job import (
    JobAIData,
    JobRecord,
    JobStatus,
    JobType,
    WorkModel,
    create_job_record,
    utc_now_iso,
)


class TestJobAIData:
    """Test suite for AI output validation."""

    def test_valid_payload(self) -> None:
        data = JobAIData.model_validate(make_ai_payload())
        assert data.work_model == WorkModel.HYBRID
        assert data.job_type == JobType.FULL_TIME
        assert data.compensation.min_salary == 150000
        assert len(data.qualifications) == 2

    @pytest.mark.parametrize(
        "field",
        ["jobTitle", "companyName", "location", "workModel", "jobType", "qualifications"],
    )
    def test_required_field_missing(self, field: str) -> None:
        payload = make_ai_payload()
        del payload[field]
        with pytest.raises(ValidationError):
            JobAIData.model_validate(payload)

    def test_invalid_qualification_type(self) -> None:
        payload = make_ai_payload(qualifications=[{"detail": "SQL", "type": "Optional"}])
        with pytest.raises(ValidationError):
            JobAIData.model_validate(payload)

    def test_invalid_salary_period(self) -> None:
        payload = make_ai_payload(compensation={"minSalary": 1, "period": "weekly"})
        with pytest.raises(ValidationError):
            JobAIData.model_validate(payload)

    def test_location_requires_raw_text(self) -> None:
        with pytest.raises(ValidationError):
            JobAIData.model_validate(make_ai_payload(location={"city": "Sydney"}))

    def test_absent_vs_empty_compensation(self) -> None:
        """An empty compensation object is kept; a missing one stays None."""
        empty = JobAIData.model_validate(make_ai_payload(compensation={}))
        assert empty.compensation is not None
        assert empty.to_dict()["compensation"] == {}


class TestJobRecord:
    """Test suite for record construction and serialization."""

    def test_create_job_record(self) -> None:
        ai_data = JobAIData.model_validate(make_ai_payload())
        record = create_job_record("https://jobs.test/1", "# Job", ai_data, user_agent="pytest")

        assert record.id
        assert record.status == JobStatus.SAVED
        assert record.saved_date == record.updated_date == record.metadata.processed_at
        assert record.apply_link == record.source_url
        assert record.metadata.content_length == len("# Job")
        assert record.metadata.user_agent == "pytest"

    def test_ids_are_unique(self) -> None:
        ai_data = JobAIData.model_validate(make_ai_payload())
        ids = {create_job_record("https://jobs.test/1", "x", ai_data).id for _ in range(20)}
        assert len(ids) == 20

    def test_serialized_keys(self) -> None:
        ai_data = JobAIData.model_validate(make_ai_payload())
        data = create_job_record("https://jobs.test/1", "x", ai_data).to_dict()

        assert data["sourceURL"] == "https://jobs.test/1"
        assert data["status"] == "Saved"
        assert data["aiData"]["keySkillsAndTools"]["hardSkills"] == ["Python", "SQL"]
        assert data["metadata"]["rawMarkdown"] == "x"
        assert JobRecord.model_validate(data).source_url == "https://jobs.test/1"

    def test_utc_now_iso_format(self) -> None:
        stamp = utc_now_iso()
        assert stamp.endswith("Z")
        assert len(stamp) == len("2025-01-01T00:00:00.000Z")
