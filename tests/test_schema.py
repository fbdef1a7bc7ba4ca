"""
Tests for submission validation.
"""

import pytest
from resumestore.schema import validate_submission


class TestValidateSubmission:
    """Test submission shape checks."""

    @pytest.fixture
    def valid_submission(self):
        return {"hash": "abc123", "raw_result": "{'Skills': {'Python': 90}}", "job_id": 1, "owner_id": 10}

    def test_valid_submission(self, valid_submission):
        assert validate_submission(valid_submission) == []

    def test_result_may_be_null_or_missing(self, valid_submission):
        valid_submission["raw_result"] = None
        assert validate_submission(valid_submission) == []

        del valid_submission["raw_result"]
        assert validate_submission(valid_submission) == []

    def test_missing_hash(self, valid_submission):
        del valid_submission["hash"]
        errors = validate_submission(valid_submission)
        assert any("hash" in err for err in errors)

    def test_blank_hash(self, valid_submission):
        valid_submission["hash"] = "   "
        assert validate_submission(valid_submission) == ["Field 'hash' must be a non-empty string"]

    @pytest.mark.parametrize("value", ["1", 0, -3, 1.5, True, None])
    def test_bad_ids(self, valid_submission, value):
        valid_submission["job_id"] = value
        errors = validate_submission(valid_submission)
        assert errors == ["Field 'job_id' must be a positive integer"]

    def test_missing_ids(self):
        errors = validate_submission({"hash": "abc"})
        assert "Missing required field: job_id" in errors
        assert "Missing required field: owner_id" in errors

    def test_result_must_be_string(self, valid_submission):
        valid_submission["raw_result"] = {"Skills": {}}
        assert validate_submission(valid_submission) == ["Field 'raw_result' must be a string or null"]
