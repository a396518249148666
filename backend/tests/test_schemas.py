"""
Tests for Pydantic schemas validation.
"""
import uuid
import pytest
from datetime import datetime, timezone

from pydantic import ValidationError

from filedrop.models.file_record import Exposure, FileStatus
from filedrop.schemas import (
    ConfirmUploadRequest,
    FileRecordResponse,
    UploadRequest,
    format_errors,
)


def validation_details(schema, payload) -> list:
    """Validate a payload that must fail and return the client-facing messages."""
    with pytest.raises(ValidationError) as exc_info:
        schema.model_validate(payload)
    return format_errors(exc_info.value.errors())


class TestUploadRequest:
    """Tests for the presign request schema."""
    
    def test_valid_camel_case_payload(self):
        """Test the wire format is accepted."""
        request = UploadRequest.model_validate({
            "fileName": "photo.png",
            "originalName": "Holiday photo.png",
            "size": 204800
        })
        assert request.file_name == "photo.png"
        assert request.original_name == "Holiday photo.png"
        assert request.size == 204800
        assert request.exposure is None
    
    def test_exposure_is_parsed(self):
        """Test explicit exposure."""
        request = UploadRequest.model_validate({
            "fileName": "a.png",
            "originalName": "a.png",
            "size": 1,
            "exposure": "private"
        })
        assert request.exposure == Exposure.PRIVATE
    
    def test_empty_file_name_rejected(self):
        """Test empty fileName raises with a field-level message."""
        details = validation_details(UploadRequest, {"fileName": "", "originalName": "a.png", "size": 10})
        assert details == ["fileName: File name is required"]
    
    @pytest.mark.parametrize("size", [0, -1, -2048])
    def test_non_positive_size_rejected(self, size):
        """Test zero and negative sizes are rejected."""
        details = validation_details(UploadRequest, {"fileName": "a.png", "originalName": "a.png", "size": size})
        assert details == ["size: Size must be a positive number"]
    
    @pytest.mark.parametrize("size", ["10", 1.5, True])
    def test_size_must_be_json_integer(self, size):
        """Test numeric strings, fractions and booleans are not coerced into a size."""
        details = validation_details(UploadRequest, {"fileName": "a.png", "originalName": "a.png", "size": size})
        assert len(details) == 1
        assert details[0].startswith("size: Input should be a valid integer")
    
    def test_whitespace_names_count_as_present(self):
        """Test only empty names are rejected."""
        request = UploadRequest.model_validate({"fileName": " ", "originalName": " ", "size": 1})
        assert request.file_name == " "
        assert request.original_name == " "
    
    def test_one_message_per_violation(self):
        """Test every violated constraint is reported."""
        details = validation_details(UploadRequest, {"fileName": "", "originalName": "", "size": 0})
        assert len(details) == 3
        assert "fileName: File name is required" in details
        assert "originalName: Original name is required" in details
        assert "size: Size must be a positive number" in details
    
    def test_missing_fields_rejected(self):
        """Test an empty body reports every required field."""
        details = validation_details(UploadRequest, {})
        assert len(details) == 3
    
    def test_unknown_exposure_rejected(self):
        """Test exposure must be public or private."""
        with pytest.raises(ValidationError):
            UploadRequest.model_validate({
                "fileName": "a.png",
                "originalName": "a.png",
                "size": 1,
                "exposure": "secret"
            })


class TestConfirmUploadRequest:
    """Tests for the confirm request schema."""
    
    def test_valid_file_id(self):
        """Test a UUID is accepted."""
        file_id = uuid.uuid4()
        request = ConfirmUploadRequest.model_validate({"fileId": str(file_id), "contentType": "image/png"})
        assert request.file_id == file_id
        assert request.content_type == "image/png"
    
    @pytest.mark.parametrize("file_id", ["not-a-uuid", "", 42, None])
    def test_invalid_file_id(self, file_id):
        """Test anything that is not a UUID is rejected."""
        details = validation_details(ConfirmUploadRequest, {"fileId": file_id})
        assert details == ["fileId: Invalid file ID"]


class TestFileRecordResponse:
    """Tests for the record response schema."""
    
    def test_serializes_camel_case(self):
        """Test records go out with the documented keys."""
        now = datetime.now(timezone.utc)
        response = FileRecordResponse(
            id="test-uuid",
            file_name="1700000000000-a.png",
            url=None,
            size=10,
            bucket="uploads",
            original_name="a.png",
            status=FileStatus.PENDING,
            exposure=Exposure.PRIVATE,
            created_at=now
        )
        data = response.model_dump(mode="json", by_alias=True)
        
        assert set(data) == {
            "id", "fileName", "url", "size", "bucket", "originalName",
            "status", "exposure", "contentType", "createdAt", "uploadedAt"
        }
        assert data["status"] == "pending"
        assert data["exposure"] == "private"


def test_format_errors_drops_request_location():
    """Test FastAPI's body/query prefixes are not shown to clients."""
    details = format_errors([
        {"loc": ("body", "fileName"), "msg": "Value error, File name is required"},
        {"loc": ("query", "status"), "msg": "Input should be 'pending', 'uploaded' or 'expired'"},
        {"loc": (), "msg": "JSON decode error"},
    ])
    assert details == [
        "fileName: File name is required",
        "status: Input should be 'pending', 'uploaded' or 'expired'",
        "JSON decode error",
    ]
