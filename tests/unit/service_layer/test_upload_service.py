"""
Unit Tests for UploadScreeningService
"""

from unittest.mock import MagicMock

import pytest

from tests.test_fixtures.upload_factory import UploadTestFactory
from trustgate.core.exceptions import RateLimitExceededError, SignatureMismatchError
from trustgate.services import ScreenedUpload, UploadScreeningService
from trustgate.validators.file_validator import FileSecurityValidator, MalwareScanner


@pytest.fixture
def uploads(settings):
    return UploadScreeningService(settings)


@pytest.mark.unit
class TestUploadScreening:
    async def test_accepts_valid_upload(self, uploads, actor):
        content = UploadTestFactory.docx()

        result = await uploads.screen(actor, content, "docx")

        assert result == ScreenedUpload(file_type="docx", size=len(content), malware_scanned=False)

    async def test_charges_file_budget(self, uploads, actor):
        await uploads.screen(actor, UploadTestFactory.pdf(), "pdf")

        status = await actor.rate_limiter.status()
        assert status.file_processing.used == 1
        assert status.api_calls.used == 0

    async def test_rejected_upload_still_charged(self, uploads, actor):
        with pytest.raises(SignatureMismatchError):
            await uploads.screen(actor, b"not a pdf", "pdf")

        assert (await actor.rate_limiter.status()).file_processing.used == 1

    async def test_budget_exhausted(self, uploads, actor):
        for _ in range(2):
            await uploads.screen(actor, UploadTestFactory.pdf(), "pdf")

        with pytest.raises(RateLimitExceededError) as exc_info:
            await uploads.screen(actor, UploadTestFactory.pdf(), "pdf")

        assert exc_info.value.details["kind"] == "file_processing"

    async def test_scanned_with_path(self, settings, actor, tmp_path):
        scanner = MagicMock(spec=MalwareScanner)
        scanner.is_available.return_value = True
        uploads = UploadScreeningService(settings, FileSecurityValidator(settings, scanner=scanner))
        path = tmp_path / "notes.pdf"
        path.write_bytes(UploadTestFactory.pdf())

        result = await uploads.screen(actor, path.read_bytes(), "pdf", path=path)

        assert result.malware_scanned is True
        scanner.scan.assert_called_once_with(path)
