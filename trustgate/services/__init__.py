"""
Services Layer

Entry points the surrounding application calls: guarded generation and
upload screening.
"""

from trustgate.services.generation_service import GenerationResult, GuardedGenerationService
from trustgate.services.upload_service import ScreenedUpload, UploadScreeningService

__all__ = [
    "GuardedGenerationService",
    "GenerationResult",
    "UploadScreeningService",
    "ScreenedUpload",
]
