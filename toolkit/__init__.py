"""Helpers for FastAPI/Starlette handlers: uploads, downloads, slugs and JSON envelopes."""
from toolkit.core.config import ToolkitConfig
from toolkit.core.errors import ToolkitError
from toolkit.services.json_service import JSONResponseEnvelope
from toolkit.services.upload_service import UploadedFile
from toolkit.tools import Toolkit

__all__ = [
    "JSONResponseEnvelope",
    "Toolkit",
    "ToolkitConfig",
    "ToolkitError",
    "UploadedFile",
]
