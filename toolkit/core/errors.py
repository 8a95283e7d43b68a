"""Exception hierarchy raised by toolkit helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from toolkit.services.upload_service import UploadedFile


class ToolkitError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Uploads ---------------------------------------------------------------------


class UploadError(ToolkitError):
    """Upload aborted; `uploaded` lists the files stored before the failure."""

    def __init__(self, message: str, uploaded: Optional[list["UploadedFile"]] = None):
        super().__init__(message)
        self.uploaded = list(uploaded or [])


class UploadTooLargeError(UploadError):
    def __init__(self, limit: int, uploaded=None):
        super().__init__("the uploaded file is too big", uploaded)
        self.limit = limit


class FileTypeNotPermittedError(UploadError):
    def __init__(self, content_type: str, uploaded=None):
        super().__init__("the uploaded file type is not permitted", uploaded)
        self.content_type = content_type


class NoFileUploadedError(UploadError):
    def __init__(self):
        super().__init__("no file was uploaded")


class InvalidFileNameError(UploadError):
    def __init__(self, file_name: str, uploaded=None):
        super().__init__(f"invalid file name {file_name!r}", uploaded)
        self.file_name = file_name


class UploadReadError(UploadError):
    """The multipart body or one of its parts could not be read."""


class UploadWriteError(UploadError):
    """The destination file could not be created or written."""


# Slugs -----------------------------------------------------------------------


class SlugError(ToolkitError):
    """Base exception for slugify."""


class EmptySlugInputError(SlugError):
    def __init__(self):
        super().__init__("empty string not permitted")


class EmptySlugResultError(SlugError):
    def __init__(self):
        super().__init__("after removing characters, slug is zero length")


# JSON ------------------------------------------------------------------------


class JSONDecodeFailure(ToolkitError):
    """Base class for every way a JSON request body can be rejected."""


class JSONSyntaxError(JSONDecodeFailure):
    def __init__(self, offset: int):
        super().__init__(f"body contains badly-formed JSON (at character {offset})")
        self.offset = offset


class JSONUnexpectedEndError(JSONDecodeFailure):
    def __init__(self):
        super().__init__("body contains badly-formed JSON")


class JSONTypeMismatchError(JSONDecodeFailure):
    def __init__(self, field: Optional[str] = None, offset: int = 0):
        if field:
            message = f'body contains incorrect JSON type for field "{field}"'
        else:
            message = f"body contains incorrect JSON type (at character {offset})"
        super().__init__(message)
        self.field = field
        self.offset = offset


class JSONEmptyBodyError(JSONDecodeFailure):
    def __init__(self):
        super().__init__("body must not be empty")


class JSONUnknownFieldError(JSONDecodeFailure):
    def __init__(self, name: str):
        super().__init__(f'body contains unknown key "{name}"')
        self.name = name


class JSONBodyTooLargeError(JSONDecodeFailure):
    def __init__(self, limit: int):
        super().__init__(f"body must not be larger than {limit} bytes")
        self.limit = limit


class JSONMultipleValuesError(JSONDecodeFailure):
    def __init__(self):
        super().__init__("body must contain only one JSON value")


class JSONTargetError(JSONDecodeFailure):
    """The decode target itself cannot receive JSON (not a schema type)."""

    def __init__(self, detail: str):
        super().__init__(f"error unmarshalling JSON: {detail}")
        self.detail = detail


class JSONUnclassifiedError(JSONDecodeFailure):
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class JSONEncodeError(ToolkitError):
    """Payload could not be serialized to JSON."""
