"""Multipart upload handling: sniff, validate and store every file part."""

from __future__ import annotations

import logging
import os
import posixpath
import shutil
from dataclasses import dataclass
from typing import BinaryIO, Optional

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request
from starlette.types import Message

from toolkit.core.config import RANDOM_FILE_NAME_LENGTH, ToolkitConfig
from toolkit.core.errors import (
    FileTypeNotPermittedError,
    InvalidFileNameError,
    NoFileUploadedError,
    UploadReadError,
    UploadTooLargeError,
    UploadWriteError,
)
from toolkit.core.filesystem import create_dir_if_not_exist
from toolkit.core.security import random_string
from toolkit.domain.content_types import SNIFF_LENGTH, detect_content_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    new_file_name: str
    original_file_name: str
    file_size: int


def _capped_request(request: Request, limit: int) -> Request:
    """Wrap request so reading more than limit body bytes raises UploadTooLargeError."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise UploadTooLargeError(limit)

    receive = request.receive
    received = 0

    async def capped_receive() -> Message:
        nonlocal received
        message = await receive()
        if message["type"] == "http.request":
            received += len(message.get("body", b""))
            if received > limit:
                raise UploadTooLargeError(limit)
        return message

    return Request(request.scope, receive=capped_receive)


def _base_name(file_name: str) -> str:
    return posixpath.basename(file_name.replace("\\", "/"))


def _extension(file_name: str) -> str:
    """Suffix from the last dot of the base name; ".env" keeps ".env"."""
    base = _base_name(file_name)
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def _stored_file_name(original: str, rename: bool, uploaded: list[UploadedFile]) -> str:
    if rename:
        return random_string(RANDOM_FILE_NAME_LENGTH) + _extension(original)
    if _base_name(original) != original or original in {".", ".."} or "\x00" in original:
        raise InvalidFileNameError(original, uploaded)
    return original


def _write_part(source: BinaryIO, destination: str) -> int:
    with open(destination, "wb") as out:
        shutil.copyfileobj(source, out)
        return out.tell()


async def _store_part(
    part: UploadFile,
    upload_dir: str,
    rename: bool,
    config: ToolkitConfig,
    uploaded: list[UploadedFile],
) -> UploadedFile:
    original = part.filename or ""
    try:
        head = await part.read(SNIFF_LENGTH)
        await part.seek(0)
    except OSError as exc:
        raise UploadReadError(f"could not read uploaded file {original!r}", uploaded) from exc

    content_type = detect_content_type(head)
    if not config.is_allowed_type(content_type):
        raise FileTypeNotPermittedError(content_type, uploaded)

    new_name = _stored_file_name(original, rename, uploaded)
    destination = os.path.join(upload_dir, new_name)
    try:
        size = await run_in_threadpool(_write_part, part.file, destination)
    except OSError as exc:
        raise UploadWriteError(f"could not store uploaded file {original!r}", uploaded) from exc
    logger.debug("stored upload %r as %s (%d bytes)", original, destination, size)
    return UploadedFile(new_file_name=new_name, original_file_name=original, file_size=size)


async def upload_files(
    request: Request,
    upload_dir: str | os.PathLike[str],
    *,
    rename: bool = True,
    config: Optional[ToolkitConfig] = None,
) -> list[UploadedFile]:
    """
    Store every file part of a multipart request inside upload_dir.

    The request body must not have been read yet (do not combine with
    File()/Form() parameters on the same endpoint). Each part is sniffed from
    its first 512 bytes and checked against config.allowed_file_types. The
    first failure aborts the batch; the raised UploadError carries the files
    already written in `uploaded`.
    """
    config = config or ToolkitConfig()
    limit = config.effective_max_file_size()
    upload_dir = os.fspath(upload_dir)

    try:
        create_dir_if_not_exist(upload_dir)
    except OSError as exc:
        raise UploadWriteError(f"could not create upload directory {upload_dir!r}") from exc

    capped = _capped_request(request, limit)
    try:
        form = await capped.form()
    except (MultiPartException, HTTPException) as exc:
        detail = getattr(exc, "message", None) or getattr(exc, "detail", None) or str(exc)
        raise UploadReadError(f"could not parse multipart body: {detail}") from exc

    uploaded: list[UploadedFile] = []
    try:
        for _field, part in form.multi_items():
            if not isinstance(part, UploadFile) or not part.filename:
                continue
            uploaded.append(await _store_part(part, upload_dir, rename, config, uploaded))
    finally:
        await form.close()
    return uploaded


async def upload_one_file(
    request: Request,
    upload_dir: str | os.PathLike[str],
    *,
    rename: bool = True,
    config: Optional[ToolkitConfig] = None,
) -> UploadedFile:
    """Like upload_files, but return only the first stored file."""
    files = await upload_files(request, upload_dir, rename=rename, config=config)
    if not files:
        raise NoFileUploadedError()
    return files[0]
