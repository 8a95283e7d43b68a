"""Toolkit facade: one object holding the limits, exposing every helper."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from starlette.requests import Request
from starlette.responses import Response

from toolkit.core.config import DEFAULT_DIR_MODE, ToolkitConfig
from toolkit.core.filesystem import create_dir_if_not_exist
from toolkit.core.security import random_string
from toolkit.domain.slugs import slugify
from toolkit.services.download_service import download_static_file
from toolkit.services.json_service import error_json, read_json, write_json
from toolkit.services.upload_service import UploadedFile, upload_files, upload_one_file


class Toolkit:
    """
    Convenience wrapper around the module level helpers.

    Share one instance across requests; it never writes to its config.
    """

    def __init__(self, config: Optional[ToolkitConfig] = None) -> None:
        self.config = config or ToolkitConfig()

    def random_string(self, n: int) -> str:
        return random_string(n)

    def create_dir_if_not_exist(self, path: str | os.PathLike[str], mode: int = DEFAULT_DIR_MODE) -> None:
        create_dir_if_not_exist(path, mode)

    def slugify(self, value: str | None) -> str:
        return slugify(value)

    async def upload_files(self, request: Request, upload_dir: str | os.PathLike[str], rename: bool = True) -> list[UploadedFile]:
        return await upload_files(request, upload_dir, rename=rename, config=self.config)

    async def upload_one_file(self, request: Request, upload_dir: str | os.PathLike[str], rename: bool = True) -> UploadedFile:
        return await upload_one_file(request, upload_dir, rename=rename, config=self.config)

    def download_static_file(self, request: Request, directory: str | os.PathLike[str], filename: str, display_name: str) -> Response:
        return download_static_file(request, directory, filename, display_name)

    async def read_json(
        self,
        request: Request,
        target: Any = None,
        *,
        max_bytes: Optional[int] = None,
        allow_unknown_fields: Optional[bool] = None,
    ) -> Any:
        return await read_json(
            request,
            target,
            max_bytes=max_bytes,
            allow_unknown_fields=allow_unknown_fields,
            config=self.config,
        )

    def write_json(
        self,
        payload: Any,
        status_code: int = 200,
        headers: Mapping[str, str] | Iterable[Mapping[str, str]] | None = None,
    ) -> Response:
        return write_json(payload, status_code, headers)

    def error_json(self, exc: BaseException | str, status_code: int = 400) -> Response:
        return error_json(exc, status_code)
