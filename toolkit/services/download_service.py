"""Static file downloads forced to open as attachments."""

from __future__ import annotations

import logging
import os
import stat

from starlette.requests import Request
from starlette.responses import FileResponse, PlainTextResponse, Response
from starlette.staticfiles import NotModifiedResponse, StaticFiles

logger = logging.getLogger(__name__)


def download_static_file(request: Request, directory: str | os.PathLike[str], filename: str, display_name: str) -> Response:
    """
    Send directory/filename with `Content-Disposition: attachment`.

    Lookup and conditional requests go through Starlette's StaticFiles; range
    requests, Content-Length and Last-Modified come from FileResponse. ASCII
    display names are sent as `filename="..."`, others as RFC 5987
    `filename*=utf-8''...`. A missing file, or a filename pointing outside
    directory, answers 404.
    """
    static = StaticFiles(directory=os.fspath(directory), check_dir=False)
    path, stat_result = static.lookup_path(filename)
    if stat_result is None or not stat.S_ISREG(stat_result.st_mode):
        logger.debug("download of %r from %s: not found", filename, directory)
        return PlainTextResponse("Not Found", status_code=404)

    if display_name.isascii():
        quoted = display_name.replace("\\", "\\\\").replace('"', '\\"')
        response = FileResponse(
            path,
            stat_result=stat_result,
            headers={"Content-Disposition": f'attachment; filename="{quoted}"'},
        )
    else:
        response = FileResponse(path, stat_result=stat_result, filename=display_name)
    if request.method in ("GET", "HEAD") and static.is_not_modified(response.headers, request.headers):
        return NotModifiedResponse(response.headers)
    return response
