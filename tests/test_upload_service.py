"""
Upload tests run through a tiny FastAPI app so the multipart body is parsed
exactly as it would be behind a real endpoint.
"""
from __future__ import annotations

from dataclasses import asdict

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from toolkit.core.config import RANDOM_FILE_NAME_LENGTH, ToolkitConfig
from toolkit.core.errors import UploadError
from toolkit.core.security import RANDOM_STRING_SOURCE
from toolkit.domain.content_types import JPEG_MAGIC, PNG_MAGIC
from toolkit.services.upload_service import upload_files, upload_one_file

PNG_BYTES = PNG_MAGIC + b"\x00\x00\x00\rIHDR" + b"\x00" * 64
JPEG_BYTES = JPEG_MAGIC + b"\xE0\x00\x10JFIF" + b"\x00" * 64


def _make_client(upload_dir, config: ToolkitConfig | None = None) -> TestClient:
    app = FastAPI()

    def _failure(exc: UploadError) -> JSONResponse:
        return JSONResponse(
            {
                "error": type(exc).__name__,
                "message": exc.message,
                "uploaded": [asdict(f) for f in exc.uploaded],
            },
            status_code=400,
        )

    @app.post("/upload")
    async def upload(request: Request, rename: bool = True):
        try:
            files = await upload_files(request, upload_dir, rename=rename, config=config)
        except UploadError as exc:
            return _failure(exc)
        return {"files": [asdict(f) for f in files]}

    @app.post("/upload-one")
    async def upload_one(request: Request):
        try:
            stored = await upload_one_file(request, upload_dir, config=config)
        except UploadError as exc:
            return _failure(exc)
        return asdict(stored)

    return TestClient(app)


def test_allowed_png_is_stored(tmp_path):
    target = tmp_path / "uploads"
    client = _make_client(target, ToolkitConfig(allowed_file_types=["image/png"]))

    resp = client.post("/upload", files={"file": ("photo.png", PNG_BYTES, "image/png")})

    assert resp.status_code == 200
    files = resp.json()["files"]
    assert len(files) == 1
    stored = target / files[0]["new_file_name"]
    assert stored.is_file()
    assert stored.stat().st_size == len(PNG_BYTES) == files[0]["file_size"]
    assert stored.read_bytes() == PNG_BYTES
    assert files[0]["original_file_name"] == "photo.png"


def test_disallowed_type_is_rejected(tmp_path):
    target = tmp_path / "uploads"
    client = _make_client(target, ToolkitConfig(allowed_file_types=["image/jpeg"]))

    resp = client.post("/upload", files={"file": ("photo.png", PNG_BYTES, "image/png")})

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "FileTypeNotPermittedError"
    assert body["message"] == "the uploaded file type is not permitted"
    assert body["uploaded"] == []
    assert list(target.iterdir()) == []


def test_sniffing_ignores_client_content_type(tmp_path):
    client = _make_client(tmp_path, ToolkitConfig(allowed_file_types=["image/png"]))

    resp = client.post("/upload", files={"file": ("fake.png", b"plain text", "image/png")})

    assert resp.json()["error"] == "FileTypeNotPermittedError"


def test_batch_stops_at_first_rejection_and_keeps_earlier_files(tmp_path):
    client = _make_client(tmp_path, ToolkitConfig(allowed_file_types=["image/png"]))

    resp = client.post(
        "/upload",
        files=[
            ("files", ("first.png", PNG_BYTES, "image/png")),
            ("files", ("second.jpg", JPEG_BYTES, "image/jpeg")),
            ("files", ("third.png", PNG_BYTES, "image/png")),
        ],
    )

    body = resp.json()
    assert body["error"] == "FileTypeNotPermittedError"
    assert [f["original_file_name"] for f in body["uploaded"]] == ["first.png"]
    assert len(list(tmp_path.iterdir())) == 1


def test_rename_keeps_extension(tmp_path):
    client = _make_client(tmp_path)

    resp = client.post("/upload", files={"file": ("holiday.photo.png", PNG_BYTES, "image/png")})

    stored = resp.json()["files"][0]
    name = stored["new_file_name"]
    assert name != "holiday.photo.png"
    assert name.endswith(".png")
    stem = name[: -len(".png")]
    assert len(stem) == RANDOM_FILE_NAME_LENGTH
    assert set(stem) <= set(RANDOM_STRING_SOURCE)


def test_without_rename_keeps_original_name(tmp_path):
    client = _make_client(tmp_path)

    resp = client.post("/upload?rename=false", files={"file": ("report.png", PNG_BYTES, "image/png")})

    stored = resp.json()["files"][0]
    assert stored["new_file_name"] == "report.png"
    assert (tmp_path / "report.png").read_bytes() == PNG_BYTES


def test_without_rename_rejects_paths(tmp_path):
    target = tmp_path / "uploads"
    client = _make_client(target)

    resp = client.post("/upload?rename=false", files={"file": ("../escape.png", PNG_BYTES, "image/png")})

    assert resp.json()["error"] == "InvalidFileNameError"
    assert not (tmp_path / "escape.png").exists()


def test_every_field_and_part_is_stored(tmp_path):
    client = _make_client(tmp_path)

    resp = client.post(
        "/upload",
        files=[
            ("avatar", ("a.png", PNG_BYTES, "image/png")),
            ("gallery", ("b.jpg", JPEG_BYTES, "image/jpeg")),
            ("gallery", ("c.txt", b"hello", "text/plain")),
        ],
        data={"caption": "not a file"},
    )

    files = resp.json()["files"]
    assert sorted(f["original_file_name"] for f in files) == ["a.png", "b.jpg", "c.txt"]
    assert len(list(tmp_path.iterdir())) == 3


def test_upload_too_large(tmp_path):
    client = _make_client(tmp_path, ToolkitConfig(max_file_size=64))

    resp = client.post("/upload", files={"file": ("big.png", PNG_BYTES * 4, "image/png")})

    body = resp.json()
    assert body["error"] == "UploadTooLargeError"
    assert body["message"] == "the uploaded file is too big"


def test_upload_dir_is_created(tmp_path):
    target = tmp_path / "deep" / "nested"
    client = _make_client(target)

    client.post("/upload", files={"file": ("a.png", PNG_BYTES, "image/png")})

    assert target.is_dir()


def test_upload_one_file_returns_first(tmp_path):
    client = _make_client(tmp_path)

    resp = client.post(
        "/upload-one",
        files=[
            ("file", ("one.png", PNG_BYTES, "image/png")),
            ("file", ("two.png", PNG_BYTES, "image/png")),
        ],
    )

    assert resp.json()["original_file_name"] == "one.png"


def test_upload_one_file_without_files(tmp_path):
    client = _make_client(tmp_path)

    resp = client.post("/upload-one", data={"name": "value"})

    assert resp.json()["error"] == "NoFileUploadedError"


@pytest.mark.parametrize("config", [None, ToolkitConfig()])
def test_config_is_never_mutated(tmp_path, config):
    client = _make_client(tmp_path, config)
    client.post("/upload", files={"file": ("a.png", PNG_BYTES, "image/png")})
    if config is not None:
        assert config.max_file_size is None


def test_rename_keeps_dotfile_extension(tmp_path):
    client = _make_client(tmp_path)

    resp = client.post("/upload", files={"file": (".env", b"KEY=value\n", "text/plain")})

    name = resp.json()["files"][0]["new_file_name"]
    assert name.endswith(".env")
    assert len(name) == RANDOM_FILE_NAME_LENGTH + len(".env")
