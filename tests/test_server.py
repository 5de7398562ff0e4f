"""Tests for the REST API."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from docmap_server import server
from docmap_server.config import Settings
from docmap_server.mapping.errors import OcrError
from docmap_server.mapping.models import BoundingBox, OcrToken


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Test client with previews and uploads kept under tmp_path."""
    monkeypatch.setattr(
        server,
        "settings",
        Settings(
            max_upload_size=1024,
            image_storage_dir=tmp_path / "images",
            upload_dir=tmp_path / "uploads",
        ),
    )
    with TestClient(server.app) as test_client:
        yield test_client


def _upload(client, name: str, content: bytes):
    return client.post("/api/upload", files={"file": (name, content, "application/octet-stream")})


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestUpload:
    def test_txt_upload(self, client, sample_txt_path):
        response = _upload(client, "notes.txt", sample_txt_path.read_bytes())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["filename"] == "notes.txt"
        assert body["fileType"] == ".txt"
        assert body["markdown"].startswith("### MEETING NOTES")
        assert body["sections"][0] == {
            "id": "txt-section-0",
            "originalText": "MEETING NOTES",
            "markdownStart": 0,
            "markdownEnd": len("### MEETING NOTES"),
            "type": "heading",
        }
        assert body["imageUrl"].startswith("/images/")
        assert body["imageUrl"].endswith("-notes.png")

    def test_upload_is_removed_after_conversion(self, client, sample_txt_path, tmp_path):
        _upload(client, "notes.txt", sample_txt_path.read_bytes())
        assert list((tmp_path / "uploads").iterdir()) == []

    def test_docx_has_no_image(self, client, sample_docx_path):
        response = _upload(client, "overview.docx", sample_docx_path.read_bytes())

        assert response.status_code == 200
        body = response.json()
        assert body["imageUrl"] is None
        assert [s["type"] for s in body["sections"]] == ["h1", "paragraph", "h2", "paragraph"]

    def test_missing_file(self, client):
        response = client.post("/api/upload", data={"note": "nothing attached"})
        assert response.status_code == 400
        assert response.json()["detail"] == "No file uploaded"

    def test_unsupported_format(self, client):
        response = _upload(client, "tool.exe", b"MZ")

        assert response.status_code == 400
        assert response.json()["code"] == "UNSUPPORTED_FORMAT"

    def test_file_too_large(self, client, tmp_path):
        response = _upload(client, "big.txt", b"a" * 2048)

        assert response.status_code == 400
        assert response.json()["code"] == "FILE_TOO_LARGE"
        assert list((tmp_path / "uploads").iterdir()) == []

    def test_decode_failure(self, client):
        response = _upload(client, "broken.docx", b"garbage")

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "DECODE_FAILURE"
        assert body["message"] == "File conversion failed"
        assert body["details"].startswith("DOCX conversion failed")


class TestImages:
    def test_serves_stored_preview(self, client, sample_txt_path):
        image_url = _upload(client, "notes.txt", sample_txt_path.read_bytes()).json()["imageUrl"]

        response = client.get(image_url)
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"

    def test_unknown_image(self, client):
        assert client.get("/images/missing.png").status_code == 404

    def test_non_png_name(self, client):
        assert client.get("/images/notes.txt").status_code == 404

    def test_ocr_endpoint(self, client, sample_txt_path):
        image_url = _upload(client, "notes.txt", sample_txt_path.read_bytes()).json()["imageUrl"]
        name = image_url.rsplit("/", 1)[-1]
        tokens = [OcrToken(text="MEETING", bbox=BoundingBox(x0=20, y0=20, x1=90, y1=32))]

        with patch("docmap_server.server.recognize", return_value=tokens):
            response = client.post(f"/api/images/{name}/ocr")

        assert response.status_code == 200
        body = response.json()
        assert body["width"] == 800
        assert body["height"] == 1200
        assert body["tokens"][0]["text"] == "MEETING"
        assert body["tokens"][0]["bbox"] == {"x0": 20, "y0": 20, "x1": 90, "y1": 32}

    def test_ocr_failure_returns_no_tokens(self, client, sample_txt_path):
        image_url = _upload(client, "notes.txt", sample_txt_path.read_bytes()).json()["imageUrl"]
        name = image_url.rsplit("/", 1)[-1]

        with patch("docmap_server.server.recognize", side_effect=OcrError("no engine")):
            response = client.post(f"/api/images/{name}/ocr")

        assert response.status_code == 200
        assert response.json()["tokens"] == []


class TestHighlights:
    def test_maps_sections_to_display_space(self, client):
        payload = {
            "sections": [
                {
                    "id": "pdf-section-0",
                    "originalText": "Revenue Growth",
                    "markdownStart": 0,
                    "markdownEnd": 14,
                    "type": "paragraph",
                }
            ],
            "tokens": [
                {"text": "Revenue", "bbox": {"x0": 100, "y0": 200, "x1": 300, "y1": 240}},
                {"text": "Other", "bbox": {"x0": 0, "y0": 0, "x1": 10, "y1": 10}},
            ],
            "sourceImageSize": {"width": 1000, "height": 1000},
            "displaySize": {"width": 600, "height": 600},
        }

        response = client.post("/api/highlights", json=payload)

        assert response.status_code == 200
        highlights = response.json()["highlights"]
        assert len(highlights) == 1
        assert highlights[0]["id"] == "pdf-section-0-0"
        assert highlights[0]["sectionId"] == "pdf-section-0"
        assert highlights[0]["x"] == pytest.approx(60)
        assert highlights[0]["width"] == pytest.approx(120)

    def test_invalid_section_range_rejected(self, client):
        payload = {
            "sections": [
                {
                    "id": "s",
                    "originalText": "x",
                    "markdownStart": 5,
                    "markdownEnd": 5,
                    "type": "paragraph",
                }
            ],
            "tokens": [],
            "sourceImageSize": {"width": 10, "height": 10},
            "displaySize": {"width": 10, "height": 10},
        }
        assert client.post("/api/highlights", json=payload).status_code == 422
