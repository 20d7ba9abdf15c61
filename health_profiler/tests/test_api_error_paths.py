from dataclasses import replace

from health_profiler.api.main import app
from health_profiler.internal_core.config import load_config
from health_profiler.ocr import MockOCRProvider, OCRError, OCRProvider, OCRResult


class _FailingOCRProvider(OCRProvider):
    def recognize(self, image_bytes: bytes, timeout_sec: int = 60) -> OCRResult:
        raise OCRError("TESSERACT_EXIT_NONZERO", "unsupported image format", self.name())

    def name(self) -> str:
        return "failing"


def test_analyze_requires_exactly_one_input(client) -> None:
    resp = client.post("/api/analyze", json={})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Provide one of: text, data, or an image upload."

    resp = client.post("/api/analyze", json={"text": "   "})
    assert resp.status_code == 400

    resp = client.post("/api/analyze", json={"text": "Age: 30", "data": {"age": 30}})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Provide only one of: text or data."


def test_analyze_rejects_unknown_request_fields(client) -> None:
    resp = client.post("/api/analyze", json={"text": "Age: 30", "image": "x"})
    assert resp.status_code == 422


def test_analyze_rejects_malformed_json_body(client) -> None:
    resp = client.post(
        "/api/analyze",
        content=b'{"text": "Age: 30"',
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 422


def test_out_of_range_age_is_invalid_data(client) -> None:
    resp = client.post(
        "/api/analyze",
        json={"text": "Age: 150\nSmoker: no\nExercise: daily\nDiet: balanced"},
    )
    assert resp.status_code == 400
    assert resp.json() == {
        "status": "invalid_data",
        "reason": '"age" must be less than or equal to 120',
        "field": "age",
    }


def test_sparse_text_is_incomplete_profile(client) -> None:
    resp = client.post("/api/analyze", json={"text": "Age: 30"})
    assert resp.status_code == 400
    assert resp.json() == {
        "status": "incomplete_profile",
        "reason": ">50% fields missing",
        "missing_fields": ["smoker", "exercise", "diet"],
        "confidence": 0.4,
    }


def test_unknown_structured_key_is_invalid_data(client) -> None:
    data = {"age": 40, "smoker": False, "exercise": "daily", "diet": "balanced", "notes": "x"}
    resp = client.post("/api/analyze", json={"data": data})
    assert resp.status_code == 400
    assert resp.json() == {
        "status": "invalid_data",
        "reason": '"notes" is not allowed',
        "field": "notes",
    }


def test_image_upload_rejects_non_image_filename(client) -> None:
    app.state.ocr_provider = MockOCRProvider("Age: 30")
    resp = client.post("/api/analyze/image", params={"filename": "survey.pdf"}, content=b"%PDF")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Only image files are accepted."


def test_image_upload_requires_filename(client) -> None:
    resp = client.post("/api/analyze/image", content=b"img")
    assert resp.status_code == 422


def test_image_upload_rejects_empty_body(client) -> None:
    provider = MockOCRProvider("Age: 30")
    app.state.ocr_provider = provider
    resp = client.post("/api/analyze/image", params={"filename": "survey.png"}, content=b"")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Uploaded file is empty."
    assert provider.calls == 0


def test_image_upload_enforces_size_limit(client) -> None:
    app.state.config = replace(load_config(), HRP_MAX_UPLOAD_BYTES=4)
    app.state.ocr_provider = MockOCRProvider("Age: 30")
    resp = client.post("/api/ocr", params={"filename": "survey.png"}, content=b"0123456789")
    assert resp.status_code == 413
    assert resp.json()["detail"] == "Uploaded file exceeds 4 byte limit."


def test_ocr_failure_is_server_error(client) -> None:
    app.state.ocr_provider = _FailingOCRProvider()
    resp = client.post("/api/analyze/image", params={"filename": "survey.png"}, content=b"img")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "OCR failed: unsupported image format"


def test_oversized_age_is_invalid_data_for_text_and_structured_input(client) -> None:
    text = "Age: " + "9" * 400 + "\nSmoker: no\nExercise: daily\nDiet: balanced"
    data = {"age": 10**400, "smoker": False, "exercise": "daily", "diet": "balanced"}
    expected = {
        "status": "invalid_data",
        "reason": '"age" must be less than or equal to 120',
        "field": "age",
    }

    resp = client.post("/api/analyze", json={"text": text})
    assert resp.status_code == 400
    assert resp.json() == expected

    resp = client.post("/api/analyze", json={"data": data})
    assert resp.status_code == 400
    assert resp.json() == expected
