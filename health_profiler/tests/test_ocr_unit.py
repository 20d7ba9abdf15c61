import subprocess
from types import SimpleNamespace

import pytest

from health_profiler.ocr import (
    MockOCRProvider,
    OCRError,
    TesseractCliProvider,
    parse_tesseract_tsv,
    tesseract_available,
)
from health_profiler.ocr import tesseract_cli

_HEADER = "level\tpage_num\tblock_num\tpar_num\tline_num\tword_num\tleft\ttop\twidth\theight\tconf\ttext"


def _word(line: int, word: int, conf: str, text: str) -> str:
    return f"5\t1\t1\t1\t{line}\t{word}\t0\t0\t10\t10\t{conf}\t{text}"


_SURVEY_TSV = "\n".join(
    [
        _HEADER,
        "1\t1\t0\t0\t0\t0\t0\t0\t640\t480\t-1\t",
        _word(1, 1, "90", "Age:"),
        _word(1, 2, "94", "42"),
        _word(2, 1, "80", "Smoker:"),
        _word(2, 2, "86", "yes"),
        _word(3, 1, "-1", ""),
    ]
)


def _fake_bin(tmp_path) -> str:
    bin_path = tmp_path / "tesseract"
    bin_path.write_text("#!/bin/sh\n", encoding="utf-8")
    return str(bin_path)


def test_parse_tsv_groups_words_into_lines_and_averages_confidence() -> None:
    result = parse_tesseract_tsv(_SURVEY_TSV)
    assert result.text == "Age: 42\nSmoker: yes"
    assert result.confidence == pytest.approx(0.875)


def test_parse_tsv_without_words_is_empty() -> None:
    result = parse_tesseract_tsv(_HEADER)
    assert result.text == ""
    assert result.confidence == 0.0


def test_tesseract_available_reports_reason(tmp_path) -> None:
    assert tesseract_available("") == (False, "missing HRP_TESSERACT_BIN")
    ok, reason = tesseract_available(str(tmp_path / "no-such-binary"))
    assert ok is False
    assert "not found" in reason
    assert tesseract_available(_fake_bin(tmp_path)) == (True, "")


def test_provider_runs_cli_and_parses_output(monkeypatch, tmp_path) -> None:
    seen: dict = {}

    def fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        seen["input"] = kwargs["input"]
        seen["timeout"] = kwargs["timeout"]
        return SimpleNamespace(returncode=0, stdout=_SURVEY_TSV.encode("utf-8"), stderr=b"")

    monkeypatch.setattr(tesseract_cli.subprocess, "run", fake_run)
    provider = TesseractCliProvider(_fake_bin(tmp_path), language="deu")
    result = provider.recognize(b"\x89PNG", timeout_sec=5)

    assert result.text.startswith("Age: 42")
    assert seen["cmd"][1:] == ["stdin", "stdout", "-l", "deu", "--psm", "6", "tsv"]
    assert seen["input"] == b"\x89PNG"
    assert seen["timeout"] == 5


def test_provider_missing_binary(tmp_path) -> None:
    provider = TesseractCliProvider(str(tmp_path / "absent"))
    with pytest.raises(OCRError) as excinfo:
        provider.recognize(b"img")
    assert excinfo.value.code == "TESSERACT_BIN_MISSING"
    assert excinfo.value.provider_name == "tesseract"
    assert "tesseract not found" in excinfo.value.message


def test_provider_empty_input(tmp_path) -> None:
    with pytest.raises(OCRError) as excinfo:
        TesseractCliProvider(_fake_bin(tmp_path)).recognize(b"")
    assert excinfo.value.code == "OCR_EMPTY_INPUT"


def test_provider_timeout_and_exit_codes(monkeypatch, tmp_path) -> None:
    provider = TesseractCliProvider(_fake_bin(tmp_path))

    def timeout_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(tesseract_cli.subprocess, "run", timeout_run)
    with pytest.raises(OCRError) as excinfo:
        provider.recognize(b"img", timeout_sec=1)
    assert excinfo.value.code == "TESSERACT_TIMEOUT"

    monkeypatch.setattr(
        tesseract_cli.subprocess,
        "run",
        lambda cmd, **kwargs: SimpleNamespace(returncode=1, stdout=b"", stderr=b"Error in pixReadMem"),
    )
    with pytest.raises(OCRError) as excinfo:
        provider.recognize(b"img")
    assert excinfo.value.code == "TESSERACT_EXIT_NONZERO"
    assert "pixReadMem" in excinfo.value.message

    monkeypatch.setattr(
        tesseract_cli.subprocess,
        "run",
        lambda cmd, **kwargs: SimpleNamespace(returncode=0, stdout=_HEADER.encode("utf-8"), stderr=b""),
    )
    with pytest.raises(OCRError) as excinfo:
        provider.recognize(b"img")
    assert excinfo.value.code == "TESSERACT_EMPTY_OUTPUT"


def test_mock_provider_counts_calls() -> None:
    provider = MockOCRProvider("Age: 30", confidence=0.5)
    result = provider.recognize(b"anything")
    assert result.text == "Age: 30"
    assert result.confidence == 0.5
    assert provider.calls == 1
    assert provider.name() == "mock"
