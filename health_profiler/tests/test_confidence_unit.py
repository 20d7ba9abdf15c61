from health_profiler.intake.confidence import build_confidence_report, estimate_confidence


def test_text_input_with_all_required_fields() -> None:
    answers = {"age": 42, "smoker": True, "exercise": "rarely", "diet": "high sugar"}
    assert estimate_confidence(answers, [], "text") == 0.85


def test_image_input_is_trusted_less_than_text() -> None:
    answers = {"age": 42, "smoker": True, "exercise": "rarely", "diet": "high sugar"}
    assert estimate_confidence(answers, [], "image") == 0.7
    assert estimate_confidence(answers, [], "image") < estimate_confidence(answers, [], "text")


def test_missing_fields_lower_confidence_and_result_is_clamped() -> None:
    assert estimate_confidence({}, ["age", "smoker", "exercise", "diet"], "text") == 0.25
    assert estimate_confidence({"age": 70}, ["smoker", "exercise", "diet"], "image") == 0.25

    full = {
        "age": 35,
        "smoker": False,
        "exercise": "daily",
        "diet": "balanced",
        "bmi": 24.2,
        "sleep": 7.5,
        "alcohol": "rarely",
    }
    assert estimate_confidence(full, [], "text") == 1.0


def test_report_keeps_ocr_confidence_separate_for_image_input() -> None:
    answers = {"age": 42, "smoker": True, "exercise": "rarely", "diet": "high sugar"}
    report = build_confidence_report(answers, [], "image", ocr_confidence=0.456)
    assert report.extraction == 0.7
    assert report.ocr == 0.46

    clamped = build_confidence_report(answers, [], "image", ocr_confidence=1.7)
    assert clamped.ocr == 1.0


def test_report_ignores_ocr_confidence_for_text_input() -> None:
    report = build_confidence_report({"age": 42}, ["smoker", "exercise", "diet"], "text", ocr_confidence=0.1)
    assert report.ocr is None
    assert report.extraction == 0.4


def test_extraction_confidence_floor_once_completeness_gate_passes() -> None:
    required = ["age", "smoker", "exercise", "diet"]
    for missing_count in range(3):
        present = {name: "x" for name in required[missing_count:]}
        for input_kind in ("text", "image"):
            assert estimate_confidence(present, required[:missing_count], input_kind) >= 0.4
