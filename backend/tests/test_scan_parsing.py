"""Tests for ScanResult validation and the extractor/validator pair."""

import json

import pytest

from imei_scanner.services.ai.common.json_tools import extract_json_candidate
from imei_scanner.services.ai.vision.contracts import (
    SOFT_PARSE_MESSAGE,
    DeviceRecord,
    ScanHardError,
    ScanResult,
    ScanSoftError,
    ScanSuccess,
)
from imei_scanner.services.ai.vision.parsing import SoftParseError, parse_scan_result
from imei_scanner.services.ai.vision.prompt import SCAN_PROMPT, build_scan_prompt

SAMPLE = ScanResult(
    description="two boxes",
    device_count=2,
    devices=[
        DeviceRecord(position="left", imei="351756051523999"),
        DeviceRecord(position="right", imei="490154203237518"),
    ],
)


@pytest.mark.parametrize(
    "wrap",
    [
        lambda s: f"```json\n{s}\n```",
        lambda s: f"```\n{s}\n```",
        lambda s: f"Here is what I found: {s} Let me know if you need more.",
        lambda s: s,
    ],
    ids=["fenced-json", "fenced", "inline-prose", "bare"],
)
def test_extract_then_validate_recovers_result(wrap):
    text = wrap(SAMPLE.model_dump_json())
    assert parse_scan_result(extract_json_candidate(text)) == SAMPLE


@pytest.mark.parametrize(
    "candidate",
    [
        "",
        "Sorry, I cannot read this image clearly.",
        '{"description": "x", "deviceCount": 1}',
        '{"description": "x", "deviceCount": "two", "devices": []}',
        '{"description": "x", "deviceCount": true, "devices": []}',
        '{"description": "x", "deviceCount": 1.5, "devices": []}',
        '{"description": "x", "deviceCount": -1, "devices": []}',
        '{"description": "x", "deviceCount": 1, "devices": [{"position": "left"}]}',
        '{"description": "x", "deviceCount": 1, "devices": "none"}',
        "[1, 2, 3]",
        '{"description": "x", "deviceCount": 1, "devices": [',
    ],
)
def test_invalid_candidates_are_soft_parse_errors(candidate):
    result = parse_scan_result(candidate)
    assert isinstance(result, SoftParseError)
    assert result.reason


def test_numeric_imei_coerced_to_string():
    result = parse_scan_result('{"deviceCount": 1, "devices": [{"position": "top", "imei": 351756051523999}]}')
    assert isinstance(result, ScanResult)
    assert result.devices[0].imei == "351756051523999"
    assert result.description == ""


def test_error_field_parsed_as_soft_error():
    result = parse_scan_result('{"deviceCount": 0, "devices": [], "error": "blurry"}')
    assert isinstance(result, ScanResult)
    assert result.soft_error == "blurry"


def test_validator_does_not_enforce_soft_error_invariant():
    result = parse_scan_result(
        '{"deviceCount": 1, "devices": [{"position": "a", "imei": "1"}], "error": "glare"}'
    )
    assert isinstance(result, ScanResult)
    assert len(result.devices) == 1
    cleared = result.without_devices()
    assert cleared.device_count == 0
    assert cleared.devices == []
    assert cleared.soft_error == "glare"


def test_serializes_with_wire_aliases():
    data = json.loads(SAMPLE.model_dump_json())
    assert data["deviceCount"] == 2
    assert "device_count" not in data
    assert data["error"] is None


def test_count_mismatch():
    result = ScanResult(device_count=3, devices=[DeviceRecord(position="a", imei="1")])
    assert result.count_mismatch()
    assert not SAMPLE.count_mismatch()


def test_error_outcomes_project_to_empty_result():
    soft = ScanSoftError(reason="invalid JSON")
    assert soft.kind == "soft_error"
    assert soft.devices == []
    assert soft.to_scan_result().soft_error == SOFT_PARSE_MESSAGE

    hard = ScanHardError(stage="inference", message="Connection reset by peer")
    assert hard.kind == "hard_error"
    assert hard.to_scan_result().soft_error == "API Error: Connection reset by peer"
    assert hard.to_scan_result().device_count == 0

    assert ScanHardError(stage="encoding", message="No image provided").display_message == "No image provided"


def test_success_outcome():
    outcome = ScanSuccess(result=SAMPLE)
    assert outcome.kind == "success"
    assert not outcome.is_soft_content_error
    assert len(outcome.devices) == 2


def test_prompt_names_every_schema_field():
    prompt = build_scan_prompt()
    assert prompt == SCAN_PROMPT
    for name in ('"description"', '"deviceCount"', '"devices"', '"position"', '"imei"', '"error"'):
        assert name in prompt
    assert "ONLY" in prompt
