from __future__ import annotations

import json
from pathlib import Path

import pytest

from mdcite.cli import extract_file, extract_header, extract_links, validate

MANUAL = "# Manual\n\n## Setup\n\nInstall the tools.\n"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("MDCITE_SCOPE", "MDCITE_FULL_FILES", "MDCITE_LOG_LEVEL", "MDCITE_SUGGESTION_LIMIT"):
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _docs(tmp_path: Path) -> Path:
    _write(tmp_path / "manual.md", MANUAL)
    return _write(tmp_path / "notes.md", "[ok](manual.md#Setup)\n\n[bad](manual.md#Nope)\n")


def test_validate_json_output_and_error_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _docs(tmp_path)

    exit_code = validate.main([str(source), "--format", "json"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 1
    assert payload["summary"] == {"total": 2, "valid": 1, "warnings": 0, "errors": 1}
    assert payload["links"][1]["validation"]["message"] == "Anchor not found: #Nope"


def test_validate_cli_report_with_line_filter(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _docs(tmp_path)

    exit_code = validate.main([str(source), "--lines", "1-1"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "Summary: 1 links, 1 valid, 0 warnings, 0 errors" in output
    assert "VALID (1)" in output
    assert "ERRORS" not in output


def test_validate_missing_source_is_fatal(tmp_path: Path) -> None:
    assert validate.main([str(tmp_path / "absent.md")]) == 2


def test_validate_rejects_bad_line_range(tmp_path: Path) -> None:
    assert validate.main([str(_docs(tmp_path)), "--lines", "9-1"]) == 2


def test_extract_links_outputs_result_contract(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _docs(tmp_path)

    exit_code = extract_links.main([str(source)])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["stats"]["uniqueContent"] == 1
    assert [entry["status"] for entry in payload["report"]["processedLinks"]] == ["extracted", "skipped"]
    assert "_totalCharacterLength" in payload["contentBlocks"]


def test_extract_links_without_eligible_links_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(tmp_path / "manual.md", MANUAL)
    source = _write(tmp_path / "notes.md", "[m](manual.md)\n")

    assert extract_links.main([str(source)]) == 1
    capsys.readouterr()
    assert extract_links.main([str(source), "--full-files"]) == 0


def test_extract_header_and_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = _write(tmp_path / "manual.md", MANUAL)

    assert extract_header.main([str(target), "Setup"]) == 0
    header_payload = json.loads(capsys.readouterr().out)
    assert extract_file.main([str(target)]) == 0
    file_payload = json.loads(capsys.readouterr().out)

    header_blocks = [value for key, value in header_payload["contentBlocks"].items() if key != "_totalCharacterLength"]
    file_blocks = [value for key, value in file_payload["contentBlocks"].items() if key != "_totalCharacterLength"]
    assert header_blocks[0]["content"] == "## Setup\n\nInstall the tools.\n"
    assert file_blocks[0]["content"] == MANUAL


def test_extract_header_validation_error_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = _write(tmp_path / "manual.md", MANUAL)

    assert extract_header.main([str(target), "Teardown"]) == 1
    assert extract_file.main([str(tmp_path / "absent.md")]) == 1
    assert capsys.readouterr().out == ""
