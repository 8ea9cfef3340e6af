"""Tests for SARIF parsing."""
from __future__ import annotations

from typing import Any

import pytest

from neodojo.errors import MalformedReport
from neodojo.locations import RegionDescriptor
from neodojo.sarif import ArtifactRef, SarifReport, loads_report, parse_report


def _gcc_document() -> dict[str, Any]:
    """Shape of a report written by gcc -fdiagnostics-format=sarif-stderr."""
    return {
        "$schema": "https://json.schemastore.org/sarif-2.1.0.json",
        "version": "2.1.0",
        "runs": [
            {
                "tool": {"driver": {"name": "GNU C17"}},
                "artifacts": [
                    {
                        "location": {"uri": "main.c", "uriBaseId": "PWD"},
                        "contents": {"text": "int main() {\n  return x;\n}\n"},
                    }
                ],
                "results": [
                    {
                        "ruleId": "error",
                        "level": "error",
                        "message": {"text": "'x' undeclared"},
                        "locations": [
                            {
                                "physicalLocation": {
                                    "artifactLocation": {"uri": "main.c", "uriBaseId": "PWD"},
                                    "region": {"startLine": 2, "startColumn": 10, "endColumn": 11},
                                }
                            }
                        ],
                    }
                ],
            }
        ],
    }


class TestParseReport:
    def test_gcc_layout(self) -> None:
        report: SarifReport = parse_report(_gcc_document())
        assert len(report.runs) == 1
        run = report.runs[0]
        assert run.artifacts[0].ref == ArtifactRef(uri="main.c", base_id="PWD")
        assert run.artifacts[0].text.startswith("int main()")
        result = run.results[0]
        assert result.level == "error"
        assert result.message == "'x' undeclared"
        assert result.artifact == ArtifactRef(uri="main.c", base_id="PWD")
        assert result.region == RegionDescriptor(start_line=2, start_column=10, end_column=11)

    def test_flat_layout(self) -> None:
        data: dict[str, Any] = {
            "runs": [
                {
                    "artifacts": [{"uri": "a.c", "uriBaseId": "SRC", "text": "x"}],
                    "results": [
                        {
                            "message": "bad",
                            "locations": [
                                {
                                    "artifactLocation": {"uri": "a.c", "uriBaseId": "SRC"},
                                    "region": {"byteOffset": 0, "byteLength": 1},
                                }
                            ],
                        }
                    ],
                }
            ]
        }
        report: SarifReport = parse_report(data)
        result = report.runs[0].results[0]
        assert result.level is None
        assert result.message == "bad"
        assert result.region == RegionDescriptor(byte_offset=0, byte_length=1)

    def test_missing_sections_default_to_empty(self) -> None:
        report: SarifReport = parse_report({"runs": [{}]})
        assert report.runs[0].artifacts == ()
        assert report.runs[0].results == ()

    def test_result_without_location(self) -> None:
        report: SarifReport = parse_report(
            {"runs": [{"results": [{"message": {"text": "linker failed"}}]}]}
        )
        result = report.runs[0].results[0]
        assert result.artifact is None
        assert result.region == RegionDescriptor()

    def test_non_string_level_is_absent(self) -> None:
        report: SarifReport = parse_report(
            {"runs": [{"results": [{"level": 3, "message": {"text": "m"}}]}]}
        )
        assert report.runs[0].results[0].level is None


class TestMalformed:
    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"runs": {}},
            {"runs": ["x"]},
            {"runs": [{"results": [{"message": {}}]}]},
            {"runs": [{"artifacts": [{"location": {"uri": 1}}]}]},
            {
                "runs": [
                    {
                        "results": [
                            {
                                "message": "m",
                                "locations": [
                                    {
                                        "artifactLocation": {"uri": "a.c"},
                                        "region": {"startLine": "2"},
                                    }
                                ],
                            }
                        ]
                    }
                ]
            },
        ],
    )
    def test_shape_errors(self, data: Any) -> None:
        with pytest.raises(MalformedReport):
            parse_report(data)

    def test_boolean_is_not_an_integer(self) -> None:
        data: dict[str, Any] = _gcc_document()
        region: dict[str, Any] = data["runs"][0]["results"][0]["locations"][0][
            "physicalLocation"
        ]["region"]
        region["startLine"] = True
        with pytest.raises(MalformedReport):
            parse_report(data)

    def test_invalid_json(self) -> None:
        with pytest.raises(MalformedReport, match="invalid SARIF JSON"):
            loads_report("{not json")
