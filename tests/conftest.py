"""Pytest fixtures for neodojo tests."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture
def gtest_report_data() -> dict[str, Any]:
    """A GoogleTest JSON report with one passing and one failing case."""
    return {
        "name": "AllTests",
        "tests": 2,
        "failures": 1,
        "disabled": 0,
        "errors": 0,
        "timestamp": "2024-05-01T10:00:00Z",
        "time": "0.012s",
        "testsuites": [
            {
                "name": "ListTest",
                "tests": 2,
                "failures": 1,
                "disabled": 0,
                "errors": 0,
                "time": "0.01s",
                "testsuite": [
                    {
                        "name": "Push",
                        "file": "tests/list_test.cpp",
                        "line": 10,
                        "status": "RUN",
                        "result": "COMPLETED",
                        "timestamp": "2024-05-01T10:00:00Z",
                        "time": "0s",
                        "classname": "ListTest",
                    },
                    {
                        "name": "Pop",
                        "file": "tests/list_test.cpp",
                        "line": 20,
                        "status": "RUN",
                        "result": "COMPLETED",
                        "timestamp": "2024-05-01T10:00:00Z",
                        "time": "0s",
                        "classname": "ListTest",
                        "failures": [
                            {
                                "failure": "tests/list_test.cpp:22\nExpected equality of these values:\n  size\n    Which is: 1\n  0",
                                "type": "",
                            },
                            {
                                "failure": "tests/list_test.cpp:23\nValue of: empty\n  Actual: false",
                                "type": "",
                            },
                        ],
                    },
                ],
            }
        ],
    }


@pytest.fixture
def passing_report_data(gtest_report_data: dict[str, Any]) -> dict[str, Any]:
    """The sample report with its failing case removed."""
    data: dict[str, Any] = json.loads(json.dumps(gtest_report_data))
    data["tests"] = 1
    data["failures"] = 0
    suite: dict[str, Any] = data["testsuites"][0]
    suite["tests"] = 1
    suite["failures"] = 0
    suite["testsuite"] = suite["testsuite"][:1]
    return data


@pytest.fixture
def results_dir(tmp_path: Path) -> Path:
    """An empty results directory."""
    path: Path = tmp_path / "results"
    path.mkdir()
    return path


@pytest.fixture
def asan_log() -> str:
    return (
        "=================================================================\n"
        "==4242==ERROR: AddressSanitizer: heap-buffer-overflow on address 0xdead\n"
        "READ of size 4 at 0xdead thread T0\n"
        "    #0 0x4011 in list_pop src/list.c:42\n"
        "SUMMARY: AddressSanitizer: heap-buffer-overflow src/list.c:42 in list_pop\n"
        "==4242==ABORTING\n"
    )


@pytest.fixture
def temp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text(
        """
[tool.neodojo]
output_format = "json"
color = "never"
show_source = false
dump_sanitizer_log = false
results_file = "gtest.json"
sanitizer_log = "asan.txt"
"""
    )
    return config_path


@pytest.fixture
def invalid_config(tmp_path: Path) -> Path:
    """Create a pyproject.toml with invalid neodojo config."""
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text(
        """
[tool.neodojo]
output_format = "xml"
color = "maybe"
show_source = "yes"
results_file = ""
"""
    )
    return config_path


@pytest.fixture
def empty_pyproject(tmp_path: Path) -> Path:
    """Create a pyproject.toml with an empty [tool.neodojo] section."""
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text("[tool.neodojo]\n")
    return config_path


@pytest.fixture
def invalid_toml(tmp_path: Path) -> Path:
    """Create a pyproject.toml that is not valid TOML."""
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text("[tool.neodojo\ncolor = ")
    return config_path
