"""SARIF report parsing for neodojo.

Only the parts of SARIF 2.1.0 that the compiler emits with
``-fdiagnostics-format=sarif-stderr`` are read. The flattened layout
(``uri``/``text`` directly on artifacts, ``artifactLocation`` directly on
locations, ``message`` as a plain string) is accepted as well.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from neodojo.errors import MalformedReport
from neodojo.locations import RegionDescriptor


@dataclass(frozen=True, slots=True)
class ArtifactRef:
    """Reference to an artifact by (base-scope id, uri)."""

    uri: str
    base_id: str | None = None

    @property
    def key(self) -> tuple[str | None, str]:
        return (self.base_id, self.uri)


@dataclass(frozen=True, slots=True)
class SarifArtifact:
    ref: ArtifactRef
    text: str


@dataclass(frozen=True, slots=True)
class SarifResult:
    message: str
    level: str | None = None
    artifact: ArtifactRef | None = None
    region: RegionDescriptor = field(default_factory=RegionDescriptor)


@dataclass(frozen=True, slots=True)
class SarifRun:
    artifacts: tuple[SarifArtifact, ...] = ()
    results: tuple[SarifResult, ...] = ()


@dataclass(frozen=True, slots=True)
class SarifReport:
    runs: tuple[SarifRun, ...] = ()


def loads_report(text: str, *, path: Path | None = None) -> SarifReport:
    """Decode and parse a SARIF document."""
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedReport(f"invalid SARIF JSON: {e}", path=path) from e
    return parse_report(data, path=path)


def parse_report(data: Any, *, path: Path | None = None) -> SarifReport:
    """Parse a decoded SARIF document into typed descriptors."""
    if not isinstance(data, dict):
        raise MalformedReport("SARIF document must be an object", path=path)

    raw_runs: Any = data.get("runs", [])
    if not isinstance(raw_runs, list):
        raise MalformedReport("runs must be a list", path=path)

    runs: list[SarifRun] = []
    for idx, raw_run in enumerate(raw_runs):
        runs.append(_parse_run(raw_run, context=f"runs[{idx}]", path=path))
    return SarifReport(runs=tuple(runs))


def _parse_run(data: Any, *, context: str, path: Path | None) -> SarifRun:
    if not isinstance(data, dict):
        raise MalformedReport(f"{context} must be an object", path=path)

    artifacts: list[SarifArtifact] = []
    for idx, raw in enumerate(_list(data, "artifacts", context=context, path=path)):
        artifacts.append(
            _parse_artifact(raw, context=f"{context}.artifacts[{idx}]", path=path)
        )

    results: list[SarifResult] = []
    for idx, raw in enumerate(_list(data, "results", context=context, path=path)):
        results.append(
            _parse_result(raw, context=f"{context}.results[{idx}]", path=path)
        )

    return SarifRun(artifacts=tuple(artifacts), results=tuple(results))


def _parse_artifact(data: Any, *, context: str, path: Path | None) -> SarifArtifact:
    if not isinstance(data, dict):
        raise MalformedReport(f"{context} must be an object", path=path)

    location: Any = data.get("location", data)
    ref: ArtifactRef = _parse_ref(location, context=f"{context}.location", path=path)

    contents: Any = data.get("contents", data)
    if not isinstance(contents, dict):
        raise MalformedReport(f"{context}.contents must be an object", path=path)
    text: Any = contents.get("text", "")
    if not isinstance(text, str):
        raise MalformedReport(f"{context}.contents.text must be a string", path=path)

    return SarifArtifact(ref=ref, text=text)


def _parse_result(data: Any, *, context: str, path: Path | None) -> SarifResult:
    if not isinstance(data, dict):
        raise MalformedReport(f"{context} must be an object", path=path)

    raw_message: Any = data.get("message")
    if isinstance(raw_message, dict):
        raw_message = raw_message.get("text")
    if not isinstance(raw_message, str):
        raise MalformedReport(f"{context}.message must have text", path=path)

    level: Any = data.get("level")
    locations: list[Any] = _list(data, "locations", context=context, path=path)
    if not locations:
        return SarifResult(
            message=raw_message,
            level=level if isinstance(level, str) else None,
        )

    # Only the primary location is located; related locations are ignored.
    first: Any = locations[0]
    if not isinstance(first, dict):
        raise MalformedReport(f"{context}.locations[0] must be an object", path=path)
    physical: Any = first.get("physicalLocation", first)
    if not isinstance(physical, dict):
        raise MalformedReport(
            f"{context}.locations[0].physicalLocation must be an object", path=path
        )

    artifact: ArtifactRef | None = None
    if "artifactLocation" in physical:
        artifact = _parse_ref(
            physical["artifactLocation"],
            context=f"{context}.artifactLocation",
            path=path,
        )

    return SarifResult(
        message=raw_message,
        level=level if isinstance(level, str) else None,
        artifact=artifact,
        region=_parse_region(
            physical.get("region", {}), context=f"{context}.region", path=path
        ),
    )


def _parse_ref(data: Any, *, context: str, path: Path | None) -> ArtifactRef:
    if not isinstance(data, dict):
        raise MalformedReport(f"{context} must be an object", path=path)
    uri: Any = data.get("uri")
    if not isinstance(uri, str):
        raise MalformedReport(f"{context}.uri must be a string", path=path)
    base_id: Any = data.get("uriBaseId")
    if base_id is not None and not isinstance(base_id, str):
        raise MalformedReport(f"{context}.uriBaseId must be a string", path=path)
    return ArtifactRef(uri=uri, base_id=base_id)


def _parse_region(data: Any, *, context: str, path: Path | None) -> RegionDescriptor:
    if not isinstance(data, dict):
        raise MalformedReport(f"{context} must be an object", path=path)
    values: dict[str, int | None] = {}
    for key, attr in (
        ("byteOffset", "byte_offset"),
        ("byteLength", "byte_length"),
        ("startLine", "start_line"),
        ("startColumn", "start_column"),
        ("endLine", "end_line"),
        ("endColumn", "end_column"),
    ):
        value: Any = data.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise MalformedReport(f"{context}.{key} must be an integer", path=path)
        values[attr] = value
    return RegionDescriptor(**values)


def _list(data: dict[str, Any], key: str, *, context: str, path: Path | None) -> list[Any]:
    value: Any = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedReport(f"{context}.{key} must be a list", path=path)
    return value
