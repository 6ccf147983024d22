"""Configuration loader service."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    DEFAULT_REPORT_FORMAT,
    ConfigDocument,
    RunOptions,
    TestDeclaration,
    default_jobs,
)

YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> ConfigDocument:
    """Load a YAML or JSON configuration file and validate its shape."""
    path = Path(config_path)
    suffix = path.suffix.lower()
    if suffix not in YAML_SUFFIXES + JSON_SUFFIXES:
        raise ConfigurationError(f"Unsupported configuration format for file: {path}")
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Failed to read configuration file {path}: {exc}") from exc

    parsed = _parse_text(text, suffix)
    return parse_config_document(parsed, path=path)


def _parse_text(text: str, suffix: str) -> Any:
    if suffix in JSON_SUFFIXES:
        try:
            return json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc


def parse_config_document(parsed: Any, *, path: Path | None = None) -> ConfigDocument:
    """Validate an already-decoded document into a ConfigDocument."""
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    options = _parse_options_section(parsed.get("options"))
    tests = _parse_tests_section(parsed.get("tests"))
    return ConfigDocument(options=options, tests=tests, path=path)


def _parse_options_section(value: Any) -> RunOptions:
    if value is None:
        return RunOptions()
    section = _require_mapping(value, "options")
    continue_on_error = section.get("continue_on_error", False)
    if not isinstance(continue_on_error, bool):
        raise ConfigurationError("options.continue_on_error must be a boolean.")
    report_format = section.get("report_format") or DEFAULT_REPORT_FORMAT
    report_format = _require_non_empty_string(report_format, "options.report_format")
    jobs_value = section.get("jobs")
    if jobs_value is None:
        jobs = default_jobs()
    else:
        jobs = _require_positive_int(jobs_value, "options.jobs")
    return RunOptions(continue_on_error=continue_on_error, report_format=report_format, jobs=jobs)


def _parse_tests_section(value: Any) -> tuple[TestDeclaration, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ConfigurationError("tests must be a list of test declarations.")
    return tuple(_parse_test_declaration(item, index) for index, item in enumerate(value))


def _parse_test_declaration(value: Any, index: int) -> TestDeclaration:
    label = f"tests[{index}]"
    entry = _require_mapping(value, label)
    name = _require_non_empty_string(entry.get("name"), f"{label}.name")
    check_type = _require_non_empty_string(entry.get("type"), f"{label}.type")
    suites = _normalize_string_sequence(entry.get("suites"), f"{label}.suites")
    version = entry.get("version")
    if version is not None and (isinstance(version, bool) or not isinstance(version, int)):
        raise ConfigurationError(f"{label}.version must be an integer.")
    return TestDeclaration(
        name=name,
        suites=suites,
        check_type=check_type,
        args=entry.get("args"),
        version=version,
    )


def _normalize_string_sequence(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        stripped = value.strip()
        return (stripped,) if stripped else ()
    if isinstance(value, Sequence):
        normalized = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError(f"{field_name} entries must be strings.")
            stripped = item.strip()
            if stripped:
                normalized.append(stripped)
        return tuple(normalized)
    raise ConfigurationError(f"{field_name} must be a string or list of strings.")


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value
