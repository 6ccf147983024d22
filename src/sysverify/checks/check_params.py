"""Validation helpers for type-specific check arguments."""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from typing import Any


class CheckParameterError(Exception):
    """Raised when check arguments are malformed."""


def require_args_mapping(args: Any, allowed_keys: Collection[str]) -> Mapping[str, Any]:
    if args is None:
        return {}
    if not isinstance(args, Mapping):
        raise CheckParameterError("check args must be a mapping.")
    unknown = sorted(str(key) for key in args if key not in allowed_keys)
    if unknown:
        raise CheckParameterError(f"unsupported check args: {', '.join(unknown)}")
    return args


def require_string(args: Mapping[str, Any], key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str):
        raise CheckParameterError(f"{key} must be a string.")
    if not value.strip():
        raise CheckParameterError(f"{key} must not be empty.")
    return value


def optional_string(args: Mapping[str, Any], key: str, default: str = "") -> str:
    value = args.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise CheckParameterError(f"{key} must be a string.")
    return value


def string_sequence(args: Mapping[str, Any], key: str) -> tuple[str, ...]:
    value = args.get(key)
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise CheckParameterError(f"{key} must be a list of strings.")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise CheckParameterError(f"{key} entries must be strings.")
        items.append(item)
    return tuple(items)


def string_mapping(args: Mapping[str, Any], key: str) -> dict[str, str]:
    value = args.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise CheckParameterError(f"{key} must be a mapping of strings.")
    normalized: dict[str, str] = {}
    for item_key, item_value in value.items():
        if not isinstance(item_key, str) or isinstance(item_value, (Mapping, list)):
            raise CheckParameterError(f"{key} entries must be string pairs.")
        normalized[item_key] = "" if item_value is None else str(item_value)
    return normalized


def mapping_sequence(args: Mapping[str, Any], key: str) -> tuple[Mapping[str, Any], ...]:
    value = args.get(key)
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise CheckParameterError(f"{key} must be a list of mappings.")
    items: list[Mapping[str, Any]] = []
    for item in value:
        if not isinstance(item, Mapping):
            raise CheckParameterError(f"{key} entries must be mappings.")
        items.append(item)
    return tuple(items)
