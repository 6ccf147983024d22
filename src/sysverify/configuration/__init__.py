"""Configuration domain exports."""

from .check_resolution import ResolutionError, ResolvedChecks, SelectedCheck, resolve_checks
from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import ConfigurationError, load_configuration, parse_config_document
from .runtime_settings import (
    DEFAULT_REPORT_FORMAT,
    ConfigDocument,
    RunOptions,
    TestDeclaration,
)

__all__ = [
    "ConfigDocument",
    "RunOptions",
    "TestDeclaration",
    "DEFAULT_REPORT_FORMAT",
    "ConfigurationError",
    "load_configuration",
    "parse_config_document",
    "ResolutionError",
    "ResolvedChecks",
    "SelectedCheck",
    "resolve_checks",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
