"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "sysverify.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Check configuration template for sysverify.
# Every test needs a unique name, a registered type (see `sysverify list-types`)
# and the args that type expects. Suites are optional named groupings.

options:
  # Keep running with the tests that resolved when some declarations are invalid.
  continue_on_error: false
  # One of: gotest, result, log, log-json, workbook.
  report_format: gotest
  # Parallel workers; defaults to the number of processors when omitted.
  # jobs: 4

tests:
  - name: shell-is-available
    type: shell-operation
    suites: [smoke]
    args:
      command: "true"

  - name: hosts-file
    type: file-exists
    suites: [smoke, files]
    args:
      name: /etc/hosts

  - name: any-shell-profile
    type: any-file
    suites: [files]
    args:
      file_names:
        - /etc/profile
        - /etc/bash.bashrc

  - name: toolchain-commands
    type: all-commands
    suites: [toolchain]
    args:
      commands:
        - command: "sh -c 'exit 0'"
        # - command: "<OPTIONAL>"
        #   working_directory: "<OPTIONAL>"
        #   environment:
        #     KEY: "<OPTIONAL>"

  # - name: c-compiler-works
  #   type: run-program-gcc-system
  #   suites: [toolchain]
  #   args:
  #     source: |
  #       #include <stdio.h>
  #       int main(void) { printf("hello"); return 0; }
  #     output: hello
"""


def build_placeholder_configuration() -> str:
    """Build a YAML check configuration template with inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder check configuration to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Check configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
