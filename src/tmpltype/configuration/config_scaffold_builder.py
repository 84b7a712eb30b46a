"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "tmpltype.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Configuration template for tmpltype.
# Replace every <REQUIRED> placeholder before running generate or inspect.
# Uncomment <OPTIONAL> entries only when your setup needs them.
# Relative paths are resolved against the directory of this file.
# Command line options override the values below.

input:
  # Glob patterns, as a list or a comma-separated string.
  patterns:
    - "<REQUIRED>"
  # Glob matched against each template's file name.
  # exclude: "<OPTIONAL>"
  # Directory template names are derived from. Defaults to the directory
  # prefix shared by the patterns.
  # root: "<OPTIONAL>"

output:
  # Go package name of the generated file.
  package: "<REQUIRED>"
  # Generated Go file. Templates must live below its directory.
  path: "<REQUIRED>"

# Go import paths for qualified @param types (qualifier: import path).
# time, json, url, big, sql and netip are known already.
imports:
  # decimal: "<OPTIONAL>"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder configuration template to the requested output path.

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
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
