"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from tmpltype.code_emission import render_schema_report
from tmpltype.configuration import DEFAULT_CONFIG_FILENAME, write_placeholder_configuration
from tmpltype.generation_run import (
    GenerationRequest,
    GenerationRunError,
    execute_generation_run,
    inspect_templates,
)


class CliError(Exception):
    """Custom CLI error."""


def _input_options(command):
    """Attach the template selection options shared by generate and inspect."""
    for decorator in reversed(
        (
            click.option(
                "--in",
                "patterns",
                required=False,
                help="Comma-separated template glob patterns",
            ),
            click.option(
                "--exclude",
                "exclude",
                required=False,
                help="Glob matched against template file names to skip",
            ),
            click.option(
                "--root",
                "root",
                required=False,
                type=click.Path(path_type=str),
                help="Template root directory template names are derived from",
            ),
            click.option(
                "--config",
                "config_path",
                required=False,
                type=click.Path(path_type=str),
                help="Path to YAML configuration file",
            ),
        )
    ):
        command = decorator(command)
    return command


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="tmpltype")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Typed Go bindings for text/template sources."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="generate")
@_input_options
@click.option("--pkg", "package", required=False, help="Go package name of the generated file")
@click.option(
    "--out",
    "output_path",
    required=False,
    type=click.Path(path_type=str),
    help="Path to the Go file to write",
)
def generate(
    patterns: str | None,
    exclude: str | None,
    root: str | None,
    config_path: str | None,
    package: str | None,
    output_path: str | None,
) -> None:
    """Generate typed Go bindings for the selected templates."""
    try:
        outcome = execute_generation_run(
            GenerationRequest(
                patterns=patterns,
                package=package,
                output_path=output_path,
                exclude=exclude,
                root=root,
                config_path=config_path,
            )
        )
    except GenerationRunError as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(outcome.output_path))


@cli.command(name="inspect")
@_input_options
def inspect(
    patterns: str | None,
    exclude: str | None,
    root: str | None,
    config_path: str | None,
) -> None:
    """Print the inferred schema of the selected templates as JSON."""
    try:
        report = inspect_templates(
            GenerationRequest(
                patterns=patterns,
                exclude=exclude,
                root=root,
                config_path=config_path,
            )
        )
    except GenerationRunError as exc:
        raise CliError(str(exc)) from exc
    click.echo(render_schema_report(report), nl=False)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
