"""Command-line interface for apkversion."""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from ..config import (
    EnvironConfig,
    build_artifacts_dir,
    build_version_code,
    build_version_name,
    load_settings,
)
from ..exceptions import (
    ConfigError,
    DirtyRepositoryError,
    InvalidVersionError,
)
from ..repo_state import check_clean_repo
from ..signing import check_vault_environment
from ..version_code import NormalizedVersion
from ._helpers import console, print_error, print_success, print_warning

app = typer.Typer(help="Version codes and release checks for Android builds")

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to config file (pyproject.toml or apkversion.toml)",
    ),
]

VersionArgument = Annotated[
    str, typer.Argument(..., help="Version name, e.g. '2.65.97-SNAPSHOT'")
]


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option(..., "--verbose", "-V", help="Enable debug logging")
    ] = False,
) -> None:
    """Version codes and release checks for Android builds."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def normalize(version: VersionArgument) -> None:
    """Print the normalized major.minor.build form of a version name."""
    try:
        console.print(str(NormalizedVersion.parse(version)), highlight=False)
    except InvalidVersionError as e:
        print_error(str(e))
        raise typer.Exit(1) from e


@app.command()
def code(version: VersionArgument) -> None:
    """Print the version code of a version name."""
    try:
        console.print(NormalizedVersion.parse(version).encode(), highlight=False)
    except InvalidVersionError as e:
        print_error(str(e))
        raise typer.Exit(1) from e


@app.command()
def build_version(
    as_json: Annotated[
        bool, typer.Option(..., "--json", help="Print the result as JSON")
    ] = False,
    config: ConfigOption = None,
) -> None:
    """Show the version name, version code and artifacts dir of this build."""
    try:
        settings = load_settings(config)
        env = EnvironConfig()
        version_name = build_version_name(env, settings)
        version_code = build_version_code(env, settings)
        artifacts_dir = build_artifacts_dir(env, settings)
    except (ConfigError, InvalidVersionError) as e:
        print_error(str(e))
        raise typer.Exit(1) from e

    if as_json:
        result = {
            "version_name": version_name,
            "version_code": version_code,
            "artifacts_dir": str(artifacts_dir),
        }
        typer.echo(json.dumps(result, indent=2))
        return

    table = Table(title="Build Version")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Version name", version_name)
    table.add_row("Version code", str(version_code))
    table.add_row("Artifacts dir", str(artifacts_dir))
    console.print(table)


@app.command()
def check_vault(
    ignore_vault: Annotated[
        bool,
        typer.Option(
            ...,
            "--ignore-vault",
            help="Skip the vault and sign releases with the dummy keystore",
        ),
    ] = False,
) -> None:
    """Check that vault coordinates are configured."""
    if ignore_vault:
        print_warning("Vault ignored, releases use the dummy signature")
        return

    try:
        check_vault_environment(EnvironConfig())
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1) from e

    print_success("Vault coordinates configured")


@app.command()
def check_repo(
    ignore_state: Annotated[
        bool,
        typer.Option(
            ...,
            "--ignore-state",
            help="Skip the check, same as IGNORE_REPOSITORY_STATE=true",
        ),
    ] = False,
    path: Annotated[
        Path | None, typer.Option(..., "--path", "-p", help="Working copy")
    ] = None,
) -> None:
    """Check that the git working copy has no uncommitted changes."""
    if ignore_state:
        print_warning("Repository state ignored")
        return

    try:
        check_clean_repo(EnvironConfig(), cwd=path)
    except DirtyRepositoryError as e:
        print_error(str(e))
        raise typer.Exit(1) from e

    print_success("Repository is clean")


if __name__ == "__main__":
    app()
