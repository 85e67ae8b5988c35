"""The `wpkg` command-line interface."""

from collections.abc import Iterator
from contextlib import contextmanager
import importlib.metadata
from pathlib import Path
import re

from attrs import evolve
import click

from .config import WpkgConfig, load_config
from .exceptions import BadMagicError, WpkgError
from .fileutil import dos2unix, read_allow_list
from .packaging.orchestrator import BuildOrchestrator
from .packaging.reader import DebReader, is_debian_binary
from .packaging.rpm import RpmBuilder
from .scaffolding.generator import scaffold_theme
from .telemetry import configure_logging

try:
    __version__ = importlib.metadata.version("wpkg-builder")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"


@contextmanager
def _reporting(action: str) -> Iterator[None]:
    """Turns library errors into a red one-line message and a distinct exit status."""
    try:
        yield
    except WpkgError as e:
        click.secho(f"❌ {action} failed: {e}", fg="red", err=True)
        raise click.exceptions.Exit(e.exit_code) from e


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(
    __version__,
    "-V",
    "--version",
    prog_name="wpkg",
    message="%(prog)s version %(version)s",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a wpkg.toml or pyproject.toml with a [tool.wpkg] table.",
)
@click.option(
    "-e",
    "--execs",
    type=click.Path(dir_okay=False, path_type=Path),
    help="File listing paths that should be packaged with mode 0777.",
)
@click.option("-s", "--silent", is_flag=True, help="Only report warnings and errors.")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    execs: Path | None,
    silent: bool,
    verbose: bool,
) -> None:
    """Windows Packager: builds .deb, .rpm and .app packages and extracts .deb files."""
    with _reporting("Configuration"):
        config = load_config(config_path)
    if execs is not None:
        config = evolve(config, execs=execs)
    if silent:
        config = evolve(config, silent=True)
    configure_logging(silent=config.silent, verbose=verbose)
    ctx.obj = config


def _allow_list(config: WpkgConfig) -> frozenset[str]:
    return read_allow_list(config.execs)


@cli.command("build")
@click.argument(
    "path",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--out-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for the .deb file. Defaults to the package root.",
)
@click.pass_obj
def build_command(config: WpkgConfig, path: Path, out_dir: Path | None) -> None:
    """Builds a .deb from a folder containing DEBIAN/control."""
    with _reporting("Build"):
        orchestrator = BuildOrchestrator(
            package_root=path,
            allow_list=_allow_list(config),
            output_dir=out_dir or config.output_dir,
            debian_version=config.debian_version,
            source_date_epoch=config.source_date_epoch,
        )
        deb_path = orchestrator.build_deb()
    click.secho(f"✅ Created {deb_path}", fg="green")


@cli.command("rpm")
@click.argument(
    "path",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.pass_obj
def rpm_command(config: WpkgConfig, path: Path) -> None:
    """Builds an .rpm from a folder whose SPECS/ holds one .spec file."""
    with _reporting("RPM build"):
        builder = RpmBuilder(
            package_root=path,
            allow_list=_allow_list(config),
            source_date_epoch=config.source_date_epoch,
        )
        artifacts = builder.build_rpm()
    if not artifacts:
        click.secho("⚠️  rpmbuild finished but produced no matching .rpm files.", fg="yellow")
    for artifact in artifacts:
        click.secho(f"✅ Created {artifact}", fg="green")


@cli.command("app")
@click.argument(
    "path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--out",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output zip path. Defaults to <folder>.zip next to the folder.",
)
@click.pass_obj
def app_command(config: WpkgConfig, path: Path, out: Path | None) -> None:
    """Zips an .app folder, keeping executable bits for macOS."""
    with _reporting("App build"):
        orchestrator = BuildOrchestrator(
            package_root=path,
            allow_list=_allow_list(config),
            source_date_epoch=config.source_date_epoch,
        )
        zip_path = orchestrator.build_app(output=out)
    click.secho(f"✅ Created {zip_path}", fg="green")


@cli.command("extract")
@click.argument(
    "package_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "destination",
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
def extract_command(package_file: Path, destination: Path | None) -> None:
    """Extracts a .deb into DESTINATION (default: the folder holding the .deb)."""
    with _reporting("Extraction"):
        if not is_debian_binary(package_file):
            raise BadMagicError(f"File is not a Debian binary: {package_file}")
        target = destination or package_file.resolve().parent
        result = DebReader(package_file).extract(target)

    click.secho(f"✅ Extracted format {result.version} package:", fg="green")
    click.echo(f"  control: {result.control_dir}")
    click.echo(f"  data:    {result.data_dir}")
    for name in result.skipped:
        click.secho(f"⚠️  Skipped unrecognized member '{name}'", fg="yellow")


@cli.command("info")
@click.argument(
    "package_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
def info_command(package_file: Path) -> None:
    """Shows the members and control fields of a .deb."""
    click.echo(f"🔍 Inspecting package '{package_file}'...")
    with _reporting("Inspection"):
        click.echo(DebReader(package_file).get_info())


@cli.command("theme")
@click.argument("name")
@click.option(
    "--path",
    default=".",
    type=click.Path(file_okay=False, path_type=Path),
    help="Folder in which to create the theme package.",
)
def theme_command(name: str, path: Path) -> None:
    """Creates an empty iOS theme package structure with a sample control file."""
    try:
        theme_dir = scaffold_theme(name, path)
    except FileExistsError as e:
        raise click.UsageError(str(e)) from e
    click.secho(f"✅ Created theme skeleton at {theme_dir}", fg="green")


@cli.command("d2u")
@click.argument("files", nargs=-1, required=True)
def dos2unix_command(files: tuple[str, ...]) -> None:
    """Converts files from DOS to Unix line endings. Accepts ';' or ',' separated lists."""
    paths = [Path(p) for arg in files for p in re.split(r"[;,]", arg) if p.strip()]
    with _reporting("dos2unix"):
        converted = dos2unix(paths)
    click.secho(f"✅ Converted {len(converted)} file(s).", fg="green")


main = cli
