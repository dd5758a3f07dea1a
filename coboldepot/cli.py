"""CobolDepot CLI — list, inspect, and install packages from the registry.

Also hosts the two maintenance entry points: the registry auditor
(``coboldepot-validate``) and the search index sync (``coboldepot-sync``).
"""

import logging
from contextlib import contextmanager

import click
from rich.cells import cell_len
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from coboldepot import PRODUCT_NAME
from coboldepot.config import REGISTRY_DIR_ENV, Settings
from coboldepot.errors import CobolDepotError

console = Console()
err_console = Console(stderr=True)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _configure_logging() -> None:
    logging.basicConfig(level=logging.INFO, format=f"[{PRODUCT_NAME}] %(message)s")


@contextmanager
def _reported_errors():
    """Turn domain errors into a one-line message and exit code 1."""
    try:
        yield
    except CobolDepotError as e:
        raise click.ClickException(str(e)) from e


@click.group(context_settings=CONTEXT_SETTINGS)
def main():
    """CobolDepot — open-source COBOL packages, one git clone away.

    Manifests are read from $COBOLDEPOT_REGISTRY_DIR (default ./registry)
    and packages are installed under ./.coboldepot/packages.
    """
    _configure_logging()


# ── List ─────────────────────────────────────────────────────────────


@main.command(name="list")
def list_packages():
    """List every package in the registry."""
    from coboldepot.registry.loader import load_catalog

    settings = Settings.from_env()
    with _reported_errors():
        catalog = load_catalog(settings.registry_dir, allow_empty=True)

    if not catalog:
        console.print("[yellow]Registry is empty.[/]")
        return

    headers = ("Name", "Version", "License", "Repository")
    rows = [
        (record.name, record.version, record.license.upper(), record.repository)
        for record in catalog
    ]

    table = Table(title=f"Available packages ({len(catalog)}, open-source only)")
    table.add_column(headers[0], style="cyan", no_wrap=True)
    for header in headers[1:]:
        table.add_column(header, no_wrap=True)
    for row in rows:
        table.add_row(*(escape(cell) for cell in row))

    # Rows are never wrapped: widen past the console when the URLs need it
    column_widths = [max(cell_len(cell) for cell in column) for column in zip(headers, *rows)]
    table_width = sum(width + 3 for width in column_widths) + 1
    if table_width > console.width:
        Console(width=table_width).print(table)
    else:
        console.print(table)


# ── Info ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("package")
def info(package: str):
    """Show every field of PACKAGE (name match is case-insensitive)."""
    from coboldepot.registry.loader import get_package, load_catalog

    settings = Settings.from_env()
    with _reported_errors():
        record = get_package(load_catalog(settings.registry_dir, allow_empty=True), package)

    rows = [
        ("Version", record.version),
        ("License", record.license.upper()),
        ("Description", record.description),
        ("Repository", record.repository),
        ("Repo key", record.repo_key),
        ("Author", record.author),
        ("Keywords", ", ".join(record.keywords)),
        ("Updated", record.updated_at),
    ]
    if record.popularity is not None:
        rows.append(("Popularity", str(record.popularity)))

    console.print(f"[bold blue]Package:[/] {escape(record.name)}", soft_wrap=True)
    for label, value in rows:
        console.print(f"  {label:<12}: {escape(value)}", highlight=False, soft_wrap=True)


# ── Install ──────────────────────────────────────────────────────────


@main.command()
@click.argument("package")
def install(package: str):
    """Shallow-clone PACKAGE into .coboldepot/packages/<name>@<version>."""
    from coboldepot.install.installer import METADATA_FILE, Installer
    from coboldepot.registry.loader import get_package, load_catalog

    settings = Settings.from_env()
    with _reported_errors():
        record = get_package(load_catalog(settings.registry_dir, allow_empty=True), package)
        installer = Installer(settings.work_dir)
        installation = installer.install(record)

    target = installer.target_dir(record)
    console.print(
        f"[green]Installed[/] {escape(installation.name)}@{escape(installation.version)} "
        f"into {escape(str(target))}",
        soft_wrap=True,
    )
    console.print(f"  Repo key {installation.repo_key} recorded in {METADATA_FILE}", soft_wrap=True)


# ── Registry audit ───────────────────────────────────────────────────


@click.command(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--registry-dir",
    "-r",
    envvar=REGISTRY_DIR_ENV,
    default=None,
    help="Directory of YAML manifests (default ./registry)",
)
@click.pass_context
def validate_registry(ctx: click.Context, registry_dir: str | None):
    """Check every manifest in the registry and report all defects at once."""
    from coboldepot.registry.loader import audit_registry

    _configure_logging()
    directory = registry_dir or Settings.from_env().registry_dir
    with _reported_errors():
        report = audit_registry(directory)

    if report.is_empty:
        err_console.print("[yellow]⚠ No registry manifests found. Skipping validation.[/]")
        return

    if not report.passed:
        for issue in report.issues:
            err_console.print(f"[red]✖[/] {escape(issue.message)}", soft_wrap=True)
        err_console.print("\n[red]Registry validation failed.[/]")
        ctx.exit(1)

    console.print(
        f"[green]✔[/] Registry validation passed for {report.manifest_count} manifest(s)."
    )


# ── Search index sync ────────────────────────────────────────────────


@click.command(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--registry-dir",
    "-r",
    envvar=REGISTRY_DIR_ENV,
    default=None,
    help="Directory of YAML manifests (default ./registry)",
)
@click.pass_context
def sync_index(ctx: click.Context, registry_dir: str | None):
    """Push the registry to the Algolia search index.

    Requires ALGOLIA_APP_ID, ALGOLIA_ADMIN_KEY and ALGOLIA_INDEX_NAME.
    """
    from coboldepot.sync.algolia import sync_registry

    _configure_logging()
    directory = registry_dir or Settings.from_env().registry_dir
    try:
        count = sync_registry(directory)
    except CobolDepotError as e:
        err_console.print(f"[red]Algolia sync failed:[/] {escape(str(e))}", soft_wrap=True)
        ctx.exit(1)

    console.print(f"[green]✔[/] Algolia index synced successfully ({count} record(s)).")


if __name__ == "__main__":
    main()
