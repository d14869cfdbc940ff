"""CLI entry point for lcu-schema."""

import json
import logging
from pathlib import Path

import click
import yaml

from lcu_schema.catalog.base import RawCatalog
from lcu_schema.catalog.collect import (
    DEFAULT_MAX_WORKERS,
    collect_catalog,
    dump_raw_catalog,
    load_raw_catalog,
)
from lcu_schema.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, CatalogFetchError, HelpClient
from lcu_schema.pipeline import translate

LIVE_SOURCE = "live"
OUTPUT_FILES = {
    "types": "lcu-types.d.ts",
    "endpoints": "lcu-endpoints.d.ts",
    "events": "lcu-events.d.ts",
}


def live_options(command):
    """Options shared by every command that talks to the running service."""
    options = [
        click.option("--base-url", default=DEFAULT_BASE_URL, envvar="LCU_BASE_URL", show_default=True, help="Service base URL."),
        click.option("--password", default=None, envvar="LCU_PASSWORD", help="Service password (basic auth)."),
        click.option("--verify/--insecure", default=False, help="Verify the service's TLS certificate."),
        click.option("--timeout", default=DEFAULT_TIMEOUT, type=float, show_default=True, help="Request timeout in seconds."),
        click.option("--workers", default=DEFAULT_MAX_WORKERS, type=int, show_default=True, help="Concurrent detail requests."),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def _fetch_live(base_url: str, password: str | None, verify: bool, timeout: float, workers: int) -> RawCatalog:
    click.echo(f"Fetching catalog from {base_url}...")
    try:
        with HelpClient(base_url, password=password, verify=verify, timeout=timeout) as client:
            return collect_catalog(client, max_workers=workers)
    except CatalogFetchError as e:
        raise click.ClickException(str(e)) from e


def _load_source(source: str, **live) -> RawCatalog:
    if source == LIVE_SOURCE:
        return _fetch_live(**live)
    try:
        return load_raw_catalog(Path(source))
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot read catalog {source}: {e}") from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log every request and notice.")
def main(verbose: bool):
    """LCU Schema: generate OpenAPI and TypeScript typings from the /Help catalog."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the raw catalog (.json or .yaml).")
@live_options
def fetch(output: Path, **live):
    """Dump the raw catalog of the running service."""
    catalog = _fetch_live(**live)
    dump_raw_catalog(catalog, output)
    click.echo(
        f"Saved {len(catalog.types)} types, {len(catalog.functions)} functions and "
        f"{len(catalog.events)} events to {output}"
    )


@main.command()
@click.argument("source")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output directory for generated files.")
@click.option("--namespace", default=None, help="Wrap type declarations in this TypeScript namespace.")
@click.option("--format", "fmt", default="json", type=click.Choice(["json", "yaml"]), help="OpenAPI document format.")
@live_options
def generate(source: str, output: Path, namespace: str | None, fmt: str, **live):
    """Generate OpenAPI + TypeScript from SOURCE (a catalog dump, or 'live')."""
    raw = _load_source(source, **live)
    click.echo(f"Translating {len(raw.types)} types and {len(raw.functions)} functions...")
    document, declarations = translate(raw, namespace=namespace)

    output.mkdir(parents=True, exist_ok=True)
    openapi = document.to_openapi()
    if fmt == "yaml":
        doc_path = output / "openapi.yaml"
        doc_path.write_text(yaml.safe_dump(openapi, sort_keys=False, allow_unicode=True), encoding="utf-8")
    else:
        doc_path = output / "openapi.json"
        doc_path.write_text(json.dumps(openapi, indent=4), encoding="utf-8")
    click.echo(f"  Created {doc_path}")

    texts = {
        "types": declarations.type_declarations,
        "endpoints": declarations.endpoint_declarations,
        "events": declarations.event_declarations,
    }
    for key, filename in OUTPUT_FILES.items():
        file_path = output / filename
        file_path.write_text(texts[key], encoding="utf-8")
        click.echo(f"  Created {file_path}")

    for message in document.diagnostics:
        click.echo(f"  Notice: {message}", err=True)
    click.echo(f"Done! {len(document.operations)} operations, {len(document.tags)} tags.")
