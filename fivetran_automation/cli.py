"""Command-line entry point for the Fivetran automation toolkit."""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Dict, List, Tuple

import click
import httpx
from pydantic import ValidationError

from .config import Settings
from .errors import FivetranAutomationError
from .fivetran_client import FivetranClient
from .sheet_export import ExportFormat, export_sheet

# Configure logging
log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
log_level = getattr(logging, log_level_str, logging.INFO)

logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler()  # stderr, so JSON on stdout stays clean
    ]
)

logger = logging.getLogger(__name__)

RESOURCES = ("groups", "users", "teams", "connectors")


def parse_where(clauses: Tuple[str, ...]) -> List[Dict[str, str]]:
    """Turn ``--where service=email,region=us`` options into filter clauses."""
    filters: List[Dict[str, str]] = []
    for clause in clauses:
        spec: Dict[str, str] = {}
        for pair in clause.split(","):
            if not pair.strip():
                continue
            key, sep, value = pair.partition("=")
            if not sep or not key.strip():
                raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--where")
            spec[key.strip()] = value.strip()
        filters.append(spec)
    return filters or [{}]


def _load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}")


@click.group()
def main() -> None:
    """Query Fivetran resources and export spreadsheets."""


@main.command("list")
@click.argument("resource", type=click.Choice(RESOURCES))
@click.option("--group-id", default=None, help="Only list connectors of this group")
@click.option("--where", "where", multiple=True, help="Filter clause key=value[,key=value]; repeat to OR clauses")
@click.option("--first/--all", "exit_on_first_match", default=False, help="Stop at the first matching item")
def list_resources(resource: str, group_id: str | None, where: Tuple[str, ...], exit_on_first_match: bool) -> None:
    """List RESOURCE as JSON."""
    filters = parse_where(where)
    settings = _load_settings()
    try:
        with FivetranClient(settings) as client:
            if resource == "connectors" and group_id:
                items = client.get_connectors_in_group(group_id, filters, exit_on_first_match)
            elif resource == "connectors":
                items = client.get_connectors(filters, exit_on_first_match)
            else:
                items = getattr(client, f"get_{resource}")(filters, exit_on_first_match)
    except (FivetranAutomationError, httpx.HTTPError) as e:
        logger.error(f"Error listing {resource}: {e}")
        sys.exit(1)
    click.echo(json.dumps(items, indent=2))


@main.command()
@click.argument("connector_id")
def pause(connector_id: str) -> None:
    """Pause the connector CONNECTOR_ID."""
    settings = _load_settings()
    try:
        with FivetranClient(settings) as client:
            client.pause_connector(connector_id)
    except (FivetranAutomationError, httpx.HTTPError) as e:
        logger.error(f"Error pausing connector: {e}")
        sys.exit(1)


@main.command()
@click.argument("workbook")
@click.argument("sheet")
@click.argument("target_dir")
@click.option(
    "--format",
    "to_format",
    type=click.Choice([f.value for f in ExportFormat], case_sensitive=False),
    default="csv",
    help="Export format",
)
@click.option("--delimiter", default=None, help="Override the format's delimiter")
def export(workbook: str, sheet: str, target_dir: str, to_format: str, delimiter: str | None) -> None:
    """Export SHEET of WORKBOOK into TARGET_DIR."""
    try:
        url = export_sheet(workbook, sheet, target_dir, to_format, delimiter)
    except FivetranAutomationError as e:
        logger.error(f"ERROR: {e}")
        sys.exit(1)
    click.echo(url)


if __name__ == "__main__":
    main()
