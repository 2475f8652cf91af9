"""
RDE Import CLI

Command-line interface for importing escrow deposits into the registry.
"""

import asyncio
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import click

from rde_import import __version__
from rde_import.config import ImportConfig, create_sample_config, setup_logging
from rde_import.core.converter import DomainImportConverter
from rde_import.core.xml_processor import EscrowDeposit, get_xml_processor
from rde_import.database.connection import create_pool
from rde_import.database.memory import MemoryStore
from rde_import.database.oracle import OracleStore
from rde_import.exceptions import RdeImportError
from rde_import.models import EscrowDomainRecord
from rde_import.output import format_json, print_error, print_info, print_success
from rde_import.utils.trid import TridGenerator

logger = logging.getLogger("rde.cli")


@dataclass
class ImportSummary:
    """Outcome of importing one deposit."""
    imported: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.imported) + len(self.failed)


def seed_memory_store(deposit: EscrowDeposit) -> MemoryStore:
    """Memory store holding the contacts and hosts escrowed in the deposit."""
    store = MemoryStore()
    for contact in deposit.contacts:
        store.add_contact(contact.contact_id, contact.roid)
    for host in deposit.hosts:
        store.add_host(host.host_name, host.roid)
    return store


async def import_records(
    records: List[EscrowDomainRecord],
    converter: DomainImportConverter,
    concurrency: int
) -> ImportSummary:
    """
    Convert records concurrently, at most `concurrency` at a time.

    A failing record is reported in the summary and does not stop the others.
    """
    semaphore = asyncio.Semaphore(concurrency)

    async def import_one(record: EscrowDomainRecord) -> Optional[RdeImportError]:
        async with semaphore:
            try:
                await converter.convert(record)
            except RdeImportError as e:
                return e
            return None

    errors = await asyncio.gather(*(import_one(r) for r in records))

    summary = ImportSummary()
    for record, error in zip(records, errors):
        if error is None:
            summary.imported.append(record.name.lower())
        else:
            summary.failed.append((record.name.lower(), str(error)))
    return summary


async def run_import(
    deposit: EscrowDeposit,
    config: ImportConfig,
    dry_run: bool = False,
    concurrency: Optional[int] = None
) -> ImportSummary:
    """Import a parsed deposit into the configured store (or a memory store)."""
    pool = None
    if dry_run:
        store = seed_memory_store(deposit)
    else:
        pool = await create_pool(config.oracle_dict())
        store = OracleStore(pool)

    try:
        converter = DomainImportConverter(
            store, TridGenerator(registry_suffix=config.imports.registry_suffix)
        )
        summary = await import_records(
            deposit.domains, converter, concurrency or config.imports.concurrency
        )
    finally:
        if pool is not None:
            await pool.close()

    logger.info(
        f"Deposit {deposit.deposit_id}: {len(summary.imported)} imported, "
        f"{len(summary.failed)} failed"
    )
    return summary


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Config file path")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, config, debug):
    """
    RDE Import - Registry Data Escrow import tool

    Converts escrowed domains into registry domain state.

    \b
    Configuration:
      Use --config, RDE_IMPORT_CONFIG or config/rde_import.yaml.
      Run 'rde-import config init' to print a sample config file.

    \b
    Examples:
      rde-import import deposit.xml --dry-run
      rde-import -c prod.yaml import deposit.xml --concurrency 16
      rde-import parse domain.xml
    """
    ctx.ensure_object(dict)
    loaded = ImportConfig.find_and_load(Path(config) if config else None)
    setup_logging(loaded, level=logging.DEBUG if debug else None)
    ctx.obj["config"] = loaded


@cli.command("import")
@click.argument("deposit", type=click.Path(exists=True, dir_okay=False))
@click.option("--dry-run", is_flag=True, help="Import into a memory store seeded from the deposit")
@click.option("--concurrency", "-n", type=click.IntRange(min=1), help="Concurrent conversions")
@click.pass_context
def import_deposit(ctx, deposit, dry_run, concurrency):
    """Import every domain in an escrow DEPOSIT."""
    config: ImportConfig = ctx.obj["config"]
    if not dry_run and config.oracle is None:
        raise click.UsageError("No oracle section configured; use --dry-run or a config file")

    parsed = get_xml_processor().parse_deposit(Path(deposit).read_bytes())
    summary = asyncio.run(run_import(parsed, config, dry_run=dry_run, concurrency=concurrency))

    for name, error in summary.failed:
        print_error(f"{name}: {error}")

    mode = " (dry run)" if dry_run else ""
    if summary.failed:
        print_info(f"Imported {len(summary.imported)} of {summary.total} domains{mode}")
        ctx.exit(1)
    print_success(f"Imported {len(summary.imported)} of {summary.total} domains{mode}")


@cli.command("parse")
@click.argument("fragment", type=click.Path(exists=True, dir_okay=False))
def parse_fragment(fragment):
    """Parse a single rdeDomain FRAGMENT and print it as JSON."""
    record = get_xml_processor().parse_domain(Path(fragment).read_bytes())
    click.echo(format_json(record))


# =============================================================================
# Config Commands
# =============================================================================

@cli.group()
def config():
    """Configuration management commands."""
    pass


@config.command("init")
@click.option("--path", "-p", type=click.Path(dir_okay=False), help="Write to this file instead of stdout")
def config_init(path):
    """Print (or write) a sample configuration file."""
    sample = create_sample_config()
    if path is None:
        click.echo(sample, nl=False)
        return

    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        if not click.confirm(f"{path} already exists. Overwrite?"):
            return

    path.write_text(sample)
    print_success(f"Created config file: {path}")


def main():
    """Main entry point."""
    try:
        cli()
    except RdeImportError as e:
        print_error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted.")
        sys.exit(130)


if __name__ == "__main__":
    main()
