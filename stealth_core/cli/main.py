"""
StealthCore - Command Line Interface
======================================
CLI per chiavi, generazione e scansione stealth address.

Security Level: MEDIUM
Last Updated: 2026-10-17
Version: 0.1.0

Commands:
- keygen: Nuovo meta key pair
- generate: Announcement per un meta-address
- check: Filtro view tag (solo viewing key)
- recover: Recovery stealth private keys
- info: Parametri curva attiva
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from stealth_core.config import StealthSettings, get_settings
from stealth_core.constants import CurveId
from stealth_core.domain.hashing import address_to_hex
from stealth_core.domain.keys import MetaKeyPair
from stealth_core.domain.models import Announcement
from stealth_core.errors import InvalidKeyError, StealthCoreException
from stealth_core.logging_setup import setup_logging
from stealth_core.services.stealth_service import StealthService
from stealth_core.version import get_build_info


# ============================================================================
# CLI APP
# ============================================================================

app = typer.Typer(
    name="stealthcore",
    help="StealthCore - ERC-5564 stealth address CLI",
    add_completion=False
)

console = Console()


# ============================================================================
# GLOBAL STATE
# ============================================================================

class CLIState:
    """Global CLI state"""
    config: Optional[StealthSettings] = None
    service: Optional[StealthService] = None


state = CLIState()


def _fail(message: str) -> None:
    console.print(f"[red]Error: {escape(message)}[/red]")
    raise typer.Exit(1)


def _get_service() -> StealthService:
    if state.service is None:
        try:
            state.service = StealthService(state.config if state.config is not None else get_settings())
        except StealthCoreException as e:
            _fail(e.message)
    return state.service


def _load_keys(service: StealthService, keys_file: Path) -> MetaKeyPair:
    try:
        data = json.loads(keys_file.read_text(encoding="utf-8"))
        spending, viewing = data["spending_private_key"], data["viewing_private_key"]
    except (OSError, ValueError, KeyError, TypeError) as e:
        _fail(f"Cannot read keys file {keys_file}: {e}")

    curve = data.get("curve")
    if curve and curve != service.backend.name:
        _fail(f"Keys file is for curve {curve}, active curve is {service.backend.name}")

    return service.import_meta_keypair(spending, viewing)


def _load_announcements(service: StealthService, path: Path) -> List[Announcement]:
    try:
        return service.load_announcements(path)
    except OSError as e:
        _fail(f"Cannot read announcements file {path}: {e}")


def _parse_private_key(service: StealthService, value: str) -> int:
    text = value.strip()
    if text.startswith(("0x", "0X")):
        text = text[2:]
    try:
        scalar = service.backend.scalar_from_canonical_bytes(bytes.fromhex(text))
    except (ValueError, StealthCoreException) as e:
        raise InvalidKeyError("Invalid private key hex") from e
    return service.backend.validate_private_key(scalar)


# ============================================================================
# KEY COMMANDS
# ============================================================================

@app.command("keygen")
def keygen(
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Save keys to JSON file"
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print JSON instead of a panel"
    )
):
    """Create new stealth meta key pair"""
    service = _get_service()

    try:
        keys = service.create_meta_keypair()
        exported = keys.export_keys(service.backend)
        exported["meta_address"] = service.encode_meta_address(keys.meta_address)
    except StealthCoreException as e:
        _fail(e.message)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(exported, indent=2), encoding="utf-8")

    if as_json:
        typer.echo(json.dumps(exported, indent=2))
        return

    console.print(Panel.fit(
        f"[green]✅ Meta key pair created[/green]\n\n"
        f"Curve: [cyan]{service.backend.name}[/cyan]\n"
        f"Meta-address:\n[cyan]{exported['meta_address']}[/cyan]\n\n"
        f"[yellow]⚠️  Keep the private keys secret![/yellow]\n"
        f"Spending key: [dim]{exported['spending_private_key']}[/dim]\n"
        f"Viewing key:  [dim]{exported['viewing_private_key']}[/dim]",
        title="Stealth Keys",
        border_style="green"
    ))

    if output:
        console.print(f"[green]Keys saved to {output}[/green]")


# ============================================================================
# SENDER COMMANDS
# ============================================================================

@app.command("generate")
def generate(
    meta_address: str = typer.Argument(..., help="Recipient meta-address (st:<chain>:0x...)"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Append announcement to JSON file"
    ),
    count: int = typer.Option(
        1,
        "--count",
        "-n",
        min=1,
        help="Number of announcements"
    )
):
    """Generate stealth address announcement(s) for a recipient"""
    service = _get_service()

    try:
        meta = service.parse_meta_address(meta_address)
        announcements = [service.send_to(meta).announcement for _ in range(count)]
    except StealthCoreException as e:
        _fail(e.message)

    if output:
        existing: List[Announcement] = []
        if output.exists():
            try:
                existing = _load_announcements(service, output)
            except StealthCoreException as e:
                _fail(e.message)
        service.dump_announcements(existing + announcements, output)

    payload = [service.announcement_to_dict(ann) for ann in announcements]
    typer.echo(json.dumps(payload if count > 1 else payload[0], indent=2))


# ============================================================================
# RECIPIENT COMMANDS
# ============================================================================

@app.command("check")
def check(
    announcements_file: Path = typer.Argument(..., help="Announcements JSON file"),
    viewing_key: str = typer.Option(..., "--viewing-key", help="Viewing private key (hex)")
):
    """Filter announcements by view tag (viewing key only)"""
    service = _get_service()

    try:
        announcements = _load_announcements(service, announcements_file)
        viewing_sk = _parse_private_key(service, viewing_key)
        candidates = service.scan_view_tags(announcements, viewing_sk)
    except StealthCoreException as e:
        _fail(e.message)

    table = Table(title=f"View Tag Candidates ({len(candidates)}/{len(announcements)})")
    table.add_column("Stealth Address", style="cyan")
    table.add_column("View Tag", style="green")

    for ann in candidates:
        table.add_row(address_to_hex(ann.stealth_address), str(ann.view_tag))

    console.print(table)


@app.command("recover")
def recover(
    announcements_file: Path = typer.Argument(..., help="Announcements JSON file"),
    keys_file: Optional[Path] = typer.Option(
        None,
        "--keys",
        "-k",
        help="Keys JSON file created by 'keygen --output'"
    ),
    spending_key: Optional[str] = typer.Option(None, "--spending-key", help="Spending private key (hex)"),
    viewing_key: Optional[str] = typer.Option(None, "--viewing-key", help="Viewing private key (hex)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON output")
):
    """Recover stealth private keys for owned announcements"""
    service = _get_service()

    try:
        if keys_file:
            keys = _load_keys(service, keys_file)
        elif spending_key and viewing_key:
            keys = service.import_meta_keypair(spending_key, viewing_key)
        else:
            _fail("Provide --keys or both --spending-key and --viewing-key")

        announcements = _load_announcements(service, announcements_file)
        matches = service.scan(announcements, keys)
        results = [service.match_to_dict(match) for match in matches]
    except StealthCoreException as e:
        _fail(e.message)

    if as_json:
        typer.echo(json.dumps(results, indent=2))
        return

    table = Table(title=f"Owned Stealth Addresses ({len(results)}/{len(announcements)})")
    table.add_column("Stealth Address", style="cyan")
    table.add_column("Private Key", style="yellow")

    for result in results:
        table.add_row(result["stealth_address"], result["stealth_private_key"])

    console.print(table)


# ============================================================================
# INFO
# ============================================================================

@app.command("info")
def info():
    """Show active curve parameters"""
    service = _get_service()
    backend = service.backend
    config = service.config

    table = Table(title="StealthCore", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    build = get_build_info()
    table.add_row("Version", build["version"])
    table.add_row("Supported curves", ", ".join(build["supported_curves"]))
    table.add_row("Curve", backend.name)
    table.add_row("Field modulus bits", str(backend.field_modulus.bit_length()))
    table.add_row("Group order", hex(backend.curve_order))
    table.add_row("Point size", f"{backend.point_size} bytes")
    table.add_row("Address length", f"{config.address_length} bytes")
    table.add_row("Domain tag", config.hash_domain_tag or "-")
    table.add_row("Scan workers", str(config.scan_workers))

    console.print(table)


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

@app.callback()
def main(
    curve: Optional[str] = typer.Option(
        None,
        "--curve",
        "-c",
        help=f"Curve: {', '.join(c.value for c in CurveId)} (overrides STEALTH_CURVE)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose output"
    )
):
    """
    StealthCore - ERC-5564 stealth addresses

    Genera meta-address, announcement e scansiona pagamenti stealth.
    """
    config = get_settings()
    if curve:
        try:
            config = config.model_copy(update={"curve": CurveId.parse(curve)})
        except ValueError as e:
            _fail(str(e))

    setup_logging(
        log_level="DEBUG" if verbose else config.log_level,
        log_to_file=config.log_to_file,
        log_dir=config.log_dir,
        log_format=config.log_format,
        enable_console=config.enable_console_log,
    )

    state.config = config
    state.service = None

    if verbose:
        console.print("[dim]Verbose mode enabled[/dim]")


if __name__ == "__main__":
    app()


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "app",
]
