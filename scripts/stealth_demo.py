#!/usr/bin/env python3
"""
StealthCore - Stealth Address Demo
====================================
Demo script per stealth addresses ERC-5564.

Usage:
    python scripts/stealth_demo.py [bn254|bls12_381|bls12_377]
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from stealth_core.config import override_settings
from stealth_core.domain.hashing import address_to_hex
from stealth_core.services.stealth_service import StealthService
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()


def main():
    """Run stealth address demo"""

    curve = sys.argv[1] if len(sys.argv) > 1 else "bn254"
    service = StealthService(override_settings(curve=curve, enable_console_log=False))
    backend = service.backend

    console.print(Panel.fit(
        "[cyan]StealthCore - Stealth Address Demo[/cyan]\n\n"
        f"Curve: {backend.name}",
        border_style="cyan"
    ))

    # ========================================================================
    # STEP 1: Receiver creates meta-address
    # ========================================================================

    console.print("\n[yellow]Step 1: Receiver creates stealth meta-address[/yellow]")

    receiver = service.create_meta_keypair()
    meta_text = service.encode_meta_address(receiver.meta_address)

    table = Table(title="Stealth Meta-Address")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Spending Key", backend.serialize_point(receiver.spending.public_key).hex()[:16] + "...")
    table.add_row("Viewing Key", backend.serialize_point(receiver.viewing.public_key).hex()[:16] + "...")
    table.add_row("Meta-address", meta_text[:32] + "...")

    console.print(table)
    console.print("\n[dim]Receiver shares the meta-address publicly[/dim]")

    # ========================================================================
    # STEP 2: Sender creates announcement
    # ========================================================================

    console.print("\n[yellow]Step 2: Sender derives stealth address[/yellow]")

    announcement, _ = service.send_to(meta_text)

    console.print("[green]✅ Announcement created[/green]")
    console.print(f"[cyan]Stealth address: {address_to_hex(announcement.stealth_address)}[/cyan]")
    console.print(f"[cyan]View tag: {announcement.view_tag}[/cyan]")

    # ========================================================================
    # STEP 3: Receiver scans
    # ========================================================================

    console.print("\n[yellow]Step 3: Receiver scans announcements[/yellow]")

    if service.check(announcement, receiver.viewing_private_key):
        console.print("[green]✅ View tag matches[/green]")

    match = service.recover(announcement, receiver)
    if match is None:
        console.print("[red]❌ Announcement not for this receiver[/red]")
        return 1

    console.print("[green]✅ Ownership proven[/green]")
    console.print(f"[cyan]Stealth private key: {backend.scalar_to_bytes(match.stealth_private_key).hex()[:32]}...[/cyan]")
    console.print(f"[cyan]Key verifies: {match.verify(backend)}[/cyan]")

    # ========================================================================
    # STEP 4: Privacy demonstration
    # ========================================================================

    console.print("\n[yellow]Step 4: Privacy demonstration[/yellow]")

    other = service.create_meta_keypair()
    if service.recover(announcement, other) is None:
        console.print("[green]✅ Other receiver cannot claim the announcement[/green]")

    console.print("\n" + "=" * 60)
    console.print("[green]Stealth Address Demo Complete![/green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
