"""Database migration CLI commands (thin wrappers around Alembic)."""

import subprocess
import sys

import typer
from rich.console import Console

console = Console()
app = typer.Typer(help="Database management commands")


def _alembic(*args: str) -> bool:
    result = subprocess.run([sys.executable, "-m", "alembic", *args], check=False)
    return result.returncode == 0


@app.command("migrate")
def migrate(revision: str = typer.Argument("head", help="Target revision (default: head)")):
    """Upgrade the schema to ``revision``."""
    console.print(f"[dim]Running migrations to {revision}...[/dim]")
    if not _alembic("upgrade", revision):
        console.print("[red]Migration failed![/red]")
        raise typer.Exit(1)
    console.print("[green]Migrations complete![/green]")


@app.command("rollback")
def rollback(revision: str = typer.Argument("-1", help="Target revision (default: one step back)")):
    """Downgrade the schema to ``revision``."""
    console.print(f"[dim]Rolling back to {revision}...[/dim]")
    if not _alembic("downgrade", revision):
        console.print("[red]Rollback failed![/red]")
        raise typer.Exit(1)
    console.print("[green]Rollback complete![/green]")


@app.command("current")
def current():
    """Show the current schema revision."""
    _alembic("current")


@app.command("reset")
def reset(force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation")):
    """Drop every table and migrate back up. Deletes all accounts and posts."""
    if not force:
        console.print("[bold red]WARNING:[/bold red] This will delete ALL users and posts!")
        if not typer.confirm("Are you sure you want to continue?"):
            console.print("[dim]Cancelled[/dim]")
            raise typer.Exit(0)

    if not _alembic("downgrade", "base") or not _alembic("upgrade", "head"):
        console.print("[red]Database reset failed![/red]")
        raise typer.Exit(1)
    console.print("[green]Database reset complete![/green]")
