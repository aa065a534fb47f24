"""User management CLI commands."""

import asyncio

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from scribe.database import get_session_context
from scribe.models import UserRole
from scribe.schemas import UserRegister
from scribe.services import accounts

console = Console()
app = typer.Typer(help="User management commands")


@app.command("list")
def list_users():
    """List all users."""

    async def _list():
        async with get_session_context() as session:
            result = await accounts.list_users(session)

        table = Table(title="Users")
        table.add_column("ID", style="cyan")
        table.add_column("Email", style="green")
        table.add_column("Name")
        table.add_column("Role", style="magenta")
        table.add_column("Verified")
        table.add_column("Created", style="dim")

        for user in result.data or []:
            verified = "[green]Yes[/green]" if user.is_verified else "No"
            created = user.created_at.strftime("%Y-%m-%d") if user.created_at else "-"
            table.add_row(
                user.id,
                user.email,
                f"{user.first_name} {user.last_name}",
                user.role.value,
                verified,
                created,
            )

        console.print(table)

    asyncio.run(_list())


@app.command("create-admin")
def create_admin(
    email: str = typer.Option(..., prompt=True, help="Admin email"),
    first_name: str = typer.Option(..., prompt=True, help="First name"),
    last_name: str = typer.Option(..., prompt=True, help="Last name"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password"
    ),
):
    """Create a verified administrator account."""
    try:
        data = UserRegister(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password,
            confirm_password=password,
        )
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e.errors()[0]['msg']}")
        raise typer.Exit(1) from e

    async def _create():
        async with get_session_context() as session:
            return await accounts.create_user(session, data, role=UserRole.ADMIN, is_verified=True)

    result = asyncio.run(_create())
    if not result.success:
        console.print(f"[red]Error:[/red] {result.message}")
        raise typer.Exit(1)

    console.print(f"[green]Created admin:[/green] {data.email}")


@app.command("verify")
def verify_user(email: str = typer.Argument(..., help="User email")):
    """Mark a user verified without an email code."""

    async def _verify():
        async with get_session_context() as session:
            found = await accounts.get_user_by_email(session, email.strip().lower())
            if not found.success or found.data is None:
                return found
            return await accounts.set_verified(session, found.data.id)

    result = asyncio.run(_verify())
    if not result.success:
        console.print(f"[red]Error:[/red] {result.message}")
        raise typer.Exit(1)

    console.print(f"[green]Verified:[/green] {email}")


@app.command("delete")
def delete_user(
    email: str = typer.Argument(..., help="User email"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
):
    """Delete a user along with their posts and codes."""
    if not force and not typer.confirm(f"Delete {email} and all of their posts?"):
        console.print("[dim]Cancelled[/dim]")
        raise typer.Exit(0)

    async def _delete():
        async with get_session_context() as session:
            found = await accounts.get_user_by_email(session, email.strip().lower())
            if not found.success or found.data is None:
                return found
            return await accounts.delete_user(session, found.data.id)

    result = asyncio.run(_delete())
    if not result.success:
        console.print(f"[red]Error:[/red] {result.message}")
        raise typer.Exit(1)

    console.print(f"[green]Deleted:[/green] {email}")
