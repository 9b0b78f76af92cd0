from __future__ import annotations

import json
from typing import Optional

import typer
import uvicorn

from rangecore.config import settings
from rangecore.exceptions import NotFoundError
from rangecore.logic import list_drill_types, list_library_templates, resolve_access
from rangecore.domain import RoleSnapshot, normalize_org_role, normalize_team_role

cli = typer.Typer(help="rangecore CLI (drill rules and role permissions)")


@cli.command()
def version() -> None:
    """Print runtime version."""
    typer.echo(f"rangecore {settings.app.version}")


@cli.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host to bind"),
    port: int = typer.Option(8000, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload for local development"),
) -> None:
    """Run the rangecore API server."""
    uvicorn.run(
        "rangecore.api.main:app",
        host=host,
        port=port,
        reload=reload,
        app_dir="src",
    )


@cli.command("drill-types")
def drill_types() -> None:
    """List drill types with their required parameters."""
    for definition in list_drill_types():
        required = ", ".join(definition.required_params)
        typer.echo(f"{definition.id.value:<14} {definition.name:<14} required: {required}")


@cli.command()
def library(drill_type: Optional[str] = typer.Option(None, "--type", help="Filter by drill type")) -> None:
    """List library drill templates."""
    try:
        templates = list_library_templates(drill_type)
    except NotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    for template in templates:
        locked = ",".join(template.locked_params) or "-"
        typer.echo(f"{template.id:<26} {template.name:<26} locked: {locked}")


@cli.command()
def permissions(
    role: str = typer.Argument(..., help="Organization role as sent by the identity provider"),
    team_role: Optional[str] = typer.Option(None, "--team-role", help="Team role, if any"),
) -> None:
    """Print the resolved permission sets as JSON."""
    snapshot = RoleSnapshot(org_role=normalize_org_role(role), team_role=normalize_team_role(team_role))
    grant = resolve_access(snapshot)
    typer.echo(json.dumps(grant.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    cli()
