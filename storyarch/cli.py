"""CLI entry point for storyarch."""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, NoReturn, Optional

import click

from storyarch import __version__
from storyarch.config.settings import RegistryConfig, load_config
from storyarch.models.project import Project
from storyarch.registry.projects import ProjectRegistry
from storyarch.utils.logging import (
    configure_logging,
    get_correlation_id,
    get_logger,
    set_command,
)
from storyarch.utils.result import ExitCode, RegistryError

# Default paths
DEFAULT_CONFIG = "./config"


class Context:
    """CLI context for sharing state between commands."""

    def __init__(self, config: RegistryConfig) -> None:
        self.config = config
        self.logger = get_logger("cli")
        self._registry: Optional[ProjectRegistry] = None

    def registry(self) -> ProjectRegistry:
        """Get the registry, loading the snapshot on first use if one exists."""
        if self._registry is None:
            registry = ProjectRegistry(self.config.snapshot_path)
            if registry.store.exists():
                result = registry.load_snapshot()
                if result.is_err():
                    fail(result.unwrap_err())
            else:
                self.logger.info(
                    "snapshot_not_found",
                    path=str(self.config.snapshot_path),
                )
            self._registry = registry
        return self._registry

    def save(self) -> None:
        """Persist the registry, exiting on failure."""
        result = self.registry().save_snapshot()
        if result.is_err():
            fail(result.unwrap_err())


pass_context = click.make_pass_decorator(Context)


def output_json(data: dict) -> None:
    """Output JSON to stdout."""
    click.echo(json.dumps(data, indent=2, default=str))


def output_projects(projects: dict[int, Project]) -> None:
    output_json({
        "status": "success",
        "count": len(projects),
        "projects": [projects[project_id].to_dict() for project_id in sorted(projects)],
    })


def fail(error: RegistryError) -> NoReturn:
    """Report a registry error and exit with its exit code."""
    output_json({
        "status": "error",
        "kind": error.kind.value,
        "message": str(error),
    })
    sys.exit(ExitCode.for_kind(error.kind))


def parse_illustration_services(
    ctx: click.Context,
    param: click.Parameter,
    value: str,
) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"must be valid JSON ({e})") from e


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=False, path_type=Path),
    default=DEFAULT_CONFIG,
    help="Path to config directory",
)
@click.option(
    "--snapshot",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Path to the project snapshot (overrides config)",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"], case_sensitive=False),
    default=None,
    help="Logging level (overrides config)",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "text"], case_sensitive=False),
    default=None,
    help="Log format (overrides config)",
)
@click.version_option(version=__version__)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path,
    snapshot: Optional[Path],
    log_level: Optional[str],
    log_format: Optional[str],
) -> None:
    """
    storyarch - manage shared creative projects.

    Projects are owned by their creator, can be shared with team members,
    and are persisted as a single snapshot file.
    """
    result = load_config(config, snapshot_path=snapshot)
    if result.is_err():
        output_json({"status": "error", "kind": "config", "message": str(result.unwrap_err())})
        sys.exit(ExitCode.CONFIG_ERROR)

    registry_config = result.unwrap()

    configure_logging(
        level=log_level or registry_config.logging.level,
        format_type=log_format or registry_config.logging.format,
    )
    get_correlation_id()
    if ctx.invoked_subcommand:
        set_command(ctx.invoked_subcommand)

    ctx.obj = Context(registry_config)


@cli.command()
@click.argument("name")
@click.option("--creator", required=True, help="Creating user")
@click.option("--description", default="", help="Project description")
@click.option(
    "--team-member",
    "team_members",
    multiple=True,
    help="User to share the project with (can be repeated)",
)
@click.option(
    "--date",
    "created_date",
    type=click.DateTime(),
    default=None,
    help="Creation date (default: now, UTC)",
)
@click.option(
    "--illustration-services",
    default="{}",
    callback=parse_illustration_services,
    help="Illustration service configuration as JSON",
)
@pass_context
def create(
    ctx: Context,
    name: str,
    creator: str,
    description: str,
    team_members: tuple[str, ...],
    created_date: Optional[datetime],
    illustration_services: Any,
) -> None:
    """Create a new project."""
    ctx.logger.info("create_started", name=name, creator=creator)

    registry = ctx.registry()
    result = registry.create_project(
        name=name,
        description=description,
        creator=creator,
        created_date=created_date or datetime.now(timezone.utc),
        illustration_services=illustration_services,
        team_members=list(team_members) if team_members else None,
    )
    if result.is_err():
        fail(result.unwrap_err())

    ctx.save()
    project = result.unwrap()
    output_json({
        "status": "success",
        "message": f"Created project {project.project_id}",
        "project": project.to_dict(),
    })


@cli.command(name="list")
@click.option("--creator", required=True, help="Creating user")
@pass_context
def list_projects(ctx: Context, creator: str) -> None:
    """List projects created by a user."""
    output_projects(ctx.registry().get_projects_by_creator(creator))


@cli.command()
@click.option("--user", required=True, help="Team member")
@pass_context
def shared(ctx: Context, user: str) -> None:
    """List projects shared with a user."""
    output_projects(ctx.registry().get_shared_projects(user))


@cli.command(name="open")
@click.argument("project_id")
@click.option("--user", required=True, help="Requesting user")
@pass_context
def open_project(ctx: Context, project_id: str, user: str) -> None:
    """Open a project as its creator or a team member."""
    result = ctx.registry().open_project(project_id, user)
    if result.is_err():
        fail(result.unwrap_err())
    output_projects(result.unwrap())


@cli.command()
@click.argument("project_id")
@click.option("--user", required=True, help="Requesting user")
@pass_context
def delete(ctx: Context, project_id: str, user: str) -> None:
    """Delete a project. Only its creator may do so."""
    ctx.logger.info("delete_started", project_id=project_id, user=user)

    result = ctx.registry().delete_project(project_id, user)
    if result.is_err():
        fail(result.unwrap_err())

    ctx.save()
    output_json({
        "status": "success",
        "message": f"Deleted project {result.unwrap().project_id}",
    })


@cli.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format",
)
@pass_context
def status(ctx: Context, output_format: str) -> None:
    """Show registry state."""
    stats = ctx.registry().get_stats()

    if output_format == "json":
        output_json({
            "snapshot_path": str(ctx.config.snapshot_path),
            **stats.to_dict(),
        })
    else:
        click.echo("storyarch registry status")
        click.echo("=" * 40)
        click.echo(f"Snapshot: {ctx.config.snapshot_path}")
        click.echo(f"Projects: {stats.total_projects}")
        click.echo(f"Shared projects: {stats.shared_projects}")
        click.echo(f"Creators: {stats.creators}")
        for creator, count in sorted(stats.projects_by_creator.items()):
            click.echo(f"  {creator}: {count}")


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        logger = get_logger("cli")
        logger.error("cli_error", error=str(e))
        sys.exit(ExitCode.GENERAL_ERROR)


if __name__ == "__main__":
    main()
