"""Flask CLI commands seeding the reference data the API relies on."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from commerce_api.models.role import ADMIN_ROLE_NAME, Role
from commerce_api.services._shared.errors import ServiceError
from commerce_api.uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


def seed_roles(role_names: list[str]) -> dict[str, int]:
    """Create missing roles; existing ones are left untouched.

    :param role_names: Role names to ensure.
    :returns: Counters ``{"created": n, "existing": m}``.
    """
    counters = {"created": 0, "existing": 0}
    with SQLAlchemyUnitOfWork() as uow:
        for name in role_names:
            if uow.roles.get_by_name(name) is not None:
                counters["existing"] += 1
                continue
            uow.roles.add(Role(name=name))
            counters["created"] += 1
            LOGGER.info("Seeded role %s", name)
        uow.save()
    return counters


def _echo_summary(summary: dict[str, dict[str, int]]) -> None:
    """Pretty-print a tabular summary of seed results."""
    click.echo("Seed summary:")
    width = max(len(name) for name in summary)
    for table, counters in sorted(summary.items()):
        created = counters.get("created", 0)
        existing = counters.get("existing", 0)
        click.echo(f"  {table.ljust(width)}  created={created:>2}  existing={existing:>2}")


@click.group("seed")
@click.option("--verbose", is_flag=True, help="Enable verbose logging for seeding.")
@click.pass_context
def seed_cli(ctx: click.Context, verbose: bool) -> None:
    """Collection of database seeding commands."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    LOGGER.setLevel(logging.DEBUG if verbose else logging.INFO)


@seed_cli.command("roles")
@with_appcontext
def roles_command() -> None:
    """Ensure the default and ``Admin`` roles exist (idempotent)."""
    names = [current_app.config.get("DEFAULT_ROLE_NAME", "user"), ADMIN_ROLE_NAME]
    try:
        counters = seed_roles(names)
    except ServiceError as exc:
        raise click.ClickException(f"Seeding failed: {exc}") from exc
    _echo_summary({"roles": counters})
