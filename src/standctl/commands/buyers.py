"""Command group: buyer roster and buyer accounts."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from standctl.commands._base import StandGroup
from standctl.services.buyers import BuyerService
from standctl.services.roster import RosterService

if TYPE_CHECKING:
    from standctl.commands._context import AppContext


_BUYERS_EXAMPLES = """\
  standctl buyers roster
  standctl buyers roster --stand st_1 --stand st_2
  standctl buyers create --first-name Ada --last-name Lovelace \\
      --email ada@example.com --phone 0771234567 --password s3cret"""


@click.group(cls=StandGroup, examples=_BUYERS_EXAMPLES)
@click.pass_obj
def buyers(app: AppContext) -> None:
    """Aggregate and register buyers."""


@buyers.command(
    examples="""\
  standctl buyers roster
  standctl buyers roster --stand st_1 --stand st_2
  standctl --json buyers roster"""
)
@click.option(
    "--stand",
    "stand_ids",
    multiple=True,
    help="Restrict the roster to these stand ids (repeatable).",
)
@click.pass_obj
def roster(app: AppContext, stand_ids: tuple[str, ...]) -> None:
    """List every buyer across stands, deduplicated and sorted by name."""
    svc = RosterService(app.directory, app.request_context)
    app.emit(app.run(svc.roster(stand_ids=stand_ids or None)))


@buyers.command(
    examples="""\
  standctl buyers create --first-name Ada --last-name Lovelace \\
      --email ada@example.com --phone 0771234567 --password s3cret"""
)
@click.option("--first-name", default="", help="First name.")
@click.option("--last-name", default="", help="Last name.")
@click.option("--email", default="", help="Email address.")
@click.option("--phone", "phone_number", default="", help="Phone number.")
@click.option("--national-id", "national_identity_number", default=None, help="National ID.")
@click.option(
    "--password",
    default="",
    envvar="STANDCTL_BUYER_PASSWORD",
    help="Initial password (or STANDCTL_BUYER_PASSWORD).",
)
@click.pass_obj
def create(
    app: AppContext,
    first_name: str,
    last_name: str,
    email: str,
    phone_number: str,
    national_identity_number: str | None,
    password: str,
) -> None:
    """Register a buyer account that can later be linked to stands."""
    svc = BuyerService(app.directory, app.request_context)
    result = app.run(
        svc.create_buyer(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone_number=phone_number,
            password=password,
            national_identity_number=national_identity_number,
        )
    )
    app.emit(result)
