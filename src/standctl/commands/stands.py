"""Command group: stand listing, creation, and allocation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from standctl.commands._base import StandGroup
from standctl.services.allocation import DEFAULT_RELEASE_REASON, AllocationCoordinator
from standctl.services.stands import StandService

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from standctl.commands._context import AppContext
    from standctl.services.result import ServiceResult


_STANDS_EXAMPLES = """\
  standctl stands list --status available
  standctl stands show st_123
  standctl stands sell st_123 --buyer-user usr_9 --note "Paid in full"
  standctl stands release st_123 lnk_4 --reason "Buyer withdrew"
  standctl --json stands available"""


def _coordinator(app: AppContext) -> AllocationCoordinator:
    return AllocationCoordinator(app.directory, app.request_context)


async def _loaded_then(
    coordinator: AllocationCoordinator,
    stand_id: str,
    action: Callable[[], Awaitable[ServiceResult]],
) -> ServiceResult:
    """Load the stand into the coordinator, then run *action* on it."""
    loaded = await coordinator.load(stand_id)
    if not loaded.ok:
        return loaded
    result = await action()
    if not loaded.warnings:
        return result
    return result.model_copy(update={"warnings": [*loaded.warnings, *result.warnings]})


@click.group(cls=StandGroup, examples=_STANDS_EXAMPLES)
@click.pass_obj
def stands(app: AppContext) -> None:
    """List, create, sell, and release stands."""


@stands.command(
    "list",
    examples="""\
  standctl stands list
  standctl stands list --status sold
  standctl -q stands list""",
)
@click.option("--status", default=None, help="Only stands with this status.")
@click.pass_obj
def list_cmd(app: AppContext, status: str | None) -> None:
    """List stands."""
    app.emit(app.run(StandService(app.directory, app.request_context).list_stands(status=status)))


@stands.command(examples="  standctl stands get st_123")
@click.argument("stand_id")
@click.pass_obj
def get(app: AppContext, stand_id: str) -> None:
    """Show one stand's details."""
    app.emit(app.run(StandService(app.directory, app.request_context).get_stand(stand_id)))


@stands.command(examples="  standctl stands available")
@click.pass_obj
def available(app: AppContext) -> None:
    """Count stands that are still available."""
    app.emit(app.run(StandService(app.directory, app.request_context).available_count()))


@stands.command(
    examples="""\
  standctl stands create --name "Plot 7" --number A-7 --type residential \\
      --size 450 --price 120000 --location "North Block\""""
)
@click.option("--name", default="", help="Stand name.")
@click.option("--number", "stand_number", default="", help="Stand number.")
@click.option("--type", "stand_type", default="", help="Stand type (e.g. residential).")
@click.option("--price", default="", help="Price.")
@click.option("--size", default="", help="Size in square metres.")
@click.option("--location", default="", help="Location.")
@click.option("--status", default=None, help="Initial status (default: available).")
@click.option("--description", default=None, help="Free-text description.")
@click.pass_obj
def create(
    app: AppContext,
    name: str,
    stand_number: str,
    stand_type: str,
    price: str,
    size: str,
    location: str,
    status: str | None,
    description: str | None,
) -> None:
    """Create a single stand."""
    svc = StandService(app.directory, app.request_context)
    result = app.run(
        svc.create_stand(
            name=name,
            stand_number=stand_number,
            type=stand_type,
            price=price,
            size=size,
            location=location,
            status=status,
            description=description,
        )
    )
    app.emit(result)


@stands.command(examples="  standctl stands show st_123")
@click.argument("stand_id")
@click.pass_obj
def show(app: AppContext, stand_id: str) -> None:
    """Show a stand with its buyers and buyer links."""
    app.emit(app.run(_coordinator(app).load(stand_id)))


@stands.command(
    examples="""\
  standctl stands sell st_123 --buyer-user usr_9
  standctl stands sell st_123 --buyer-user usr_9 --note "Deposit received\""""
)
@click.argument("stand_id")
@click.option("--buyer-user", "buyer_user_id", required=True, help="Buyer account to link.")
@click.option("--note", default=None, help="Allocation note.")
@click.pass_obj
def sell(app: AppContext, stand_id: str, buyer_user_id: str, note: str | None) -> None:
    """Mark a stand sold and link it to a buyer account."""
    coordinator = _coordinator(app)
    result = app.run(
        _loaded_then(
            coordinator,
            stand_id,
            lambda: coordinator.sell_with_buyer(stand_id, buyer_user_id, note=note),
        )
    )
    app.emit(result)


@stands.command(
    examples="""\
  standctl stands release st_123 lnk_4
  standctl stands release st_123 lnk_4 --reason "Buyer withdrew\""""
)
@click.argument("stand_id")
@click.argument("link_id")
@click.option(
    "--reason", default="", help=f"Release reason (default: {DEFAULT_RELEASE_REASON!r})."
)
@click.pass_obj
def release(app: AppContext, stand_id: str, link_id: str, reason: str) -> None:
    """Release a buyer link on a stand."""
    coordinator = _coordinator(app)
    result = app.run(
        _loaded_then(
            coordinator,
            stand_id,
            lambda: coordinator.release_link(stand_id, link_id, reason=reason),
        )
    )
    app.emit(result)


@stands.command(examples="  standctl stands link st_123 --buyer-user usr_9 --notes 'Reserved'")
@click.argument("stand_id")
@click.option("--buyer-user", "buyer_user_id", required=True, help="Buyer account to link.")
@click.option("--notes", default=None, help="Link notes.")
@click.pass_obj
def link(app: AppContext, stand_id: str, buyer_user_id: str, notes: str | None) -> None:
    """Link a buyer account to a stand without selling it."""
    coordinator = _coordinator(app)
    result = app.run(
        _loaded_then(
            coordinator,
            stand_id,
            lambda: coordinator.link_buyer_user(stand_id, buyer_user_id, notes=notes),
        )
    )
    app.emit(result)


@stands.command(
    "add-buyer",
    examples="""\
  standctl stands add-buyer st_123 --first-name Ada --last-name Lovelace \\
      --email ada@example.com --phone 0771234567""",
)
@click.argument("stand_id")
@click.option("--first-name", default="", help="Buyer first name.")
@click.option("--last-name", default="", help="Buyer last name.")
@click.option("--email", default="", help="Buyer email.")
@click.option("--phone", "phone_number", default="", help="Buyer phone number.")
@click.option("--national-id", "national_identity_number", default=None, help="National ID.")
@click.option("--notes", default=None, help="Notes.")
@click.pass_obj
def add_buyer(
    app: AppContext,
    stand_id: str,
    first_name: str,
    last_name: str,
    email: str,
    phone_number: str,
    national_identity_number: str | None,
    notes: str | None,
) -> None:
    """Record a buyer directly on a stand."""
    result = app.run(
        _coordinator(app).add_buyer(
            stand_id,
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone_number=phone_number,
            national_identity_number=national_identity_number,
            notes=notes,
        )
    )
    app.emit(result)
