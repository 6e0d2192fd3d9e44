"""Entities exchanged with the Stand Directory Service.

Field names are snake_case in Python and camelCase on the wire; every
model accepts either spelling and ignores unknown server fields. Models
are frozen: local state changes go through ``model_copy(update=...)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field, field_validator
from pydantic import ValidationError as SchemaError
from pydantic.alias_generators import to_camel

from standctl.domain.lifecycle import StandStatus


class ApiModel(BaseModel):
    """Base for wire models: camelCase aliases, frozen, lenient on extras.

    Numeric ids and phone numbers arrive as JSON numbers from some
    endpoints; they are kept as strings.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the wire, dropping unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Stands ---


class StandUser(ApiModel):
    """The back-office user that created a stand."""

    id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    role: str | None = None


class Stand(ApiModel):
    """A sellable unit. ``status`` is an open string (see lifecycle)."""

    id: str
    name: str = ""
    stand_number: str = ""
    type: str | None = None
    price: float | None = None
    size: float | None = None
    location: str | None = None
    status: str = StandStatus.AVAILABLE
    description: str | None = None
    created_by: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    created_by_user: StandUser | None = None

    @field_validator("name", "stand_number", mode="before")
    @classmethod
    def _blank_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return StandStatus.AVAILABLE.value
        return value


class StandCreationRecord(ApiModel):
    """One stand ready for ``POST /stands`` or the bulk-create body.

    Optional fields that are ``None`` are omitted from the payload, so a
    missing price is never submitted as zero.
    """

    name: str
    stand_number: str
    type: str | None = None
    price: int | float | None = None
    size: int | float | None = None
    location: str | None = None
    status: str | None = None
    description: str | None = None


# --- Buyers and links ---


class Buyer(ApiModel):
    """A person eligible to buy a stand. ``id`` may be absent in bad payloads."""

    id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    national_identity_number: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class StandBuyerLink(ApiModel):
    """Association between a stand and a buyer.

    The link points at a buyer by id (``buyer_id`` for a directly added
    buyer, ``buyer_user_id`` for a buyer account) and may carry a
    denormalized ``buyer`` snapshot. It never owns the buyer.
    """

    id: str
    stand_id: str = ""
    buyer_id: str | None = None
    buyer_user_id: str | None = None
    status: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    released_at: str | None = None
    release_reason: str | None = None
    buyer: Buyer | None = None

    @property
    def buyer_ref(self) -> str | None:
        """The id of the referenced buyer, whichever reference is populated."""
        if self.buyer_id:
            return self.buyer_id
        if self.buyer_user_id:
            return self.buyer_user_id
        return self.buyer.id if self.buyer is not None else None

    @property
    def is_released(self) -> bool:
        return bool(self.released_at)


class RosterEntry(Buyer):
    """A buyer with the stands it is associated with (derived, never persisted)."""

    stand_ids: tuple[str, ...] = ()

    @computed_field(alias="standCount")  # type: ignore[prop-decorator]
    @property
    def stand_count(self) -> int:
        return len(self.stand_ids)


# --- Status updates ---


class StatusUpdateRequest(ApiModel):
    """Body for ``PATCH /stands/{id}/status``."""

    status: str
    buyer_user_id: str | None = None
    allocation_note: str | None = None


@dataclass(frozen=True)
class LinksPresent:
    """The server returned the stand's refreshed link collection."""

    links: tuple[StandBuyerLink, ...]


@dataclass(frozen=True)
class LinksAbsent:
    """The server acknowledged the update without a link collection."""


@dataclass(frozen=True)
class StatusUpdateOutcome:
    """Acknowledged status update: the new status plus the link variant."""

    status: str
    links: LinksPresent | LinksAbsent

    @classmethod
    def from_payload(cls, payload: Any, *, requested_status: str) -> StatusUpdateOutcome:
        """Build an outcome from a (possibly partial) server response.

        A missing ``status`` falls back to the requested one, since the
        server acknowledged the request. ``buyerLinks`` is only honoured
        when it is a list of well-formed links; anything else is treated
        as absent so the caller reloads.
        """
        data = payload if isinstance(payload, dict) else {}
        status = str(data.get("status") or requested_status)
        raw_links = data.get("buyerLinks")
        if isinstance(raw_links, list):
            try:
                links = tuple(StandBuyerLink.model_validate(item) for item in raw_links)
            except SchemaError:
                return cls(status=status, links=LinksAbsent())
            return cls(status=status, links=LinksPresent(links=links))
        return cls(status=status, links=LinksAbsent())
