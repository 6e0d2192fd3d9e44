"""Write-path input validation.

Each builder trims its inputs, checks required fields and returns the
payload the directory expects, or raises :class:`ValidationError`
naming the missing fields. Nothing here touches the network.
"""

from __future__ import annotations

import math
from typing import Any

from standctl.domain.errors import ValidationError
from standctl.domain.lifecycle import normalize_status
from standctl.domain.models import StandCreationRecord


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _require(values: dict[str, str], message: str) -> None:
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ValidationError(message, fields=missing)


def _finite(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def build_stand_record(
    *,
    name: str,
    stand_number: str,
    type: str,
    price: Any,
    size: Any,
    location: str,
    status: str | None = None,
    description: str | None = None,
) -> StandCreationRecord:
    """Validate a single-stand form.

    Name, number, type and location must be non-blank and price/size
    must be finite numbers. Status defaults to ``available``.
    """
    required = {
        "name": _clean(name),
        "standNumber": _clean(stand_number),
        "type": _clean(type),
        "location": _clean(location),
    }
    _require(required, "Please fill in all required stand details.")

    numbers = {"price": _finite(price), "size": _finite(size)}
    invalid = [key for key, number in numbers.items() if number is None]
    if invalid:
        raise ValidationError("Price and size must be valid numbers.", fields=invalid)

    return StandCreationRecord(
        name=required["name"],
        stand_number=required["standNumber"],
        type=required["type"],
        price=numbers["price"],
        size=numbers["size"],
        location=required["location"],
        status=normalize_status(status),
        description=_clean(description) or None,
    )


def build_stand_buyer_payload(
    *,
    first_name: str,
    last_name: str,
    email: str,
    phone_number: str,
    national_identity_number: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """Validate the add-buyer-to-stand form and build its request body."""
    required = {
        "firstName": _clean(first_name),
        "lastName": _clean(last_name),
        "email": _clean(email),
        "phoneNumber": _clean(phone_number),
    }
    _require(required, "Please complete all required buyer fields.")
    return {
        "fullName": f"{required['firstName']} {required['lastName']}",
        "email": required["email"],
        "phoneNumber": required["phoneNumber"],
        "nationalIdentityNumber": _clean(national_identity_number) or None,
        "notes": _clean(notes) or None,
    }


def build_signup_payload(
    *,
    first_name: str,
    last_name: str,
    email: str,
    phone_number: str,
    password: str,
    national_identity_number: str | None = None,
) -> dict[str, Any]:
    """Validate a standalone buyer signup and build its request body."""
    required = {
        "firstName": _clean(first_name),
        "lastName": _clean(last_name),
        "email": _clean(email),
        "phoneNumber": _clean(phone_number),
        "password": _clean(password),
    }
    _require(required, "Please complete all required fields.")
    payload: dict[str, Any] = dict(required)
    national_id = _clean(national_identity_number)
    if national_id:
        payload["nationalIdentityNumber"] = national_id
    return payload
