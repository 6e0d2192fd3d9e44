"""Tests for write-path form validation."""

from __future__ import annotations

from typing import Any

import pytest

from standctl.domain.errors import ValidationError
from standctl.domain.forms import (
    build_signup_payload,
    build_stand_buyer_payload,
    build_stand_record,
)


def _stand_form(**overrides: Any) -> dict[str, Any]:
    form: dict[str, Any] = {
        "name": " Plot 7 ",
        "stand_number": "A-7",
        "type": "residential",
        "price": "120000",
        "size": 450,
        "location": "North Block",
    }
    form.update(overrides)
    return form


def _buyer_form(**overrides: Any) -> dict[str, Any]:
    form: dict[str, Any] = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "phone_number": "0771234567",
    }
    form.update(overrides)
    return form


class TestBuildStandRecord:
    def test_valid_form(self) -> None:
        record = build_stand_record(**_stand_form())
        assert record.name == "Plot 7"
        assert record.price == 120000
        assert record.size == 450
        assert record.status == "available"
        assert record.description is None

    def test_status_normalized(self) -> None:
        assert build_stand_record(**_stand_form(status=" SOLD ")).status == "sold"

    @pytest.mark.parametrize("missing", ["name", "stand_number", "type", "location"])
    def test_required_fields(self, missing: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            build_stand_record(**_stand_form(**{missing: "  "}))
        assert exc_info.value.message == "Please fill in all required stand details."
        assert exc_info.value.code == "VALIDATION_FAILED"

    @pytest.mark.parametrize(("price", "size"), [("abc", 1), (1, float("nan")), (None, 1)])
    def test_numbers_must_be_finite(self, price: Any, size: Any) -> None:
        with pytest.raises(ValidationError) as exc_info:
            build_stand_record(**_stand_form(price=price, size=size))
        assert exc_info.value.message == "Price and size must be valid numbers."


class TestBuildStandBuyerPayload:
    def test_payload_uses_full_name(self) -> None:
        payload = build_stand_buyer_payload(**_buyer_form(notes=" VIP "))
        assert payload == {
            "fullName": "Ada Lovelace",
            "email": "ada@example.com",
            "phoneNumber": "0771234567",
            "nationalIdentityNumber": None,
            "notes": "VIP",
        }

    def test_missing_fields_listed(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            build_stand_buyer_payload(**_buyer_form(email="", phone_number=" "))
        assert exc_info.value.message == "Please complete all required buyer fields."
        assert exc_info.value.fields == ["email", "phoneNumber"]


class TestBuildSignupPayload:
    def test_payload(self) -> None:
        payload = build_signup_payload(**_buyer_form(password="s3cret"))
        assert payload["firstName"] == "Ada"
        assert payload["password"] == "s3cret"
        assert "nationalIdentityNumber" not in payload

    def test_national_id_included_when_given(self) -> None:
        payload = build_signup_payload(
            **_buyer_form(password="s3cret", national_identity_number=" 63-1234 ")
        )
        assert payload["nationalIdentityNumber"] == "63-1234"

    def test_password_required(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            build_signup_payload(**_buyer_form(password=""))
        assert exc_info.value.message == "Please complete all required fields."
        assert exc_info.value.fields == ["password"]
