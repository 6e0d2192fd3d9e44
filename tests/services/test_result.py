"""Tests for ServiceResult and ServiceError."""

import json

import pytest
from pydantic import ValidationError

from standctl.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="get_stand", data={"id": "st_1"})
        assert result.ok is True
        assert result.op == "get_stand"
        assert result.data == {"id": "st_1"}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_error_construction(self) -> None:
        error = ServiceError(code="DIRECTORY_ERROR", message="Not found")
        result = ServiceResult(ok=False, op="get_stand", error=error)
        assert result.error is not None
        assert result.error.code == "DIRECTORY_ERROR"
        assert result.error.detail == {}

    def test_json_serialization(self) -> None:
        result = ServiceResult(
            ok=True,
            op="roster",
            data={"count": 2},
            warnings=["Could not load buyers for stand s1"],
        )
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["data"]["count"] == 2
        assert parsed["warnings"] == ["Could not load buyers for stand s1"]
        assert parsed["error"] is None

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="test")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]


class TestServiceError:
    def test_with_detail(self) -> None:
        error = ServiceError(
            code="VALIDATION_FAILED",
            message="Please fill in all required stand details.",
            detail={"fields": ["name"]},
        )
        assert error.detail["fields"] == ["name"]
