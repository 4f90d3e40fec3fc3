"""Tests for mm_common.errors and mm_common.response."""

from unittest.mock import MagicMock

from src.mm_common.errors import (
    AdminRequiredError,
    AppError,
    InvalidCredentialsError,
    ItemNotFoundError,
    ItemNotIssuedError,
    MemberNotFoundError,
    MissingBalanceSnapshotError,
    NegativeAmountError,
    TransactionNotEditableError,
    UnknownTransactionTypeError,
)
from src.mm_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=1005, message="Mobile taken", http_status=409)
        assert err.http_status == 409

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestSpecificErrors:
    def test_invalid_credentials(self) -> None:
        err = InvalidCredentialsError()
        assert err.code == 1001
        assert err.http_status == 401

    def test_admin_required(self) -> None:
        err = AdminRequiredError()
        assert err.code == 1003
        assert err.http_status == 403

    def test_member_not_found(self) -> None:
        err = MemberNotFoundError("12345")
        assert err.code == 1004
        assert err.http_status == 404
        assert "12345" in err.message

    def test_item_not_found(self) -> None:
        err = ItemNotFoundError("B1")
        assert err.code == 2001
        assert err.http_status == 404

    def test_item_not_issued(self) -> None:
        err = ItemNotIssuedError("B1", "12345")
        assert err.code == 2003
        assert "B1" in err.message
        assert "12345" in err.message

    def test_negative_amount(self) -> None:
        err = NegativeAmountError("loan_emi", -5)
        assert err.code == 3002
        assert err.http_status == 422
        assert "-5" in err.message

    def test_unknown_type(self) -> None:
        err = UnknownTransactionTypeError("REFUND")
        assert err.code == 3003
        assert "REFUND" in err.message

    def test_not_editable(self) -> None:
        err = TransactionNotEditableError("t1", "deleted")
        assert err.code == 3004
        assert err.http_status == 409

    def test_missing_snapshot(self) -> None:
        err = MissingBalanceSnapshotError("REGULAR")
        assert err.code == 3005
        assert err.http_status == 500
        assert "REGULAR" in err.message


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"id": "abc"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "abc"}

    def test_success_copies_request_id(self) -> None:
        request = MagicMock()
        request.state.request_id = "req_abc123"
        resp = success_response(None, request, message="done")
        assert resp.request_id == "req_abc123"
        assert resp.message == "done"

    def test_error(self) -> None:
        resp = error_response(2001, "Item not found: B1")
        assert resp.code == 2001
        assert resp.data is None

    def test_serialization(self) -> None:
        d = success_response({"total": 65}).model_dump()
        assert set(d) == {"code", "message", "data", "timestamp", "request_id"}
        assert isinstance(ApiResponse().request_id, str)
