"""Tests for p2p_common.errors and p2p_common.response."""

from datetime import UTC, datetime
from decimal import Decimal

from src.p2p_common.errors import (
    AmountOutOfBoundsError,
    AppError,
    ClaimNotReadyError,
    ForbiddenError,
    InsufficientBalanceError,
    InsufficientLockedBalanceError,
    InvalidAmountError,
    InvalidStateError,
    NotFoundError,
    PaymentNotConfirmedError,
    PriceUnavailableError,
    UnauthenticatedError,
    ValidationError,
)
from src.p2p_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert err.details is None

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestSpecificErrors:
    def test_unauthenticated(self) -> None:
        err = UnauthenticatedError()
        assert (err.code, err.http_status) == (1001, 401)

    def test_validation_names_field(self) -> None:
        err = ValidationError("unit_price", "out of band")
        assert err.code == 2001
        assert err.http_status == 422
        assert err.field == "unit_price"
        assert err.details == {"field": "unit_price"}

    def test_invalid_amount_is_validation(self) -> None:
        err = InvalidAmountError(Decimal("-1"))
        assert isinstance(err, ValidationError)
        assert err.code == 2002
        assert err.field == "amount"

    def test_insufficient_balance(self) -> None:
        err = InsufficientBalanceError(required=Decimal("50"), available=Decimal("30"))
        assert err.code == 2003
        assert err.http_status == 422
        assert "50" in err.message and "30" in err.message
        assert err.details == {"required": "50", "available": "30"}

    def test_insufficient_locked(self) -> None:
        err = InsufficientLockedBalanceError(Decimal("5"), Decimal("1"))
        assert (err.code, err.http_status) == (2004, 409)

    def test_claim_not_ready_carries_remaining(self) -> None:
        at = datetime(2026, 1, 1, 15, 0, tzinfo=UTC)
        err = ClaimNotReadyError(120, at)
        assert (err.code, err.http_status) == (3001, 429)
        assert err.remaining_seconds == 120
        assert err.next_claim_at == at
        assert err.details == {
            "time_remaining_seconds": 120,
            "next_claim_at": "2026-01-01T15:00:00+00:00",
        }

    def test_offer_errors(self) -> None:
        assert NotFoundError("Offer", "42").http_status == 404
        assert InvalidStateError("closed").code == 4002
        assert ForbiddenError().http_status == 403
        assert PaymentNotConfirmedError("42", Decimal("3")).code == 4005

    def test_amount_out_of_bounds_is_validation(self) -> None:
        err = AmountOutOfBoundsError(Decimal("1"), Decimal("2"), Decimal("10"))
        assert isinstance(err, ValidationError)
        assert err.field == "trade_amount"
        assert err.code == 4004

    def test_price_unavailable(self) -> None:
        assert PriceUnavailableError().http_status == 503


class TestResponse:
    def test_success_response(self) -> None:
        resp = success_response({"a": 1})
        assert isinstance(resp, ApiResponse)
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"a": 1}
        assert resp.request_id.startswith("req_")

    def test_error_response_carries_details(self) -> None:
        resp = error_response(3001, "wait", {"time_remaining_seconds": 5})
        assert resp.code == 3001
        assert resp.data == {"time_remaining_seconds": 5}
