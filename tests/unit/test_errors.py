"""Tests for em_common.errors, em_common.amounts and em_common.response."""

import pytest

from src.em_common.amounts import BPS_DENOMINATOR, MAX_FEE_BPS, calc_fee, split_payment
from src.em_common.enums import AssetKind
from src.em_common.errors import (
    AppError,
    AuthorizationError,
    FeeOutOfRangeError,
    InsufficientFundsError,
    InvalidAmountError,
    ListingNotActiveError,
    ListingNotFoundError,
    NotOwnerError,
    NotSellerError,
    PaymentError,
    PaymentMismatchError,
    ReceiverRejectedError,
    ReentrancyError,
    StateError,
    TransferFailure,
    ValidationError,
)
from src.em_common.identity import NULL_IDENTITY, is_null_identity
from src.em_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestErrorTaxonomy:
    @pytest.mark.parametrize(
        ("err", "family", "code", "status"),
        [
            (NotSellerError(1, "mallory"), AuthorizationError, 1003, 403),
            (NotOwnerError("mallory"), AuthorizationError, 1004, 403),
            (FeeOutOfRangeError(1001, 1000), ValidationError, 2004, 422),
            (ListingNotFoundError(9), StateError, 3002, 404),
            (ListingNotActiveError(9), StateError, 3003, 409),
            (PaymentMismatchError(10, 9), PaymentError, 4002, 422),
            (InsufficientFundsError("buyer-1", 10, 3), TransferFailure, 5002, 422),
            (ReceiverRejectedError("treasury", "nope"), TransferFailure, 5004, 422),
            (ReentrancyError(), AppError, 6001, 409),
        ],
    )
    def test_code_status_and_family(
        self, err: AppError, family: type[AppError], code: int, status: int
    ) -> None:
        assert isinstance(err, family)
        assert err.code == code
        assert err.http_status == status

    def test_payment_mismatch_message(self) -> None:
        err = PaymentMismatchError(expected=1_000_000, paid=999_999)
        assert "1000000" in err.message
        assert "999999" in err.message

    def test_not_seller_message_names_caller(self) -> None:
        assert "mallory" in NotSellerError(3, "mallory").message


class TestAmounts:
    def test_fee_floors(self) -> None:
        assert calc_fee(999, 250) == 24
        assert calc_fee(1_000_000, 250) == 25_000

    def test_split_always_sums_to_price(self) -> None:
        for price in [1, 7, 399, 1_000_000, 123_456_789]:
            for bps in [0, 1, 250, MAX_FEE_BPS]:
                fee, seller_amount = split_payment(price, bps)
                assert fee + seller_amount == price
                assert fee == price * bps // BPS_DENOMINATOR

    def test_zero_fee(self) -> None:
        assert split_payment(500, 0) == (0, 500)


class TestAssetKind:
    def test_unique_requires_amount_one(self) -> None:
        AssetKind.UNIQUE.validate_amount(1)
        with pytest.raises(InvalidAmountError):
            AssetKind.UNIQUE.validate_amount(2)

    def test_fungible_requires_positive_amount(self) -> None:
        AssetKind.FUNGIBLE.validate_amount(50)
        with pytest.raises(InvalidAmountError):
            AssetKind.FUNGIBLE.validate_amount(0)


class TestIdentity:
    def test_null_identity(self) -> None:
        assert is_null_identity(NULL_IDENTITY)
        assert not is_null_identity("treasury")


class TestApiResponse:
    def test_success_response(self) -> None:
        resp = success_response({"id": 1})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": 1}
        assert resp.request_id.startswith("req_")

    def test_error_response(self) -> None:
        resp = error_response(4002, "Payment mismatch")
        assert isinstance(resp, ApiResponse)
        assert resp.code == 4002
        assert resp.data is None
