"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Authorization / credentials
  2xxx: Validation (rejected before any side effect)
  3xxx: Listing state
  4xxx: Payment
  5xxx: Transfer failure (aborts and rolls back the enclosing operation)
  6xxx: Concurrency
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Authorization ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired credentials", 401)


class AuthorizationError(AppError):
    def __init__(self, detail: str, code: int = 1002) -> None:
        super().__init__(code, f"Not authorized: {detail}", 403)


class NotSellerError(AuthorizationError):
    def __init__(self, listing_id: int, caller: str) -> None:
        super().__init__(f"{caller} is not the seller of listing {listing_id}", 1003)


class NotOwnerError(AuthorizationError):
    def __init__(self, caller: str) -> None:
        super().__init__(f"{caller} is not the marketplace owner", 1004)


# --- 2xxx: Validation ---

class ValidationError(AppError):
    def __init__(self, detail: str, code: int = 2001) -> None:
        super().__init__(code, f"Validation failed: {detail}", 422)


class InvalidPriceError(ValidationError):
    def __init__(self, price: int) -> None:
        super().__init__(f"price must be positive, got {price}", 2002)


class InvalidAmountError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(detail, 2003)


class FeeOutOfRangeError(ValidationError):
    def __init__(self, fee_bps: int, max_bps: int) -> None:
        super().__init__(f"fee_bps must be between 0 and {max_bps}, got {fee_bps}", 2004)


class NullRecipientError(ValidationError):
    def __init__(self) -> None:
        super().__init__("fee recipient must not be the null identity", 2005)


class EmptyBatchError(ValidationError):
    def __init__(self) -> None:
        super().__init__("batch must contain at least one listing id", 2006)


# --- 3xxx: Listing state ---

class StateError(AppError):
    def __init__(self, detail: str, code: int = 3001, http_status: int = 409) -> None:
        super().__init__(code, detail, http_status)


class ListingNotFoundError(StateError):
    def __init__(self, listing_id: int) -> None:
        super().__init__(f"Listing not found: {listing_id}", 3002, 404)


class ListingNotActiveError(StateError):
    def __init__(self, listing_id: int) -> None:
        super().__init__(f"Listing is not active: {listing_id}", 3003)


# --- 4xxx: Payment ---

class PaymentError(AppError):
    def __init__(self, detail: str, code: int = 4001) -> None:
        super().__init__(code, detail, 422)


class PaymentMismatchError(PaymentError):
    def __init__(self, expected: int, paid: int) -> None:
        super().__init__(f"Payment mismatch: expected exactly {expected}, got {paid}", 4002)


# --- 5xxx: Transfer failure ---

class TransferFailure(AppError):
    def __init__(self, detail: str, code: int = 5001) -> None:
        super().__init__(code, f"Transfer failed: {detail}", 422)


class InsufficientFundsError(TransferFailure):
    def __init__(self, identity: str, required: int, available: int) -> None:
        super().__init__(
            f"{identity} has insufficient funds: required {required}, available {available}",
            5002,
        )


class TransferNotAuthorizedError(TransferFailure):
    def __init__(self, detail: str) -> None:
        super().__init__(detail, 5003)


class ReceiverRejectedError(TransferFailure):
    def __init__(self, recipient: str, reason: str) -> None:
        super().__init__(f"receiver {recipient} rejected the transfer: {reason}", 5004)


class UnknownAssetContractError(TransferFailure):
    def __init__(self, contract_id: str) -> None:
        super().__init__(f"unknown asset contract {contract_id}", 5005)


class AssetKindMismatchError(TransferFailure):
    def __init__(self, contract_id: str, expected: str) -> None:
        super().__init__(f"asset contract {contract_id} is not a {expected} contract", 5006)


class InsufficientCustodyError(TransferFailure):
    def __init__(self, detail: str) -> None:
        super().__init__(detail, 5007)


# --- 6xxx: Concurrency ---

class ReentrancyError(AppError):
    def __init__(self) -> None:
        super().__init__(6001, "Reentrant call rejected", 409)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
