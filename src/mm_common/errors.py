"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Member
  2xxx: Item
  3xxx: Transaction
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


# --- 1xxx: Auth/Member ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid mobile number or password", 401)


class MemberInactiveError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Member account is inactive. Please contact administrator", 403)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Forbidden: Admins only", 403)


class MemberNotFoundError(AppError):
    def __init__(self, member_id: str) -> None:
        super().__init__(1004, f"Member not found: {member_id}", 404)


class MobileExistsError(AppError):
    def __init__(self, mobile: str) -> None:
        super().__init__(1005, f"Mobile number already registered: {mobile}", 409)


class PasswordMismatchError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1006, detail, 422)


class ClubConfigNotFoundError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Club configuration not found", 404)


# --- 2xxx: Item ---

class ItemNotFoundError(AppError):
    def __init__(self, item_ref: str) -> None:
        super().__init__(2001, f"Item not found: {item_ref}", 404)


class ItemCodeExistsError(AppError):
    def __init__(self, item_code: str) -> None:
        super().__init__(2002, f"Item code already exists: {item_code}", 409)


class ItemNotIssuedError(AppError):
    def __init__(self, item_code: str, member_id: str) -> None:
        super().__init__(2003, f"Item {item_code} is not issued to member {member_id}", 403)


# --- 3xxx: Transaction ---

class TransactionNotFoundError(AppError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(3001, f"Transaction not found: {transaction_id}", 404)


class NegativeAmountError(AppError):
    def __init__(self, field: str, amount: int) -> None:
        super().__init__(3002, f"{field} cannot be negative, got {amount}", 422)


class UnknownTransactionTypeError(AppError):
    def __init__(self, transaction_type: str) -> None:
        super().__init__(3003, f"Unknown transaction type: {transaction_type}", 422)


class TransactionNotEditableError(AppError):
    def __init__(self, transaction_id: str, reason: str) -> None:
        super().__init__(3004, f"Transaction {transaction_id} cannot be changed: {reason}", 409)


class MissingBalanceSnapshotError(AppError):
    def __init__(self, transaction_type: str) -> None:
        super().__init__(
            3005, f"{transaction_type} transaction has no balance snapshot to revert from", 500
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
