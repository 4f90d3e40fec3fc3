"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class TransactionType(str, Enum):
    LOAN = "LOAN"
    REGULAR = "REGULAR"
    SETTLEMENT = "SETTLEMENT"


class CacheKind(str, Enum):
    """Partitions of the in-process read cache."""
    MEMBER = "MEMBER"
    ITEM = "ITEM"
    TRANSACTION = "TRANSACTION"
