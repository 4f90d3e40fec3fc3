"""Tests for mm_common.enums: values must match DB CHECK constraints."""

import pytest

from src.mm_common.enums import CacheKind, TransactionType


def test_transaction_types() -> None:
    assert {t.value for t in TransactionType} == {"LOAN", "REGULAR", "SETTLEMENT"}


def test_transaction_type_is_str() -> None:
    assert TransactionType.LOAN == "LOAN"


def test_unknown_transaction_type() -> None:
    with pytest.raises(ValueError):
        TransactionType("REFUND")


def test_cache_kinds() -> None:
    assert [k.value for k in CacheKind] == ["MEMBER", "ITEM", "TRANSACTION"]
