from decimal import Decimal

import pytest

from backoffice.services.dedup import drop_duplicates, is_duplicate, source_ref_for
from backoffice.services.money import d2, to_decimal
from backoffice.services.percent import normalize_percent
from backoffice.services.records import LedgerEntry


@pytest.mark.parametrize(
    "raw, expected",
    [
        (25, Decimal("0.25")),
        ("25", Decimal("0.25")),
        (0.25, Decimal("0.25")),
        (0, Decimal("0")),
        (19, Decimal("0.19")),
        (-50, Decimal("-0.5")),
        (1, Decimal("1")),
    ],
)
def test_normalize_percent_reads_both_conventions(raw, expected):
    assert normalize_percent(raw) == expected


@pytest.mark.parametrize("raw", [float("nan"), float("inf"), float("-inf"), None, "abc", "", True])
def test_normalize_percent_non_finite_or_garbage_is_zero(raw):
    assert normalize_percent(raw) == Decimal("0")


def test_normalize_percent_is_idempotent_below_one():
    for v in ("0.02", "0.19", "0.5", "0.999"):
        once = normalize_percent(v)
        assert normalize_percent(once) == once


def test_to_decimal_and_rounding():
    assert to_decimal(" 12.50 ") == Decimal("12.50")
    assert to_decimal("NaN") == Decimal("0")
    assert d2(Decimal("2.005")) == Decimal("2.01")
    assert d2(Decimal("-2.005")) == Decimal("-2.01")


def test_source_ref_for():
    assert source_ref_for("prospect", 7) == "prospect:7"
    assert source_ref_for("prospect", " 7 ") == "prospect:7"
    assert source_ref_for("prospect", None) is None
    assert source_ref_for("prospect", "  ") is None


def test_is_duplicate_matches_persisted_source_ref():
    persisted = [
        LedgerEntry(id=1, source_ref="prospect:1"),
        LedgerEntry(id=2, source_ref=None),
        LedgerEntry(id=3, source_ref="client:9"),
    ]
    assert is_duplicate(persisted, "prospect:1") is True
    assert is_duplicate(persisted, "prospect:2") is False
    assert is_duplicate([], "prospect:1") is False


@pytest.mark.parametrize("ref", [None, "", "   "])
def test_empty_source_ref_is_never_a_duplicate(ref):
    persisted = [LedgerEntry(id=1, source_ref=""), LedgerEntry(id=2, source_ref=None)]
    assert is_duplicate(persisted, ref) is False


def test_drop_duplicates_keeps_unmatched_candidates():
    persisted = [LedgerEntry(id=1, source_ref="prospect:1")]
    candidates = [
        LedgerEntry(source_ref="prospect:1", derived=True),
        LedgerEntry(source_ref="prospect:2", derived=True),
    ]
    survivors = drop_duplicates(persisted, candidates)
    assert [c.source_ref for c in survivors] == ["prospect:2"]
