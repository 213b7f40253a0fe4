from __future__ import annotations

import math

from .resolution import TargetSource, coerce_target, is_valid_target, resolve_target


def _source(name: str, value):
    return TargetSource(name, lambda: value)


def _raising(name: str):
    def _read():
        raise PermissionError("cross-origin opener")
    return TargetSource(name, _read)


def test_coerce_numbers_truncate() -> None:
    assert coerce_target(3) == 3
    assert coerce_target(3.9) == 3
    assert coerce_target(-2.7) == -2
    assert coerce_target(0) == 0


def test_coerce_non_finite_and_bool_are_absent() -> None:
    assert coerce_target(math.nan) is None
    assert coerce_target(math.inf) is None
    assert coerce_target(True) is None
    assert coerce_target(None) is None
    assert coerce_target([1]) is None


def test_coerce_strings() -> None:
    assert coerce_target(" 7 ") == 7
    assert coerce_target("12abc") == 12
    assert coerce_target("3.9") == 3
    assert coerce_target("-4") == -4
    assert coerce_target("") is None
    assert coerce_target("   ") is None
    assert coerce_target("abc") is None


def test_bulk_token_any_case() -> None:
    for raw in ("bulk", "BULK", " Bulk "):
        assert coerce_target(raw) == "bulk"


def test_is_valid_target() -> None:
    assert is_valid_target(0)
    assert is_valid_target("bulk")
    assert not is_valid_target("BULK")
    assert not is_valid_target(True)
    assert not is_valid_target(1.5)


def test_first_usable_source_wins() -> None:
    value, name = resolve_target([_source("a", None), _source("b", "x"), _source("c", "5"), _source("d", 9)])
    assert value == 5
    assert name == "c"


def test_raising_source_is_skipped() -> None:
    value, name = resolve_target([_raising("session"), _source("opener", 4)])
    assert value == 4
    assert name == "opener"


def test_nothing_resolves() -> None:
    assert resolve_target([_source("a", ""), _raising("b")]) == (None, None)


def test_only_ascii_digits_count() -> None:
    assert coerce_target("٣") is None
    assert coerce_target("５") is None
    assert coerce_target("4٣") == 4


def test_oversized_digit_run_is_not_a_member_index() -> None:
    assert coerce_target("9" * 5000) == math.inf
    assert coerce_target("-" + "9" * 5000) == -math.inf
    assert not is_valid_target(coerce_target("9" * 5000))
