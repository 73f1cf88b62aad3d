"""Assertion helpers that funnel into ``Reporter.report``.

Every helper reports ``PASS`` or ``FAIL`` and attributes the result to the
test code that called it.
"""

import operator
from collections.abc import Callable
from numbers import Real
from typing import Any

from fork_test_runner.models.result import Kind
from fork_test_runner.reporter import Reporter

_NUMERIC_OPS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}


def format_number(value: Real) -> str:
    """Format ``value`` according to its own numeric type."""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float):
        return f"{value:.6f}"
    return str(value)


def check_expr(rk: Reporter, value: object, description: str) -> None:
    """Pass when ``value`` is truthy."""
    rk.report(Kind.PASS if value else Kind.FAIL, description, stacklevel=2)


def _check_numbers(rk: Reporter, a: Real, b: Real, op: str) -> None:
    left, right = format_number(a), format_number(b)
    if _NUMERIC_OPS[op](a, b):
        rk.report(Kind.PASS, f"{left} {op} {right}", stacklevel=3)
    else:
        rk.report(
            Kind.FAIL,
            f"{left} {op} {right} (a = {left}, b = {right})",
            stacklevel=3,
        )


def check_eq(rk: Reporter, a: Real, b: Real) -> None:
    _check_numbers(rk, a, b, "==")


def check_ne(rk: Reporter, a: Real, b: Real) -> None:
    _check_numbers(rk, a, b, "!=")


def check_gt(rk: Reporter, a: Real, b: Real) -> None:
    _check_numbers(rk, a, b, ">")


def check_ge(rk: Reporter, a: Real, b: Real) -> None:
    _check_numbers(rk, a, b, ">=")


def check_lt(rk: Reporter, a: Real, b: Real) -> None:
    _check_numbers(rk, a, b, "<")


def check_le(rk: Reporter, a: Real, b: Real) -> None:
    _check_numbers(rk, a, b, "<=")


def check_none(rk: Reporter, value: object) -> None:
    if value is None:
        rk.report(Kind.PASS, "value is None", stacklevel=2)
    else:
        rk.report(Kind.FAIL, f"value is None ({value!r})", stacklevel=2)


def check_not_none(rk: Reporter, value: object) -> None:
    if value is not None:
        rk.report(Kind.PASS, f"value is not None ({value!r})", stacklevel=2)
    else:
        rk.report(Kind.FAIL, "value is not None", stacklevel=2)


def check_bytes_eq(rk: Reporter, a: bytes, b: bytes, n: int) -> None:
    """Pass when the first ``n`` bytes of ``a`` and ``b`` match."""
    if bytes(a[:n]) == bytes(b[:n]):
        rk.report(Kind.PASS, f"{a[:n]!r} == {b[:n]!r}", stacklevel=2)
    else:
        rk.report(Kind.FAIL, f"{a[:n]!r} != {b[:n]!r}", stacklevel=2)


def check_bytes_ne(rk: Reporter, a: bytes, b: bytes, n: int) -> None:
    """Pass when the first ``n`` bytes of ``a`` and ``b`` differ."""
    if bytes(a[:n]) != bytes(b[:n]):
        rk.report(Kind.PASS, f"{a[:n]!r} != {b[:n]!r}", stacklevel=2)
    else:
        rk.report(Kind.FAIL, f"{a[:n]!r} == {b[:n]!r}", stacklevel=2)


def check_str_eq(rk: Reporter, a: str, b: str, n: int | None = None) -> None:
    """Pass when ``a`` and ``b`` match, optionally only their first ``n`` chars."""
    a, b = a[:n], b[:n]
    same = a == b
    op = "==" if same else "!="
    rk.report(
        Kind.PASS if same else Kind.FAIL,
        f"{a!r} {op} {b!r}",
        stacklevel=2,
    )


def check_str_ne(rk: Reporter, a: str, b: str, n: int | None = None) -> None:
    """Pass when ``a`` and ``b`` differ, optionally only in their first ``n`` chars."""
    a, b = a[:n], b[:n]
    differ = a != b
    op = "!=" if differ else "=="
    rk.report(
        Kind.PASS if differ else Kind.FAIL,
        f"{a!r} {op} {b!r}",
        stacklevel=2,
    )


def check_same(rk: Reporter, a: object, b: object) -> None:
    """Pass when ``a`` and ``b`` are the same object."""
    if a is b:
        rk.report(Kind.PASS, f"0x{id(a):x} is 0x{id(b):x}", stacklevel=2)
    else:
        rk.report(Kind.FAIL, f"0x{id(a):x} is not 0x{id(b):x}", stacklevel=2)


def check_not_same(rk: Reporter, a: object, b: object) -> None:
    """Pass when ``a`` and ``b`` are distinct objects."""
    if a is not b:
        rk.report(Kind.PASS, f"0x{id(a):x} is not 0x{id(b):x}", stacklevel=2)
    else:
        rk.report(Kind.FAIL, f"0x{id(a):x} is 0x{id(b):x}", stacklevel=2)
