"""Tests for the assertion helpers."""

import pytest

from fork_test_runner import checks
from fork_test_runner.models.result import Kind
from fork_test_runner.reporter import Reporter


def _reported(capsys: pytest.CaptureFixture[str]) -> tuple[str, str, str]:
    location, label, message = capsys.readouterr().out.rstrip("\n").split(" ", 2)
    return location, label, message


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (True, "1"),
        (3, "3"),
        (2.5, "2.500000"),
        (-7, "-7"),
    ],
)
def test_format_number(value: float, expected: str) -> None:
    """Formats numbers according to their own type."""
    assert checks.format_number(value) == expected


def test_check_expr_attributes_result_to_caller(
    reporter: Reporter, capsys: pytest.CaptureFixture[str]
) -> None:
    """Reports the caller's location, not the helper's."""
    checks.check_expr(reporter, 1 + 1 == 2, "1 + 1 == 2")

    location, label, message = _reported(capsys)
    assert location.startswith("test_checks.py:")
    assert label == "PASS"
    assert message == "1 + 1 == 2"


def test_check_expr_fails_on_falsy_value(reporter: Reporter) -> None:
    """A falsy value is a failure."""
    checks.check_expr(reporter, [], "list is not empty")

    assert reporter.last_result is Kind.FAIL


@pytest.mark.parametrize(
    ("check", "a", "b", "kind"),
    [
        (checks.check_eq, 1, 1, Kind.PASS),
        (checks.check_eq, 1, 2, Kind.FAIL),
        (checks.check_ne, 1, 2, Kind.PASS),
        (checks.check_gt, 2, 1, Kind.PASS),
        (checks.check_gt, 1, 1, Kind.FAIL),
        (checks.check_ge, 1, 1, Kind.PASS),
        (checks.check_lt, 1, 2, Kind.PASS),
        (checks.check_le, 3, 2, Kind.FAIL),
    ],
)
def test_numeric_checks(reporter: Reporter, check, a: int, b: int, kind: Kind) -> None:
    """Compares numbers with the helper's operator."""
    check(reporter, a, b)

    assert reporter.last_result is kind


def test_numeric_check_messages(
    reporter: Reporter, capsys: pytest.CaptureFixture[str]
) -> None:
    """Failures show both operands after the expression."""
    checks.check_eq(reporter, 1.5, 1.5)
    location, label, message = _reported(capsys)
    assert location.startswith("test_checks.py:")
    assert (label, message) == ("PASS", "1.500000 == 1.500000")

    checks.check_lt(reporter, 5, 3)
    _, label, message = _reported(capsys)
    assert (label, message) == ("FAIL", "5 < 3 (a = 5, b = 3)")


def test_none_checks(reporter: Reporter) -> None:
    """Checks for None and its absence."""
    checks.check_none(reporter, None)
    checks.check_not_none(reporter, 0)
    checks.check_none(reporter, "value")
    checks.check_not_none(reporter, None)

    summary = reporter.channel.snapshot()
    assert summary.passed == 2
    assert summary.failed == 2


def test_bytes_checks_compare_prefix(reporter: Reporter) -> None:
    """Only the first ``n`` bytes are compared."""
    checks.check_bytes_eq(reporter, b"abcX", b"abcY", 3)
    assert reporter.last_result is Kind.PASS

    checks.check_bytes_eq(reporter, b"abcX", b"abcY", 4)
    assert reporter.last_result is Kind.FAIL

    checks.check_bytes_ne(reporter, b"abcX", b"abcY", 4)
    assert reporter.last_result is Kind.PASS


def test_str_checks(reporter: Reporter, capsys: pytest.CaptureFixture[str]) -> None:
    """Compares whole strings, or their prefixes when ``n`` is given."""
    checks.check_str_eq(reporter, "hello", "help")
    _, label, message = _reported(capsys)
    assert (label, message) == ("FAIL", "'hello' != 'help'")

    checks.check_str_eq(reporter, "hello", "help", 3)
    assert reporter.last_result is Kind.PASS

    checks.check_str_ne(reporter, "same", "same")
    assert reporter.last_result is Kind.FAIL
    capsys.readouterr()

    checks.check_str_ne(reporter, "abcX", "abcY", 3)
    _, label, message = _reported(capsys)
    assert (label, message) == ("FAIL", "'abc' == 'abc'")


def test_str_eq_shows_compared_prefix(
    reporter: Reporter, capsys: pytest.CaptureFixture[str]
) -> None:
    """The message shows only the characters that were compared."""
    checks.check_str_eq(reporter, "abcX", "abcY", 3)

    _, label, message = _reported(capsys)
    assert (label, message) == ("PASS", "'abc' == 'abc'")


def test_identity_checks(reporter: Reporter) -> None:
    """Compares object identity, not equality."""
    first, second = [1], [1]

    checks.check_same(reporter, first, first)
    assert reporter.last_result is Kind.PASS

    checks.check_same(reporter, first, second)
    assert reporter.last_result is Kind.FAIL

    checks.check_not_same(reporter, first, second)
    assert reporter.last_result is Kind.PASS
