# tests/unit/domain/enums/test_severity.py
from __future__ import annotations

import pytest

from gcl_request_log.domain.enums.severity import Severity, severity_name


def test_ranks_are_strictly_increasing() -> None:
    members = list(Severity)
    assert [m.name for m in members] == [
        "DEFAULT",
        "DEBUG",
        "INFO",
        "NOTICE",
        "WARNING",
        "ERROR",
        "CRITICAL",
        "ALERT",
        "EMERGENCY",
    ]
    assert all(a < b for a, b in zip(members, members[1:], strict=False))
    assert [int(m) for m in members] == list(range(0, 900, 100))


def test_str_renders_canonical_name() -> None:
    assert str(Severity.WARNING) == "WARNING"
    assert str(Severity.DEFAULT) == "DEFAULT"


def test_max_picks_highest_rank() -> None:
    assert max([Severity.DEBUG, Severity.ERROR, Severity.NOTICE]) is Severity.ERROR


def test_unknown_rank_renders_unknown() -> None:
    assert severity_name(250) == "UNKNOWN"
    assert severity_name(-1) == "UNKNOWN"
    assert severity_name(500) == "ERROR"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("warning", Severity.WARNING),
        (" Error ", Severity.ERROR),
        ("600", Severity.CRITICAL),
        (100, Severity.DEBUG),
        (Severity.ALERT, Severity.ALERT),
    ],
)
def test_parse_accepts_names_and_ranks(raw: object, expected: Severity) -> None:
    assert Severity.parse(raw) is expected  # type: ignore[arg-type]


@pytest.mark.parametrize("raw", ["verbose", 150, ""])
def test_parse_rejects_unknown_values(raw: object) -> None:
    with pytest.raises(ValueError):
        Severity.parse(raw)  # type: ignore[arg-type]
