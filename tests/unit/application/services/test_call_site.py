# tests/unit/application/services/test_call_site.py
from __future__ import annotations

import inspect

from gcl_request_log.application.services.call_site import resolve_source_location
from gcl_request_log.domain.entities.log_entry import SourceLocation


def _helper():
    return resolve_source_location(1)


def test_skip_zero_names_the_caller() -> None:
    line = inspect.currentframe().f_lineno + 1  # type: ignore[union-attr]
    location = resolve_source_location(0)

    assert location.file == "test_call_site.py"
    assert location.line == str(line)
    assert location.function == f"{__name__}.test_skip_zero_names_the_caller"


def test_skip_walks_outwards() -> None:
    location = _helper()
    assert location.function == f"{__name__}.test_skip_walks_outwards"


def test_nested_functions_use_qualname() -> None:
    class Handler:
        def handle(self) -> SourceLocation:
            return resolve_source_location(0)

    location = Handler().handle()
    assert location.function.endswith("test_nested_functions_use_qualname.<locals>.Handler.handle")


def test_shallow_stack_yields_empty_location() -> None:
    assert resolve_source_location(100_000) == SourceLocation()
