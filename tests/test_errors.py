"""Tests covering translation of adapter failures into the error taxonomy."""

from __future__ import annotations

import pytest

from universaldrone import (
    AdapterConnectionError,
    AdapterError,
    AdapterPreconditionError,
    APIException,
    ConnectionFailed,
    ErrorKind,
    HardwareFault,
    InvalidArgument,
    PreconditionFailed,
    PreconditionReason,
)
from universaldrone.dispatch import translate_adapter_error


def test_precondition_errors_keep_their_reason() -> None:
    native = AdapterPreconditionError("too hot", reason=PreconditionReason.OVERHEAT)

    translated = translate_adapter_error(native, "takeoff")

    assert isinstance(translated, PreconditionFailed)
    assert translated.kind is ErrorKind.PRECONDITION_FAILED
    assert translated.reason is PreconditionReason.OVERHEAT
    assert translated.cause is native


@pytest.mark.parametrize("native", [AdapterError("nak"), ValueError("bad frame"), OSError("io")])
def test_unknown_failures_become_hardware_faults(native: Exception) -> None:
    """No native exception type crosses the boundary."""

    translated = translate_adapter_error(native, "forward")

    assert type(translated) is HardwareFault
    assert translated.cause is native
    assert "forward" in str(translated)


def test_everything_while_connecting_is_connection_failed() -> None:
    for native in (AdapterConnectionError("refused"), RuntimeError("boom"), InvalidArgument("x")):
        translated = translate_adapter_error(native, "connect", connecting=True)
        assert isinstance(translated, ConnectionFailed)
        assert translated.cause is native


def test_taxonomy_errors_pass_through() -> None:
    """An adapter may raise the caller-facing errors directly."""

    native = InvalidArgument("level out of range")

    assert translate_adapter_error(native, "set_speed_level") is native


def test_adapter_failures_are_logged(caplog) -> None:
    with caplog.at_level("WARNING", logger="adapter"):
        translate_adapter_error(AdapterError("gimbal stuck"), "start_video")

    assert "gimbal stuck" in caplog.text
    assert "start_video" in caplog.text


def test_every_error_kind_has_an_exception() -> None:
    """Callers can branch on kind alone."""

    kinds = {cls.kind for cls in _all_subclasses(APIException)}
    assert kinds == set(ErrorKind)


def _all_subclasses(cls: type) -> set[type]:
    found = set()
    for sub in cls.__subclasses__():
        found.add(sub)
        found |= _all_subclasses(sub)
    return found
