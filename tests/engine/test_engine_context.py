from __future__ import annotations

import warnings

import pytest
import shapely

from engine import backend
from engine.context import get_context, initialize
from engine.errors import EngineError, EngineNotice, EngineOperationFailed
from engine.geometry import GeometryHandle
from ufuncs.predicates import is_valid


def _bowtie() -> GeometryHandle:
    return GeometryHandle.from_shapely(
        shapely.Polygon([(0, 0), (1, 1), (1, 0), (0, 1), (0, 0)])
    )


def test_single_context_per_process() -> None:
    ctx = get_context()
    assert get_context() is ctx
    with pytest.raises(RuntimeError):
        initialize()


def test_error_handler_records_pending_error() -> None:
    ctx = get_context()
    ctx.clear_error()
    assert backend.clone(ctx.handle, 10**15) is None
    assert ctx.has_error
    exc = ctx.failure("clone failed")
    assert isinstance(exc, EngineError)
    assert "Unknown pointer" in str(exc)
    # 消費後は汎用の失敗になる
    assert not ctx.has_error
    generic = ctx.failure("clone failed")
    assert type(generic) is EngineOperationFailed


def test_notice_surfaces_as_warning_and_continues() -> None:
    with pytest.warns(EngineNotice, match="[Ss]elf-intersection"):
        result = is_valid(_bowtie())
    assert result == False  # noqa: E712


def test_notices_can_be_disabled(monkeypatch: pytest.MonkeyPatch, reload_settings) -> None:
    monkeypatch.setenv("GEOU_NOTICES", "0")
    reload_settings()
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert not is_valid(_bowtie())


def test_valid_geometry_emits_no_notice(square: GeometryHandle) -> None:
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert is_valid(square)
