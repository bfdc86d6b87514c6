from __future__ import annotations

import pytest

from common.base_registry import BaseRegistry

# What this tests
# - キー正規化（キャメル→スネーク、ハイフン→アンダースコア、大文字小文字）。
# - 同名の別オブジェクト登録は拒否、同一オブジェクトの再登録は許容。


def test_add_and_get_with_normalization() -> None:
    reg = BaseRegistry()
    obj = object()
    reg.add("ConvexHull", obj)

    assert reg.is_registered("convex_hull")
    assert reg.get("ConvexHull") is obj
    assert reg.get("convex-hull") is obj
    assert reg.list_all() == ["convex_hull"]


def test_add_is_idempotent_for_same_object() -> None:
    reg = BaseRegistry()
    obj = object()
    assert reg.add("area", obj) is obj
    assert reg.add("Area", obj) is obj
    assert reg.list_all() == ["area"]
    with pytest.raises(ValueError):
        reg.add("area", object())


def test_key_normalization_hyphen_to_snake() -> None:
    reg = BaseRegistry()

    def fn():  # noqa: ANN001 - テスト用
        return 0

    reg.add("My-Op", fn)
    # ハイフン→アンダースコア + キャメル→スネークの合成で二重 '_' になる
    assert reg.is_registered("My-Op")
    assert reg.get("my__op") is fn


def test_invalid_keys() -> None:
    reg = BaseRegistry()
    with pytest.raises(TypeError):
        reg.normalize_key(1)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        reg.normalize_key("")
    with pytest.raises(KeyError):
        reg.get("missing")


def test_registry_view_is_a_copy() -> None:
    reg = BaseRegistry()
    reg.add("a", 1)
    view = reg.registry
    view.clear()
    assert reg.list_all() == ["a"]
