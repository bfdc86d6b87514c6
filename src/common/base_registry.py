"""
共通レジストリ基底クラス
`ufuncs` の演算名→演算オブジェクト対応表で使用する。
"""

import re
from typing import Any


class BaseRegistry:
    """名前付きオブジェクトのレジストリ。

    - 文字列キーは正規化されます（大文字小文字・キャメル→スネーク・ハイフンを吸収）。
    - 同名で別オブジェクトの登録は拒否します（同一オブジェクトの再登録は許容）。
    """

    def __init__(self) -> None:
        # 登録対象は演算オブジェクト/関数のどちらでもよい。
        self._registry: dict[str, Any] = {}

    # === 内部ユーティリティ ===
    @staticmethod
    def _camel_to_snake(name: str) -> str:
        s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
        s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
        return s2.lower()

    @classmethod
    def normalize_key(cls, name: str) -> str:
        """レジストリキーの正規化（例: "CoveredBy" -> "covered_by"）。"""
        if not isinstance(name, str):
            raise TypeError("レジストリキーは str である必要があります")
        if not name:
            raise ValueError("レジストリキーは空であってはなりません")
        name = name.replace("-", "_")
        # 大文字を含む場合のみキャメル→スネーク変換
        return cls._camel_to_snake(name) if any(c.isupper() for c in name) else name.lower()

    def add(self, name: str, obj: Any) -> Any:
        """`obj` を `name` で登録して返す。同名で別オブジェクトなら ValueError。"""
        key = self.normalize_key(name)
        if key in self._registry and self._registry[key] is not obj:
            raise ValueError(f"'{key}' は既に登録されています")
        self._registry[key] = obj
        return obj

    def get(self, name: str) -> Any:
        """登録されたオブジェクトを取得。未登録は KeyError。"""
        key = self.normalize_key(name)
        if key not in self._registry:
            raise KeyError(f"'{name}' は登録されていません")
        return self._registry[key]

    def list_all(self) -> list[str]:
        """登録されているすべての名前を取得（未ソート）。"""
        return list(self._registry.keys())

    def is_registered(self, name: str) -> bool:
        return self.normalize_key(name) in self._registry

    @property
    def registry(self) -> dict[str, Any]:
        """レジストリの読み取り専用アクセス（コピー）"""
        return self._registry.copy()
