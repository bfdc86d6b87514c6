"""
どこで: `engine.errors`
何を: ジオメトリ層の例外分類と、エンジン通知用の警告カテゴリを定義する。
なぜ: 呼び出し側が「どの段階で失敗したか」を型で区別でき、かつ組込み例外
（TypeError/ValueError/RuntimeError/MemoryError）でも捕捉できるようにするため。
"""

from __future__ import annotations


class GeometryError(Exception):
    """本パッケージが送出する例外の共通基底。"""


class InitializationFailed(GeometryError, RuntimeError):
    """新規ハンドルのメタデータ（型 ID / Z 有無）が取得できない、または範囲外。"""


class InvalidArgument(GeometryError, ValueError):
    """生ポインタ引数がエンジン所有のジオメトリを指していない。"""


class NotAGeometryError(GeometryError, TypeError):
    """ジオメトリを期待する配列スロットにハンドル以外の値が入っている。"""


class EmptyGeometryError(GeometryError, ValueError):
    """解放済み（ポインタが null）のハンドルに対して演算しようとした。"""


class EngineOperationFailed(GeometryError, RuntimeError):
    """エンジン呼び出しが失敗の番兵（null/範囲外/三値の異常値）を返した。"""


class EngineError(EngineOperationFailed):
    """エンジンのエラーハンドラ経由で報告された失敗（メッセージはエンジン由来）。"""


class AllocationFailed(GeometryError, MemoryError):
    """座標列またはハンドルの確保に失敗した。"""


class EngineNotice(UserWarning):
    """エンジンの情報通知。処理は継続する。"""


__all__ = [
    "GeometryError",
    "InitializationFailed",
    "InvalidArgument",
    "NotAGeometryError",
    "EmptyGeometryError",
    "EngineOperationFailed",
    "EngineError",
    "AllocationFailed",
    "EngineNotice",
]
