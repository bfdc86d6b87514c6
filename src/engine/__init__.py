"""
どこで: `engine` パッケージ。
何を: ジオメトリエンジン束縛（backend）・プロセス唯一のコンテキスト・所有ハンドル・座標列ビルダ。
なぜ: エンジン所有資源の確保/解放と失敗の橋渡しを、ディスパッチ層（`ufuncs`）から分離するため。
"""

from .context import EngineContext, get_context
from .errors import (
    AllocationFailed,
    EmptyGeometryError,
    EngineError,
    EngineNotice,
    EngineOperationFailed,
    GeometryError,
    InitializationFailed,
    InvalidArgument,
    NotAGeometryError,
)
from .geometry import GeometryHandle

__all__ = [
    "EngineContext",
    "get_context",
    "GeometryHandle",
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
