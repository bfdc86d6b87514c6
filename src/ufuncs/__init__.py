"""
どこで: `ufuncs` パッケージ。
何を: ジオメトリ配列に対する要素ごと演算を登録し、`api` から利用可能にする。
なぜ: ループテンプレート（検証/番兵解釈）とエンジン関数の組を、名前で引ける一箇所に集約するため。
"""

# 演算を登録（モジュール読み込み時に define される）
from . import construction  # noqa: F401
from . import constructive  # noqa: F401
from . import measurement  # noqa: F401
from . import predicates  # noqa: F401
from .base import GeoUfunc
from .registry import get_operation, is_operation_registered, list_operations

__all__ = [
    "GeoUfunc",
    "get_operation",
    "is_operation_registered",
    "list_operations",
]
