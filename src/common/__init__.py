"""
どこで: `common` パッケージ。
何を: engine/ufuncs 双方で使う軽量ユーティリティ（BaseRegistry・設定・ロギング）。
なぜ: エンジン束縛とディスパッチ層の共通基盤を分離し、依存の向きを単純化するため。
"""

from .base_registry import BaseRegistry

__all__ = [
    "BaseRegistry",
]
