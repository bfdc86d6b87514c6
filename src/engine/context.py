"""
どこで: `engine.context`（プロセス唯一のエンジンコンテキスト）。
何を: エンジンセッションを 1 度だけ初期化し、エラー/ノーティスのハンドラを
ホスト側のエラー/警告チャネルへ付け替える。
なぜ: すべてのハンドル操作・ディスパッチ呼び出しが同じセッションを暗黙に共有し、
エンジン内部の失敗を Python 例外/警告として一貫して観測できるようにするため。

状態遷移（1 回のディスパッチ呼び出し内）:
- Idle →（エラー報告）→ ErrorRaised: 保留エラーを記録。呼び出しは番兵を見て巻き戻る。
- Idle →（ノーティス報告）→ Idle: 警告を出して継続。

注意:
- 設定は初期化時の 1 回だけ。以後は読み取り専用として扱う（スレッド間の排他はしない）。
- 保留エラーはコンテキスト単位で 1 つ。複数スレッドから同時にディスパッチする場合は
  呼び出し側で直列化すること。
"""

from __future__ import annotations

import atexit
import logging
import warnings
from typing import Any

from common import settings as _settings

from . import backend as _engine
from .errors import EngineError, EngineNotice, EngineOperationFailed

logger = logging.getLogger(__name__)


class EngineContext:
    """エンジンセッションと、ハンドラが記録した保留エラーを保持する。

    `handle` が各エンジン関数の第 1 引数になる。`user_data` は登録時にエラーハンドラへ渡す
    例外型（既定 `EngineError`）。
    """

    __slots__ = ("handle", "_user_data", "_pending")

    def __init__(self, handle: _engine.EngineHandle, user_data: type[BaseException] = EngineError):
        self.handle = handle
        self._user_data = user_data
        self._pending: BaseException | None = None
        handle.set_error_message_handler(self._handle_error, user_data)
        handle.set_notice_message_handler(self._handle_notice, None)

    # ── コールバック ───────────────────
    def _handle_error(self, message: str, user_data: Any) -> None:
        # エンジンの中では送出しない（戻り値の番兵で呼び出し側が巻き戻る）
        exc_type = user_data if isinstance(user_data, type) else EngineError
        self._pending = exc_type(message)
        logger.debug("engine error recorded: %s", message)

    def _handle_notice(self, message: str, user_data: Any) -> None:
        logger.debug("engine notice: %s", message)
        if _settings.get().NOTICES:
            warnings.warn(message, EngineNotice, stacklevel=2)

    # ── 保留エラー ─────────────────────
    @property
    def has_error(self) -> bool:
        return self._pending is not None

    def clear_error(self) -> None:
        self._pending = None

    def failure(self, message: str) -> BaseException:
        """番兵を受けたときに送出すべき例外を返し、保留状態を消費する。

        エンジンがハンドラ経由でエラーを報告していればそれを、無ければ
        `EngineOperationFailed(message)` を返す。
        """
        exc = self._pending
        self._pending = None
        if exc is None:
            return EngineOperationFailed(message)
        return exc

    def __repr__(self) -> str:
        return f"EngineContext(user_data={self._user_data.__name__})"


_context: EngineContext | None = None


def initialize() -> EngineContext:
    """プロセス唯一のコンテキストを初期化して返す。2 回目の呼び出しは RuntimeError。"""
    global _context
    if _context is not None:
        raise RuntimeError("engine context is already initialized")
    _context = EngineContext(_engine.init_r())
    atexit.register(_finish)
    logger.info("engine context initialized (shapely %s)", _shapely_version())
    return _context


def get_context() -> EngineContext:
    """コンテキストを返す（未初期化なら初期化する）。"""
    if _context is None:
        return initialize()
    return _context


def _finish() -> None:
    global _context
    if _context is None:
        return
    _engine.finish_r(_context.handle)
    logger.debug("engine context finished (live pointers: %d)", _engine.live_pointers())
    _context = None


def _shapely_version() -> str:
    import shapely

    return getattr(shapely, "__version__", "?")


__all__ = ["EngineContext", "initialize", "get_context"]
