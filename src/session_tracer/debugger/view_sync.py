# session_tracer/debugger/view_sync.py
"""
プログラムカウンタ位置の変化を表示層へ伝える一方向の同期。
"""
from typing import Callable, Optional

from session_tracer.debugger.session import SessionController, SessionView


# @intent:responsibility 実行位置が変わったときだけ、該当命令行を可視範囲へ移動させるよう表示層に依頼します。
# @intent:rationale セッション状態を読むだけで、表示層からセッションへ書き戻すことはありません。
class ViewSync:
    def __init__(self, controller: SessionController, reveal: Callable[[int], None]):
        self._reveal = reveal
        self._last_index: Optional[int] = None
        self._unsubscribe = controller.subscribe(self._on_session_changed)
        self._on_session_changed(controller.view())

    @property
    def last_index(self) -> Optional[int]:
        return self._last_index

    def _on_session_changed(self, view: SessionView) -> None:
        if view.pc_index == self._last_index:
            return
        self._last_index = view.pc_index
        self._reveal(view.pc_index)

    # @intent:responsibility セッションからの通知の受け取りを停止します。
    def detach(self) -> None:
        self._unsubscribe()
