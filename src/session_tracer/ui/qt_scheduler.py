"""
Qtのイベントループ上で動作するハイライト解除スケジューラ。
"""
from typing import Dict, Optional

from PySide6.QtCore import QObject, QTimer

from session_tracer.common.types import Callback
from session_tracer.debugger.scheduler import HighlightScheduler

# @intent:responsibility シングルショットのQTimerで遅延実行を行います。
# @intent:rationale コールバックはGUIスレッドで実行されるため、セッションの遷移と並行することはありません。
class QtHighlightScheduler(HighlightScheduler):
    def __init__(self, parent: Optional[QObject] = None):
        self._parent = parent
        self._timers: Dict[int, QTimer] = {}
        self._next_handle = 0

    @property
    def pending_count(self) -> int:
        return len(self._timers)

    def schedule(self, delay: float, callback: Callback) -> int:
        if delay < 0:
            raise ValueError("Delay must be non-negative.")
        handle = self._next_handle
        self._next_handle += 1

        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.timeout.connect(lambda: self._fire(handle, callback))
        self._timers[handle] = timer
        timer.start(int(delay * 1000))
        return handle

    def cancel(self, handle: int) -> None:
        timer = self._timers.pop(handle, None)
        if timer is not None:
            timer.stop()
            timer.deleteLater()

    def _fire(self, handle: int, callback: Callback) -> None:
        timer = self._timers.pop(handle, None)
        if timer is None:
            return
        timer.deleteLater()
        callback()
