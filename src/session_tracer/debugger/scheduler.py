# session_tracer/debugger/scheduler.py
"""
ハイライト解除タイマー

ChangeSetの自動クリアに用いる、キャンセル可能な遅延実行の抽象を定義します。
GUIではQtのタイマーを用いた実装（ui.qt_scheduler）を、テストでは仮想時計を持つ
ManualSchedulerを使用します。
"""
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Any, List, Tuple

from session_tracer.common.types import Callback


# @intent:responsibility 遅延実行とそのキャンセルのインターフェースを定義します。
class HighlightScheduler(ABC):
    """
    schedule()はキャンセル用のハンドルを返します。
    キャンセル済み、または実行済みのハンドルのcancel()は何もしません。
    """
    @abstractmethod
    def schedule(self, delay: float, callback: Callback) -> Any:
        """
        delay秒後にcallbackを一度だけ呼び出すよう登録し、ハンドルを返します。
        """
        pass

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        """
        登録済みの呼び出しを取り消します。
        """
        pass


# @intent:responsibility 明示的に進める仮想時計上で遅延実行を行います。
class ManualScheduler(HighlightScheduler):
    """
    advance()で時間を進めたときにのみコールバックが実行される決定的なスケジューラ。
    テストおよびGUIを持たない利用で使用します。
    """
    def __init__(self):
        self._now = 0.0
        self._counter = itertools.count()
        self._queue: List[Tuple[float, int, Callback]] = []

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    def schedule(self, delay: float, callback: Callback) -> int:
        if delay < 0:
            raise ValueError("Delay must be non-negative.")
        handle = next(self._counter)
        heapq.heappush(self._queue, (self._now + delay, handle, callback))
        return handle

    def cancel(self, handle: int) -> None:
        remaining = [entry for entry in self._queue if entry[1] != handle]
        if len(remaining) != len(self._queue):
            self._queue = remaining
            heapq.heapify(self._queue)

    # @intent:responsibility 仮想時計を進め、期限を迎えたコールバックを期限順に実行します。
    def advance(self, seconds: float) -> int:
        """
        時計をseconds秒進め、実行したコールバックの数を返します。
        """
        if seconds < 0:
            raise ValueError("Cannot move the clock backwards.")
        deadline = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, callback = heapq.heappop(self._queue)
            self._now = due
            callback()
            fired += 1
        self._now = deadline
        return fired
