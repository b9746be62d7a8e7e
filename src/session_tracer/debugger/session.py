# session_tracer/debugger/session.py
"""
セッションコントローラモジュール。

デバッガセッションの状態（プログラムカウンタ位置、レジスタ、変更ハイライト、コマンド履歴）を
単一の所有者として保持し、Step/Resetによる正当な状態遷移を定義します。
表示層は変更通知で受け取る不変のSessionViewのみを読み取ります。
"""
import random
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Deque, FrozenSet, List, Optional, Sequence, Tuple

from session_tracer.common.types import RegisterId, RegisterLayoutInfo, RegisterMap
from session_tracer.core.errors import EndOfProgram
from session_tracer.core.instruction import Instruction
from session_tracer.core.memory import MemoryImage
from session_tracer.core.registers import RegisterBank
from session_tracer.debugger.commands import ActionToken, CommandInterpreter
from session_tracer.debugger.mutation import MutationPolicy, RandomMutationPolicy
from session_tracer.debugger.scheduler import HighlightScheduler

DEFAULT_INITIAL_INDEX = 1286
DEFAULT_HISTORY_LIMIT = 11
DEFAULT_HIGHLIGHT_DELAY = 1.0 # 秒

END_OF_PROGRAM_MESSAGE = "> end of program"


# @intent:responsibility セッションの実行状態を定義します。
class SessionStatus(Enum):
    READY = "READY"     # StepとResetを受け付ける
    HALTED = "HALTED"   # 最終命令に到達済み。Stepは拒否され、Resetのみ有効


# @intent:responsibility ある時点のセッション状態を不変に記録し、表示層へ提供します。
@dataclass(frozen=True) # 不変データ構造
class SessionView:
    """
    遷移完了後のセッション状態のスナップショット。
    registersは読み取り専用マッピング、historyはタプルです。
    """
    pc_index: int
    status: SessionStatus
    registers: RegisterMap
    changed: FrozenSet[RegisterId]
    history: Tuple[str, ...]
    instruction_count: int
    current_instruction: Instruction

    @property
    def is_halted(self) -> bool:
        return self.status is SessionStatus.HALTED


# @intent:responsibility SessionControllerが排他的に所有する可変状態を保持します。
@dataclass
class SessionState:
    pc_index: int
    history: Deque[str]
    status: SessionStatus = SessionStatus.READY
    changed: FrozenSet[RegisterId] = frozenset()
    # 保留中のハイライト解除タイマーのハンドル
    highlight_handle: Any = None
    # 解除コールバックが自分の世代であるかを判定するためのカウンタ
    highlight_generation: int = 0


SessionListener = Callable[[SessionView], None]


# @intent:responsibility セッション状態の唯一の変更者として、Step/Resetの遷移を実行します。
class SessionController:
    """
    命令列上のプログラムカウンタ位置を進め、レジスタバンクと履歴を更新する状態機械。
    全てのメソッドは同期的に実行され、互いに割り込むことはありません。
    """
    # @intent:pre-condition instructionsは空でなく、initial_indexはその有効範囲内である必要があります。
    def __init__(self,
                 instructions: Sequence[Instruction],
                 registers: RegisterBank,
                 memory: MemoryImage,
                 scheduler: HighlightScheduler,
                 initial_index: int = DEFAULT_INITIAL_INDEX,
                 rng: Optional[random.Random] = None,
                 policy: Optional[MutationPolicy] = None,
                 interpreter: Optional[CommandInterpreter] = None,
                 history_limit: int = DEFAULT_HISTORY_LIMIT,
                 highlight_delay: float = DEFAULT_HIGHLIGHT_DELAY):
        if not instructions:
            raise ValueError("Instruction stream must not be empty.")
        if not 0 <= initial_index < len(instructions):
            raise ValueError(f"Initial index {initial_index} out of range for {len(instructions)} instructions.")
        if history_limit <= 0:
            raise ValueError("History limit must be a positive integer.")
        if highlight_delay <= 0:
            raise ValueError("Highlight delay must be positive.")

        self._instructions: Tuple[Instruction, ...] = tuple(instructions)
        self._registers = registers
        self._memory = memory
        self._scheduler = scheduler
        self._initial_index = initial_index
        self._rng = rng if rng is not None else random.Random()
        self._policy = policy if policy is not None else RandomMutationPolicy()
        self._interpreter = interpreter if interpreter is not None else CommandInterpreter()
        self._highlight_delay = highlight_delay
        self._listeners: List[SessionListener] = []

        # pcは常に現在位置の命令アドレスと一致させる
        self._registers.set("pc", self._instructions[initial_index].address)
        self._registers.take_changes()
        # @intent:responsibility Resetで戻るための初期スナップショットを保持します。
        self._initial_registers: RegisterMap = self._registers.snapshot()

        self._state = SessionState(pc_index=initial_index, history=deque(maxlen=history_limit))

    # --- 読み取りアクセサ ---

    @property
    def instructions(self) -> Tuple[Instruction, ...]:
        return self._instructions

    @property
    def instruction_count(self) -> int:
        return len(self._instructions)

    @property
    def memory(self) -> MemoryImage:
        return self._memory

    @property
    def initial_index(self) -> int:
        return self._initial_index

    @property
    def pc_index(self) -> int:
        return self._state.pc_index

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def interpreter(self) -> CommandInterpreter:
        return self._interpreter

    @property
    def initial_registers(self) -> RegisterMap:
        return self._initial_registers

    def register_layout(self) -> List[RegisterLayoutInfo]:
        return self._registers.register_layout()

    # @intent:responsibility 現在のセッション状態の不変スナップショットを返します。
    def view(self) -> SessionView:
        state = self._state
        return SessionView(
            pc_index=state.pc_index,
            status=state.status,
            registers=self._registers.snapshot(),
            changed=state.changed,
            history=tuple(state.history),
            instruction_count=len(self._instructions),
            current_instruction=self._instructions[state.pc_index],
        )

    # --- 変更通知 ---

    # @intent:responsibility 状態変更の通知先を登録し、登録解除用の関数を返します。
    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        view = self.view()
        for listener in list(self._listeners):
            listener(view)

    # --- 遷移 ---

    # @intent:responsibility 入力テキストを解釈し、対応する遷移を実行します。
    def submit(self, raw_text: str) -> ActionToken:
        """
        コマンドテキストを解釈して遷移を実行し、解釈結果のトークンを返します。
        UNRECOGNIZEDの場合は状態を一切変更せず、通知も行いません。
        """
        token = self._interpreter.interpret(raw_text)
        if token is ActionToken.STEP:
            self.step()
        elif token is ActionToken.RESET:
            self.reset()
        return token

    def _next_index(self) -> int:
        next_index = self._state.pc_index + 1
        if next_index >= len(self._instructions):
            raise EndOfProgram(self._state.pc_index, len(self._instructions))
        return next_index

    # @intent:responsibility 実行位置を1命令進め、レジスタ・ハイライト・履歴を更新します。
    def step(self) -> SessionView:
        """
        1命令分ステップします。
        最終命令で呼ばれた場合はHALTEDへ遷移し、履歴に終了メッセージを追加するのみで、
        レジスタと実行位置は変更しません。
        """
        try:
            next_index = self._next_index()
        except EndOfProgram:
            self._state.status = SessionStatus.HALTED
            self._state.history.append(f"{END_OF_PROGRAM_MESSAGE} (step {self._state.pc_index})")
            self._notify()
            return self.view()

        # 前回のハイライトを先に無効化し、遅れて発火したタイマーが新しいハイライトを消さないようにする
        self._cancel_highlight()

        instruction = self._instructions[next_index]
        register_id, value = self._policy.choose(instruction, self._rng)
        self._registers.take_changes()
        self._registers.set(register_id, value)
        self._registers.set("pc", instruction.address)
        self._state.pc_index = next_index
        self._state.changed = self._registers.take_changes()
        self._schedule_highlight_clear()

        self._state.history.append(f"> step {next_index}")
        self._notify()
        return self.view()

    # @intent:responsibility セッションを初期スナップショットへ戻します。どの状態からでも有効です。
    def reset(self) -> SessionView:
        self._cancel_highlight()
        self._registers.restore(self._initial_registers)
        self._state.pc_index = self._initial_index
        self._state.history.clear()
        self._state.status = SessionStatus.READY
        self._notify()
        return self.view()

    # --- ハイライト解除タイマー ---

    def _cancel_highlight(self) -> None:
        if self._state.highlight_handle is not None:
            self._scheduler.cancel(self._state.highlight_handle)
            self._state.highlight_handle = None
        self._state.highlight_generation += 1
        self._state.changed = frozenset()

    def _schedule_highlight_clear(self) -> None:
        generation = self._state.highlight_generation
        self._state.highlight_handle = self._scheduler.schedule(
            self._highlight_delay, lambda: self._expire_highlight(generation))

    def _expire_highlight(self, generation: int) -> None:
        if generation != self._state.highlight_generation:
            return
        self._state.highlight_handle = None
        if self._state.changed:
            self._state.changed = frozenset()
            self._notify()
