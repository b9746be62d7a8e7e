# tests/debugger/test_session_controller.py
"""
session_tracer.debugger.sessionモジュールの単体テスト。
SessionControllerのStep/Reset遷移、HALTED状態、ハイライト解除タイマー、変更通知を検証します。
"""
import random
import pytest
from unittest.mock import MagicMock

from session_tracer.core import stream
from session_tracer.core.memory import MemoryImage
from session_tracer.core.registers import RegisterBank
from session_tracer.debugger.commands import ActionToken
from session_tracer.debugger.mutation import MutationPolicy
from session_tracer.debugger.scheduler import ManualScheduler
from session_tracer.debugger.session import SessionController, SessionStatus

BASE_ADDRESS = 0x0000007DA8C3BBE0
INITIAL_INDEX = 1286
INSTRUCTION_COUNT = 2000


def build_controller(seed=1234, count=INSTRUCTION_COUNT, initial_index=INITIAL_INDEX, **kwargs):
    rng = random.Random(seed)
    instructions = stream.generate(BASE_ADDRESS, count, rng=rng)
    memory = MemoryImage.generate(64, rng=rng)
    registers = RegisterBank.seeded(rng)
    scheduler = ManualScheduler()
    controller = SessionController(instructions, registers, memory, scheduler,
                                   initial_index=initial_index, rng=rng, **kwargs)
    return controller, scheduler


def assert_invariants(controller):
    view = controller.view()
    assert 0 <= view.pc_index < view.instruction_count
    assert view.registers["pc"] == controller.instructions[view.pc_index].address


class FixedPolicy(MutationPolicy):
    def __init__(self, register_id, value):
        self.register_id = register_id
        self.value = value

    def choose(self, instruction, rng):
        return self.register_id, self.value

# @intent:test_suite セッション状態機械の遷移と不変条件の検証。

class TestSessionController:
    """
    SessionControllerの単体テスト。
    """
    @pytest.fixture
    def session(self):
        return build_controller()

    # @intent:test_case_initial_state 開始時のpc位置とpcレジスタが一致することを検証します。
    def test_initial_state(self, session):
        controller, _ = session
        view = controller.view()
        assert view.pc_index == INITIAL_INDEX
        assert view.status is SessionStatus.READY
        assert view.registers["pc"] == controller.instructions[INITIAL_INDEX].address
        assert view.registers["pc"] == BASE_ADDRESS + INITIAL_INDEX * 4
        assert view.changed == frozenset()
        assert view.history == ()
        assert view.current_instruction is controller.instructions[INITIAL_INDEX]

    # @intent:test_case_step 1回のStepでpc位置・pcレジスタ・ChangeSet・履歴が更新されることを検証します。
    def test_step_once(self, session):
        controller, _ = session
        before = controller.view().registers

        view = controller.step()

        assert view.pc_index == INITIAL_INDEX + 1
        assert view.registers["pc"] == controller.instructions[INITIAL_INDEX + 1].address
        assert "pc" in view.changed
        assert len(view.changed) == 2
        mutated = next(iter(view.changed - {"pc"}))
        assert mutated.startswith("x")
        assert view.history == ("> step 1287",)
        assert view.registers["sp"] == before["sp"]
        unchanged = [reg for reg in before if reg not in view.changed]
        assert all(view.registers[reg] == before[reg] for reg in unchanged)
        assert_invariants(controller)

    # @intent:test_case_step_uses_policy 変更ポリシーが選んだレジスタと値が適用されることを検証します。
    def test_step_applies_policy_choice(self):
        controller, _ = build_controller(policy=FixedPolicy("x7", 0xDEADBEEF))
        view = controller.step()
        assert view.registers["x7"] == 0xDEADBEEF
        assert view.changed == frozenset({"x7", "pc"})

    # @intent:test_case_end_of_program 最終命令でのStepがHALTEDへ遷移し、状態を変更しないことを検証します。
    def test_step_past_last_instruction_halts(self, session):
        controller, _ = session
        while controller.pc_index < controller.instruction_count - 1:
            controller.step()
            assert_invariants(controller)
        assert controller.status is SessionStatus.READY
        before = controller.view()

        view = controller.step()

        assert view.status is SessionStatus.HALTED
        assert view.pc_index == INSTRUCTION_COUNT - 1
        assert view.registers == before.registers
        assert view.changed == before.changed
        assert view.history[-1] == f"> end of program (step {INSTRUCTION_COUNT - 1})"
        assert_invariants(controller)

    # @intent:test_case_halted_step_rejected HALTED状態でのStepが再び拒否され、履歴のみ追加されることを検証します。
    def test_step_while_halted_is_rejected(self):
        controller, _ = build_controller(count=3, initial_index=2)
        controller.step()
        registers = controller.view().registers

        view = controller.step()

        assert view.status is SessionStatus.HALTED
        assert view.pc_index == 2
        assert view.registers == registers
        assert view.history == ("> end of program (step 2)", "> end of program (step 2)")

    # @intent:test_case_reset 5回Step後のResetで初期状態へ戻ることを検証します。
    def test_reset_after_steps(self, session):
        controller, scheduler = session
        for _ in range(5):
            controller.step()
        assert controller.pc_index == 1291

        view = controller.reset()

        assert view.pc_index == INITIAL_INDEX
        assert view.history == ()
        assert view.changed == frozenset()
        assert view.status is SessionStatus.READY
        assert dict(view.registers) == dict(controller.initial_registers)
        assert scheduler.pending_count == 0
        assert_invariants(controller)

    # @intent:test_case_reset_from_halted HALTED状態からのResetでREADYに戻ることを検証します。
    def test_reset_from_halted(self):
        controller, _ = build_controller(count=3, initial_index=1)
        controller.step()
        controller.step()
        assert controller.status is SessionStatus.HALTED

        view = controller.reset()

        assert view.status is SessionStatus.READY
        assert view.pc_index == 1
        assert view.history == ()
        assert controller.step().pc_index == 2

    # @intent:test_case_alias_equivalence "r"と"reset"が同一の結果状態を生むことを検証します。
    def test_reset_aliases_are_equivalent(self):
        results = []
        for alias in ("r", "reset"):
            controller, _ = build_controller(seed=99)
            for _ in range(3):
                controller.submit("n")
            assert controller.submit(alias) is ActionToken.RESET
            results.append(controller.view())
        assert results[0] == results[1]

    # @intent:test_case_step_aliases "n" "next" "s" がいずれもStepになることを検証します。
    def test_step_aliases(self, session):
        controller, _ = session
        for expected, alias in enumerate(("n", "next", " s "), start=1):
            assert controller.submit(alias) is ActionToken.STEP
            assert controller.pc_index == INITIAL_INDEX + expected

    # @intent:test_case_unrecognized 認識できない入力が状態を一切変更しないことを検証します。
    def test_unrecognized_command_is_noop(self, session):
        controller, _ = session
        controller.step()
        listener = MagicMock()
        controller.subscribe(listener)
        before = controller.view()

        assert controller.submit("xyz") is ActionToken.UNRECOGNIZED
        assert controller.submit("") is ActionToken.UNRECOGNIZED

        after = controller.view()
        assert after.pc_index == before.pc_index
        assert after.registers == before.registers
        assert after.changed == before.changed
        assert after.history == before.history
        listener.assert_not_called()

    # @intent:test_case_history_bounded 履歴が上限件数を超えると古いものから破棄されることを検証します。
    def test_history_is_bounded(self):
        controller, _ = build_controller(history_limit=3)
        for _ in range(5):
            controller.step()
        assert controller.view().history == ("> step 1289", "> step 1290", "> step 1291")

    # @intent:test_case_invalid_construction 不正な構築引数がValueErrorになることを検証します。
    @pytest.mark.parametrize("kwargs", [
        {"initial_index": -1},
        {"initial_index": INSTRUCTION_COUNT},
        {"history_limit": 0},
        {"highlight_delay": 0},
    ])
    def test_invalid_construction(self, kwargs):
        with pytest.raises(ValueError):
            build_controller(**kwargs)

    def test_empty_instruction_stream_rejected(self):
        with pytest.raises(ValueError):
            SessionController([], RegisterBank(), MemoryImage(b"\x00"), ManualScheduler(), initial_index=0)

    # @intent:test_case_view_immutable SessionViewのレジスタが外部から変更できないことを検証します。
    def test_view_is_read_only(self, session):
        controller, _ = session
        view = controller.view()
        with pytest.raises(AttributeError):
            view.pc_index = 0
        with pytest.raises(TypeError):
            view.registers["x0"] = 1
        controller.step()
        assert view.pc_index == INITIAL_INDEX


class TestHighlightExpiry:
    """
    ChangeSetの自動クリアとタイマーの置き換えの検証。
    """
    # @intent:test_case_expiry 遅延後にChangeSetが空になり、通知されることを検証します。
    def test_change_set_clears_after_delay(self):
        controller, scheduler = build_controller(highlight_delay=1.0)
        controller.step()
        listener = MagicMock()
        controller.subscribe(listener)

        scheduler.advance(0.5)
        assert controller.view().changed != frozenset()
        listener.assert_not_called()

        scheduler.advance(0.5)
        assert controller.view().changed == frozenset()
        listener.assert_called_once()
        assert listener.call_args[0][0].changed == frozenset()

    # @intent:test_case_superseded 後続のStepが前回のタイマーを取り消し、古いタイマーが新しいハイライトを消さないことを検証します。
    def test_new_step_supersedes_pending_clear(self):
        controller, scheduler = build_controller(highlight_delay=1.0, policy=FixedPolicy("x3", 1))
        controller.step()
        scheduler.advance(0.8)
        second = controller.step()
        assert scheduler.pending_count == 1

        # 1回目のStepのタイマーの期限（t=1.0）を過ぎても、2回目のハイライトは残る
        scheduler.advance(0.4)
        assert controller.view().changed == second.changed == frozenset({"x3", "pc"})

        scheduler.advance(0.6)
        assert controller.view().changed == frozenset()

    # @intent:test_case_single_pending 連続したStepでも保留中のタイマーは常に1つだけであることを検証します。
    def test_repeated_steps_keep_one_pending_clear(self):
        controller, scheduler = build_controller(highlight_delay=1.0)
        for _ in range(200):
            controller.step()
            assert scheduler.pending_count == 1

        assert scheduler.advance(1.0) == 1
        assert controller.view().changed == frozenset()
        assert scheduler.pending_count == 0

    # @intent:test_case_no_leak 新しいStepのChangeSetに前回のレジスタが混入しないことを検証します。
    def test_change_set_does_not_leak_between_steps(self):
        policies = iter([FixedPolicy("x1", 1), FixedPolicy("x2", 2)])

        class Sequenced(MutationPolicy):
            def choose(self, instruction, rng):
                return next(policies).choose(instruction, rng)

        controller, _ = build_controller(policy=Sequenced())
        assert controller.step().changed == frozenset({"x1", "pc"})
        assert controller.step().changed == frozenset({"x2", "pc"})

    # @intent:test_case_reset_cancels ResetがハイライトタイマーをキャンセルしChangeSetを即座に空にすることを検証します。
    def test_reset_cancels_pending_clear(self):
        controller, scheduler = build_controller()
        controller.step()
        controller.reset()
        assert controller.view().changed == frozenset()
        assert scheduler.pending_count == 0
        assert scheduler.advance(5.0) == 0

    # @intent:test_case_halt_keeps_highlight HALTED遷移ではChangeSetが変更されないことを検証します。
    def test_halt_keeps_change_set(self):
        controller, scheduler = build_controller(count=3, initial_index=1)
        stepped = controller.step()
        halted = controller.step()
        assert halted.changed == stepped.changed
        scheduler.advance(1.0)
        assert controller.view().changed == frozenset()


class TestSubscription:
    """
    変更通知の検証。
    """
    def test_listener_receives_each_transition(self):
        controller, _ = build_controller()
        listener = MagicMock()
        controller.subscribe(listener)

        controller.step()
        controller.reset()

        assert listener.call_count == 2
        assert listener.call_args_list[0][0][0].pc_index == INITIAL_INDEX + 1
        assert listener.call_args_list[1][0][0].pc_index == INITIAL_INDEX

    def test_unsubscribe(self):
        controller, _ = build_controller()
        listener = MagicMock()
        unsubscribe = controller.subscribe(listener)
        unsubscribe()
        unsubscribe()
        controller.step()
        listener.assert_not_called()
