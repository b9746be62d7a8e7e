# tests/core/test_register_bank.py
"""
session_tracer.core.registersモジュールの単体テスト。
"""
import random
import pytest

from session_tracer.core.errors import SessionError, UnknownRegister
from session_tracer.core.registers import (
    DEFAULT_STACK_POINTER,
    GENERAL_PURPOSE_REGISTERS,
    REGISTER_IDS,
    RegisterBank,
)

# @intent:test_suite 固定識別子集合を持つレジスタバンクの検証。

class TestRegisterBank:
    @pytest.fixture
    def bank(self):
        return RegisterBank.seeded(random.Random(5), pc=0x1000)

    # @intent:test_case_fixed_set 全識別子が常に存在することを検証します。
    def test_all_identifiers_present(self, bank):
        snapshot = bank.snapshot()
        assert list(snapshot) == REGISTER_IDS
        assert len(bank) == 33
        assert "sp" in snapshot and "pc" in snapshot
        assert snapshot["sp"] == DEFAULT_STACK_POINTER
        assert snapshot["pc"] == 0x1000

    def test_seeded_is_reproducible(self):
        first = RegisterBank.seeded(random.Random(11)).snapshot()
        second = RegisterBank.seeded(random.Random(11)).snapshot()
        assert first == second

    # @intent:test_case_unknown_get 集合外のレジスタの読み出しがUnknownRegisterを送出することを検証します。
    def test_get_unknown_register(self, bank):
        with pytest.raises(UnknownRegister) as excinfo:
            bank.get("x31")
        assert excinfo.value.register_id == "x31"
        assert isinstance(excinfo.value, SessionError)
        assert isinstance(excinfo.value, KeyError)

    # @intent:test_case_unknown_set 集合外のレジスタへの書き込みがエントリを作成しないことを検証します。
    def test_set_unknown_register_creates_nothing(self, bank):
        with pytest.raises(UnknownRegister):
            bank.set("lr", 1)
        assert "lr" not in bank
        assert bank.take_changes() == frozenset()

    # @intent:test_case_set 書き込みが値を64bitにマスクし、変更として記録することを検証します。
    def test_set_records_change(self, bank):
        bank.set("x3", (1 << 64) + 5)
        assert bank.get("x3") == 5
        bank.set("pc", 0x2000)
        assert bank.take_changes() == frozenset({"x3", "pc"})
        assert bank.take_changes() == frozenset()

    # @intent:test_case_snapshot スナップショットが読み取り専用で、以後の変更の影響を受けないことを検証します。
    def test_snapshot_is_immutable_copy(self, bank):
        snapshot = bank.snapshot()
        original = snapshot["x0"]
        bank.set("x0", original ^ 1)
        assert snapshot["x0"] == original
        with pytest.raises(TypeError):
            snapshot["x0"] = 0

    def test_restore(self, bank):
        snapshot = bank.snapshot()
        bank.set("x10", 0)
        bank.set("pc", 0)
        bank.restore(snapshot)
        assert bank.snapshot() == snapshot
        assert bank.take_changes() == frozenset()

    def test_restore_rejects_foreign_snapshot(self, bank):
        with pytest.raises(ValueError):
            bank.restore({"x0": 0})

    def test_overrides_and_unknown_initial_value(self):
        bank = RegisterBank.seeded(random.Random(0), overrides={"x4": 0x44})
        assert bank.get("x4") == 0x44
        with pytest.raises(UnknownRegister):
            RegisterBank({"w0": 1})

    def test_register_set_must_contain_special_registers(self):
        with pytest.raises(ValueError):
            RegisterBank(register_ids=["x0", "pc"])

    # @intent:test_case_layout UI用のレイアウト定義が汎用レジスタと特殊レジスタに分かれていることを検証します。
    def test_register_layout(self, bank):
        layout = bank.register_layout()
        assert [group.group_name for group in layout] == ["General Purpose", "Special Purpose"]
        assert [reg.name for reg in layout[0].registers] == GENERAL_PURPOSE_REGISTERS
        assert [reg.name for reg in layout[1].registers] == ["sp", "pc"]
        assert all(reg.width == 64 for group in layout for reg in group.registers)
