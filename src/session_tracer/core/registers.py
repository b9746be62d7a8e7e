# session_tracer/core/registers.py
"""
Core Layer (レジスタバンク)

このモジュールは、固定の識別子集合を持つ64bitレジスタバンクを定義します。
直近の遷移で変更されたレジスタ（ChangeSet）の記録もここで行います。
"""
import random
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set

from session_tracer.common.types import RegisterId, RegisterInfo, RegisterLayoutInfo, RegisterMap, WORD_MASK
from session_tracer.core.errors import UnknownRegister

GENERAL_PURPOSE_REGISTERS: List[RegisterId] = [f"x{i}" for i in range(31)]
SPECIAL_REGISTERS: List[RegisterId] = ["sp", "pc"]
REGISTER_IDS: List[RegisterId] = GENERAL_PURPOSE_REGISTERS + SPECIAL_REGISTERS

DEFAULT_STACK_POINTER = 0x0000007FE7AA1830


# @intent:responsibility 固定の識別子集合に対する64bitレジスタ値を保持します。
class RegisterBank:
    """
    レジスタ識別子から64bit符号なし値へのマッピング。
    識別子集合は初期化時に固定され、以後追加・削除されることはありません。
    """
    # @intent:responsibility レジスタ集合を初期化します。未指定のレジスタは0になります。
    # @intent:pre-condition valuesのキーはregister_idsに含まれている必要があります。
    def __init__(self, values: Optional[Mapping[RegisterId, int]] = None,
                 register_ids: Iterable[RegisterId] = REGISTER_IDS):
        self._values: Dict[RegisterId, int] = {reg: 0 for reg in register_ids}
        for reg in SPECIAL_REGISTERS:
            if reg not in self._values:
                raise ValueError(f"Register set must contain '{reg}'.")
        if values:
            for reg, value in values.items():
                self._check(reg)
                self._values[reg] = value & WORD_MASK
        self._changed: Set[RegisterId] = set()

    # @intent:responsibility x0..x30を乱数で初期化したレジスタバンクを生成します。
    @classmethod
    def seeded(cls, rng: random.Random, sp: int = DEFAULT_STACK_POINTER, pc: int = 0,
               overrides: Optional[Mapping[RegisterId, int]] = None) -> 'RegisterBank':
        values = {reg: rng.getrandbits(64) for reg in GENERAL_PURPOSE_REGISTERS}
        values["sp"] = sp
        values["pc"] = pc
        if overrides:
            values.update(overrides)
        return cls(values)

    def _check(self, register_id: RegisterId) -> None:
        if register_id not in self._values:
            raise UnknownRegister(register_id)

    def __contains__(self, register_id: object) -> bool:
        return register_id in self._values

    def __len__(self) -> int:
        return len(self._values)

    @property
    def register_ids(self) -> List[RegisterId]:
        return list(self._values)

    # @intent:responsibility 指定されたレジスタの値を返します。
    def get(self, register_id: RegisterId) -> int:
        """
        レジスタの値を返します。識別子が集合外の場合はUnknownRegisterを送出します。
        """
        self._check(register_id)
        return self._values[register_id]

    # @intent:responsibility 指定されたレジスタに値を設定し、変更として記録します。
    def set(self, register_id: RegisterId, value: int) -> None:
        """
        レジスタに値（64bitにマスク）を設定し、ChangeSetに識別子を記録します。
        識別子が集合外の場合はUnknownRegisterを送出し、何も変更しません。
        """
        self._check(register_id)
        self._values[register_id] = value & WORD_MASK
        self._changed.add(register_id)

    # @intent:responsibility 外部へ安全に渡せる読み取り専用のコピーを返します。
    def snapshot(self) -> RegisterMap:
        return MappingProxyType(dict(self._values))

    # @intent:responsibility スナップショットの値へ全レジスタを戻します。変更記録は破棄されます。
    def restore(self, snapshot: RegisterMap) -> None:
        if set(snapshot) != set(self._values):
            raise ValueError("Snapshot does not match the register set.")
        self._values.update(snapshot)
        self._changed.clear()

    # @intent:responsibility 前回の取り出し以降に変更されたレジスタ識別子を返し、記録をクリアします。
    def take_changes(self) -> FrozenSet[RegisterId]:
        changed = frozenset(self._changed)
        self._changed.clear()
        return changed

    # @intent:responsibility レジスタをUI上でどのように配置・グループ化すべきかの定義を返します。
    def register_layout(self) -> List[RegisterLayoutInfo]:
        general = [RegisterInfo(reg, 64) for reg in self._values if reg not in SPECIAL_REGISTERS]
        special = [RegisterInfo(reg, 64) for reg in SPECIAL_REGISTERS]
        return [
            RegisterLayoutInfo("General Purpose", general),
            RegisterLayoutInfo("Special Purpose", special),
        ]
