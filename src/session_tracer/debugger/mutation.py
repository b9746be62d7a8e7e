# session_tracer/debugger/mutation.py
"""
ステップ時のレジスタ変更ポリシー。

実際の命令セマンティクスは模擬しません。ステップごとに1つの汎用レジスタと
その新しい値を選ぶ方法だけを定義します。
"""
import random
import re
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from session_tracer.common.types import RegisterId
from session_tracer.core.instruction import Instruction
from session_tracer.core.registers import GENERAL_PURPOSE_REGISTERS

WORD32_MASK = 0xFFFFFFFF

_DESTINATION_PATTERN = re.compile(r"^([xw])([0-9]+)$")


# @intent:responsibility ステップ時に変更するレジスタと値を決定するインターフェースを定義します。
class MutationPolicy(ABC):
    @abstractmethod
    def choose(self, instruction: Instruction, rng: random.Random) -> Tuple[RegisterId, int]:
        """
        次に実行位置となる命令を受け取り、(レジスタ識別子, 新しい値) を返します。
        """
        pass


# @intent:responsibility x0..x30から無作為に1つ選び、無作為な64bit値を設定します。
class RandomMutationPolicy(MutationPolicy):
    def choose(self, instruction: Instruction, rng: random.Random) -> Tuple[RegisterId, int]:
        return rng.choice(GENERAL_PURPOSE_REGISTERS), rng.getrandbits(64)


# @intent:responsibility 命令の第1オペランドから変更先レジスタを決定します。
# @intent:rationale wNはxNの下位32bitとして扱います。汎用レジスタが宛先でない命令は無作為選択に戻ります。
class OperandMutationPolicy(MutationPolicy):
    def __init__(self, fallback: Optional[MutationPolicy] = None):
        self._fallback = fallback if fallback is not None else RandomMutationPolicy()

    def choose(self, instruction: Instruction, rng: random.Random) -> Tuple[RegisterId, int]:
        destination = instruction.operands.split(",", 1)[0].strip()
        match = _DESTINATION_PATTERN.match(destination)
        if match is None:
            return self._fallback.choose(instruction, rng)

        register_id = f"x{match.group(2)}"
        if register_id not in GENERAL_PURPOSE_REGISTERS:
            return self._fallback.choose(instruction, rng)

        value = rng.getrandbits(64)
        if match.group(1) == "w":
            value &= WORD32_MASK
        return register_id, value


POLICIES = {
    "random": RandomMutationPolicy,
    "operand": OperandMutationPolicy,
}


def create_policy(name: str) -> MutationPolicy:
    try:
        return POLICIES[name]()
    except KeyError:
        raise ValueError(f"Unknown mutation policy: {name}") from None
