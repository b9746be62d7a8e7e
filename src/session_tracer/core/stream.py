# session_tracer/core/stream.py
"""
命令列ジェネレータ

このモジュールは、セッションで表示・ステップ実行される模擬的なAArch64命令列を生成します。
生成は注入された乱数源のみに依存するため、シードを固定すれば再現可能です。
"""
import random
from typing import List, Optional

from session_tracer.core.instruction import Instruction

INSTRUCTION_WIDTH = 4 # AArch64の固定命令長（バイト）
DEFAULT_BASE_ADDRESS = 0x0000007DA8C3BBE0
DEFAULT_ANNOTATION = "PC"

# 命令語彙
MNEMONICS = ['mov', 'add', 'ldr', 'str', 'subs', 'b', 'bl', 'stp', 'ldp', 'ret', 'cmp', 'eor', 'orr', 'ands']
# オペランドに現れるレジスタ語彙
OPERAND_REGISTERS = ['x0', 'x1', 'x2', 'x3', 'x4', 'x5', 'x6', 'x7', 'x8', 'w0', 'w8', 'w9', 'w10', 'sp', 'lr']

LOAD_STORE_MNEMONICS = frozenset(['ldr', 'str'])
BRANCH_MNEMONICS = frozenset(['b', 'bl'])
RETURN_MNEMONICS = frozenset(['ret'])

BRANCH_RANGE = 1000 # 分岐先はベースアドレスからこのバイト数以内
MAX_IMMEDIATE = 0xFF


# @intent:responsibility ニーモニックの種類に応じてオペランドテキストを組み立てます。
def format_operands(mnemonic: str, rng: random.Random, base_address: int) -> str:
    """
    ニーモニックのクラスごとのオペランド書式:
      load/store -> "<reg>, [<reg>, #<imm>]"
      branch     -> 分岐先の絶対アドレス "0x<hex>"
      return     -> ""
      その他     -> "<reg>, <reg>"
    """
    if mnemonic in RETURN_MNEMONICS:
        return ""
    if mnemonic in BRANCH_MNEMONICS:
        target = base_address + rng.randrange(BRANCH_RANGE)
        return f"0x{target:x}"

    r1 = rng.choice(OPERAND_REGISTERS)
    r2 = rng.choice(OPERAND_REGISTERS)
    if mnemonic in LOAD_STORE_MNEMONICS:
        imm = rng.randrange(MAX_IMMEDIATE)
        return f"{r1}, [{r2}, #0x{imm:x}]"
    return f"{r1}, {r2}"


# @intent:responsibility 指定されたベースアドレスと件数から、順序付けられた不変の命令列を生成します。
# @intent:pre-condition base_addressは非負、instruction_widthは正である必要があります。
def generate(base_address: int = DEFAULT_BASE_ADDRESS,
             count: int = 2000,
             rng: Optional[random.Random] = None,
             instruction_width: int = INSTRUCTION_WIDTH,
             annotation_probability: float = 0.3) -> List[Instruction]:
    """
    命令列を生成して返します。
    i番目の命令のアドレスは base_address + i * instruction_width となります。
    rngを省略した場合はシードなしのRandomを使用します（再現性なし）。
    """
    if base_address < 0:
        raise ValueError("Base address must be non-negative.")
    if instruction_width <= 0:
        raise ValueError("Instruction width must be a positive integer.")
    if not 0.0 <= annotation_probability <= 1.0:
        raise ValueError("Annotation probability must be between 0.0 and 1.0.")

    rng = rng if rng is not None else random.Random()
    instructions = []
    for i in range(max(count, 0)):
        mnemonic = rng.choice(MNEMONICS)
        operands = format_operands(mnemonic, rng, base_address)
        # 注釈は表示上の飾りであり、ステップ実行には影響しない
        annotation = DEFAULT_ANNOTATION if rng.random() < annotation_probability else None
        instructions.append(Instruction(
            address=base_address + i * instruction_width,
            mnemonic=mnemonic,
            operands=operands,
            annotation=annotation,
        ))
    return instructions
