# session_tracer/core/instruction.py
"""
命令レコードの定義

このモジュールは、逆アセンブルリストの1行に相当する不変の命令レコードと、
オペランドテキストを表示用のトークンへ分解する補助関数を定義します。
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from session_tracer.common.types import format_word


# @intent:responsibility デコード済みの1命令（アドレス、ニーモニック、オペランド）を不変に記録します。
@dataclass(frozen=True) # 不変データ構造
class Instruction:
    """
    命令列中の1命令を記録するデータクラス。
    セッション開始時に一度だけ生成され、以後変更されることはありません。
    """
    address: int # 例: 0x0000007da8c3bbe0
    mnemonic: str # 例: "ldr"
    operands: str = "" # 例: "x1, [x2, #0x10]"
    annotation: Optional[str] = None # 例: "PC" (PC相対)

    # @intent:responsibility アドレスの正規テキスト表現（0x + 16桁）を返します。
    @property
    def address_text(self) -> str:
        return format_word(self.address)

    # @intent:responsibility リスト表示用に、アドレスの下位8桁のみを返します。
    @property
    def short_address(self) -> str:
        return self.address_text[-8:]

    def __str__(self) -> str:
        text = f"{self.address_text}: {self.mnemonic}"
        if self.operands:
            text += f" {self.operands}"
        if self.annotation:
            text += f" ; {self.annotation}"
        return text


# @intent:responsibility オペランドテキストを構成するトークンの種類を定義します。
class OperandTokenKind(Enum):
    REGISTER = "REGISTER"       # x0, w8, sp, lr, pc
    IMMEDIATE = "IMMEDIATE"     # #0x1f, 0x7da8c3bde3
    PUNCTUATION = "PUNCTUATION" # "[", "]", ","
    TEXT = "TEXT"               # 空白・その他


_SPLIT_PATTERN = re.compile(r"([, \[\]#])")
_REGISTER_PATTERN = re.compile(r"^(x[0-9]+|w[0-9]+|sp|lr|pc)")
_IMMEDIATE_PATTERN = re.compile(r"^#?0x")


# @intent:responsibility オペランドテキストを表示色分け用のトークン列に分解します。
# @intent:rationale "#" は区切り文字として分割された後、直後の "0x.." と結合して即値トークンにします。
def tokenize_operands(text: str) -> List[Tuple[OperandTokenKind, str]]:
    """
    オペランドテキストを (種類, テキスト) のリストに分解します。
    トークンを連結すると元のテキストに戻ります。
    """
    tokens: List[Tuple[OperandTokenKind, str]] = []
    pending_hash = ""
    for part in _SPLIT_PATTERN.split(text):
        if not part:
            continue
        if part == "#":
            pending_hash += part
            continue
        part = pending_hash + part
        pending_hash = ""

        if _REGISTER_PATTERN.match(part):
            kind = OperandTokenKind.REGISTER
        elif _IMMEDIATE_PATTERN.match(part):
            kind = OperandTokenKind.IMMEDIATE
        elif part in ("[", "]", ","):
            kind = OperandTokenKind.PUNCTUATION
        else:
            kind = OperandTokenKind.TEXT
        tokens.append((kind, part))

    if pending_hash:
        tokens.append((OperandTokenKind.TEXT, pending_hash))
    return tokens
