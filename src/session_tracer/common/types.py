"""
共通の型定義を提供するモジュール。
プロジェクト全体で使用される汎用的な型エイリアスなどを定義します。
"""
from typing import Callable, List, Mapping, NamedTuple

# @intent:data_structure レジスタ識別子（"x0".."x30", "sp", "pc"）の型エイリアス。
RegisterId = str

# @intent:data_structure レジスタ識別子と値の読み取り専用マッピング。UIへ渡すスナップショットで使用されます。
RegisterMap = Mapping[RegisterId, int]

# @intent:data_structure 64bit値のマスク。
WORD_MASK = 0xFFFFFFFFFFFFFFFF

# @intent:data_structure 単一のレジスタの表示定義。UIが動的にフィールドを生成するために使用される。
class RegisterInfo(NamedTuple):
    name: str
    width: int  # ビット幅 (64)

# @intent:data_structure レジスタグループの表示定義。関連するレジスタ（例: "General Purpose"）をまとめる。
class RegisterLayoutInfo(NamedTuple):
    group_name: str
    registers: List[RegisterInfo]

# @intent:data_structure ハイライト解除などの遅延実行に渡すコールバックの型。
Callback = Callable[[], None]


def format_word(value: int) -> str:
    """
    64bit値を "0x" + 16桁の16進数テキストに整形します。
    """
    return f"0x{value & WORD_MASK:016x}"
