# session_tracer/core/memory.py
"""
静的メモリイメージ

このモジュールは、HEXダンプ表示に用いる固定長・読み取り専用のバイト列を定義します。
セッション中に書き込みが行われることはありません。
"""
import random
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

DEFAULT_MEMORY_BASE = 0x0000007FE7AA1830
DEFAULT_MEMORY_LENGTH = 1024
BYTES_PER_ROW = 8


# @intent:responsibility HEXダンプの1行（先頭アドレスとバイト列）を表します。
@dataclass(frozen=True)
class MemoryRow:
    address: int
    data: bytes

    @property
    def short_address(self) -> str:
        return f"0x{self.address:016x}"[-8:]

    def hex_cells(self) -> List[str]:
        return [f"{value:02x}" for value in self.data]


# @intent:responsibility 固定長のバイト列を不変に保持し、行単位の読み出しを提供します。
class MemoryImage:
    """
    固定長のバイト列。ベースアドレスは表示用です。
    """
    # @intent:pre-condition dataは空でないバイト列である必要があります。
    def __init__(self, data: bytes, base_address: int = DEFAULT_MEMORY_BASE):
        if not data:
            raise ValueError("Memory image must contain at least one byte.")
        if base_address < 0:
            raise ValueError("Base address must be non-negative.")
        self._data = bytes(data)
        self._base_address = base_address

    # @intent:responsibility 乱数で埋めたメモリイメージを生成します。
    @classmethod
    def generate(cls, length: int = DEFAULT_MEMORY_LENGTH, rng: Optional[random.Random] = None,
                 base_address: int = DEFAULT_MEMORY_BASE) -> 'MemoryImage':
        if not isinstance(length, int) or length <= 0:
            raise ValueError("Memory length must be a positive integer.")
        rng = rng if rng is not None else random.Random()
        return cls(bytes(rng.getrandbits(8) for _ in range(length)), base_address)

    @property
    def base_address(self) -> int:
        return self._base_address

    @property
    def data(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    # @intent:responsibility オフセット位置のバイト値を返します。
    # @intent:pre-condition オフセットはイメージの有効範囲内である必要があります。
    def read(self, offset: int) -> int:
        if not 0 <= offset < len(self._data):
            raise IndexError(f"Offset {offset} out of bounds for memory image of size {len(self._data)}.")
        return self._data[offset]

    # @intent:responsibility HEXダンプ用に、行単位でバイト列を切り出して返します。
    def rows(self, bytes_per_row: int = BYTES_PER_ROW) -> Iterator[MemoryRow]:
        if bytes_per_row <= 0:
            raise ValueError("bytes_per_row must be a positive integer.")
        for offset in range(0, len(self._data), bytes_per_row):
            yield MemoryRow(self._base_address + offset, self._data[offset:offset + bytes_per_row])

    def dump(self, bytes_per_row: int = BYTES_PER_ROW) -> List[Tuple[str, List[str]]]:
        """
        (アドレス下位8桁, ["xx", ...]) のリストを返します。
        """
        return [(row.short_address, row.hex_cells()) for row in self.rows(bytes_per_row)]
