# src/session_tracer/ui/hex_view.py
"""
メモリイメージの内容を16進数で表示するウィジェット。
"""
from typing import List

from PySide6.QtGui import QTextOption
from PySide6.QtWidgets import QLabel, QTextEdit, QVBoxLayout, QWidget

from session_tracer.core.memory import BYTES_PER_ROW, MemoryImage
from session_tracer.ui import theme

# @intent:responsibility メモリイメージを行ごとのHTMLに変換します。0x00のバイトは暗く表示します。
def render_memory_lines(memory: MemoryImage, bytes_per_row: int = BYTES_PER_ROW) -> List[str]:
    lines = []
    for row in memory.rows(bytes_per_row):
        cells = []
        for value, cell in zip(row.data, row.hex_cells()):
            color = theme.TEXT_DIM if value == 0 else theme.TEXT
            cells.append(f'<span style="color: {color};">{cell}</span>')
        lines.append(f'<span style="color: {theme.TEXT_MUTED};">0x{row.short_address}</span>'
                     f'&nbsp;&nbsp;{"&nbsp;".join(cells)}')
    return lines

# @intent:responsibility メモリイメージの内容をHEXダンプ形式で表示するUIウィジェットを提供します。
class HexView(QWidget):
    """
    メモリイメージはセッション中に変化しないため、表示は一度だけ生成します。
    """
    def __init__(self, parent=None):
        super().__init__(parent)
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)
        self.layout.setSpacing(0)

        header = QLabel("MEMORY (HEX)")
        header.setStyleSheet(theme.panel_header_style("#c084fc"))
        self.layout.addWidget(header)

        self.editor = QTextEdit(self)
        self.editor.setFont(theme.get_monospace_font(10))
        self.editor.setReadOnly(True)
        self.editor.setWordWrapMode(QTextOption.NoWrap)
        self.editor.setStyleSheet(f"background-color: {theme.PANEL}; color: {theme.TEXT};")
        self.layout.addWidget(self.editor)
        self.row_count = 0

    # @intent:responsibility メモリイメージ全体を描画します。
    def set_memory(self, memory: MemoryImage) -> None:
        lines = render_memory_lines(memory)
        self.row_count = len(lines)
        self.editor.setHtml("<br>".join(lines))
