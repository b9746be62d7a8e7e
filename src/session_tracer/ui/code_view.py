"""
逆アセンブルリストを表示するウィジェット。
"""
import html
from typing import Optional, Sequence

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor
from PySide6.QtWidgets import QHeaderView, QLabel, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget, QHBoxLayout

from session_tracer.core.instruction import Instruction, OperandTokenKind, tokenize_operands
from session_tracer.debugger.session import SessionView
from session_tracer.ui import theme

_TOKEN_COLORS = {
    OperandTokenKind.REGISTER: theme.REGISTER_TOKEN,
    OperandTokenKind.IMMEDIATE: theme.IMMEDIATE_TOKEN,
    OperandTokenKind.PUNCTUATION: theme.PUNCTUATION_TOKEN,
}

COLUMN_INDEX, COLUMN_ADDRESS, COLUMN_MNEMONIC, COLUMN_OPERANDS, COLUMN_NOTE = range(5)

# @intent:responsibility オペランドテキストをトークン種別ごとに色分けしたHTMLに変換します。
def operand_html(text: str) -> str:
    parts = []
    for kind, token in tokenize_operands(text):
        escaped = html.escape(token).replace(" ", "&nbsp;")
        color = _TOKEN_COLORS.get(kind)
        parts.append(f'<span style="color: {color};">{escaped}</span>' if color else escaped)
    return "".join(parts)

# @intent:responsibility 命令列を表形式で表示し、現在の実行位置をハイライトするUIウィジェットを提供します。
class CodeView(QWidget):
    """
    命令列全体を表示するウィジェット。
    行は一度だけ生成し、以降はハイライト行の付け替えとスクロールのみを行います。
    """
    def __init__(self, parent=None):
        super().__init__(parent)
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)
        self.layout.setSpacing(0)

        header = QWidget()
        header.setStyleSheet(theme.panel_header_style(theme.MNEMONIC))
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(6, 2, 6, 2)
        header_layout.addWidget(QLabel("INSTRUCTIONS"))
        header_layout.addStretch()
        self.position_label = QLabel("0 / 0")
        self.position_label.setStyleSheet(f"color: {theme.TEXT_MUTED}; font-weight: normal;")
        header_layout.addWidget(self.position_label)
        self.layout.addWidget(header)

        self.table = QTableWidget()
        self.table.setColumnCount(5)
        self.table.setHorizontalHeaderLabels(["#", "Address", "Mnemonic", "Operands", ""])
        self.table.horizontalHeader().setVisible(False)
        self.table.horizontalHeader().setSectionResizeMode(COLUMN_INDEX, QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setSectionResizeMode(COLUMN_ADDRESS, QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setSectionResizeMode(COLUMN_MNEMONIC, QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setSectionResizeMode(COLUMN_OPERANDS, QHeaderView.Stretch)
        self.table.horizontalHeader().setSectionResizeMode(COLUMN_NOTE, QHeaderView.ResizeToContents)
        self.table.setFont(theme.get_monospace_font(10))
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.setSelectionMode(QTableWidget.NoSelection)
        self.table.setShowGrid(False)
        self.table.setStyleSheet(f"background-color: {theme.PANEL}; color: {theme.TEXT};")
        self.layout.addWidget(self.table)

        self.active_row = -1
        self.instruction_count = 0

    # @intent:responsibility 命令列からテーブルの行を生成します。
    def set_instructions(self, instructions: Sequence[Instruction]) -> None:
        self.active_row = -1
        self.instruction_count = len(instructions)
        self.table.setRowCount(len(instructions))

        for row, instruction in enumerate(instructions):
            index_item = QTableWidgetItem(str(row))
            index_item.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
            index_item.setForeground(QColor(theme.TEXT_MUTED))
            address_item = QTableWidgetItem(instruction.short_address)
            address_item.setForeground(QColor(theme.TEXT_MUTED))
            mnemonic_item = QTableWidgetItem(instruction.mnemonic.upper())
            mnemonic_item.setForeground(QColor(theme.MNEMONIC))
            note_item = QTableWidgetItem(f"; {instruction.annotation}" if instruction.annotation else "")
            note_item.setForeground(QColor(theme.TEXT_DIM))

            self.table.setItem(row, COLUMN_INDEX, index_item)
            self.table.setItem(row, COLUMN_ADDRESS, address_item)
            self.table.setItem(row, COLUMN_MNEMONIC, mnemonic_item)
            self.table.setItem(row, COLUMN_OPERANDS, QTableWidgetItem(instruction.operands))
            self.table.setItem(row, COLUMN_NOTE, note_item)

            operand_label = QLabel(operand_html(instruction.operands))
            operand_label.setTextFormat(Qt.RichText)
            operand_label.setStyleSheet("background: transparent;")
            self.table.setCellWidget(row, COLUMN_OPERANDS, operand_label)

    # @intent:responsibility セッションの状態に合わせてハイライト行と位置表示を更新します。
    def update_view(self, view: SessionView) -> None:
        self.position_label.setText(f"{view.pc_index} / {view.instruction_count}")
        if view.pc_index == self.active_row:
            return
        if self.active_row >= 0:
            self._paint_row(self.active_row, active=False)
        self.active_row = view.pc_index
        self._paint_row(self.active_row, active=True)

    def _paint_row(self, row: int, active: bool) -> None:
        if not 0 <= row < self.table.rowCount():
            return
        background = QColor(theme.ACTIVE_ROW) if active else QColor(theme.PANEL)
        for column in range(self.table.columnCount()):
            item = self.table.item(row, column)
            if item is not None:
                item.setBackground(background)
        index_item = self.table.item(row, COLUMN_INDEX)
        index_item.setForeground(QColor(theme.ACTIVE_TEXT if active else theme.TEXT_MUTED))
        mnemonic_item = self.table.item(row, COLUMN_MNEMONIC)
        mnemonic_item.setForeground(QColor(theme.ACTIVE_TEXT if active else theme.MNEMONIC))

    # @intent:responsibility 指定された行を表示領域の中央付近へスクロールします。
    def reveal(self, row: int) -> None:
        """
        ViewSyncから呼び出されます。スクロールは即時に行われ、入力を待たせません。
        """
        item: Optional[QTableWidgetItem] = self.table.item(row, COLUMN_INDEX)
        if item is not None:
            self.table.scrollToItem(item, QTableWidget.PositionAtCenter)
