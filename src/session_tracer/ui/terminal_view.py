"""
コマンドターミナルのウィジェット。
履歴の表示と、1行のコマンド入力を提供します。
"""
from typing import Sequence

from PySide6.QtCore import Signal, Slot
from PySide6.QtGui import QTextOption
from PySide6.QtWidgets import QHBoxLayout, QLabel, QLineEdit, QPlainTextEdit, QVBoxLayout, QWidget

from session_tracer.ui import theme

BANNER = "Debugger initialised. Ready for commands. Type 'n' to step."
PLACEHOLDER = "Enter command (n/step, r/reset)..."

# @intent:responsibility コマンド履歴の表示と、コマンド入力の受け付けを行うUIウィジェットを提供します。
class TerminalView(QWidget):
    """
    入力されたテキストはcommand_submittedシグナルで通知され、入力欄はクリアされます。
    空白のみの入力は通知しません。
    """
    command_submitted = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)
        self.layout.setSpacing(0)

        self.transcript = QPlainTextEdit(self)
        self.transcript.setReadOnly(True)
        self.transcript.setFont(theme.get_monospace_font(10))
        self.transcript.setWordWrapMode(QTextOption.NoWrap)
        self.transcript.setStyleSheet(f"background-color: {theme.BACKGROUND}; color: {theme.TEXT}; border: none;")
        self.layout.addWidget(self.transcript)

        input_row = QWidget()
        input_row.setStyleSheet(f"background-color: {theme.PANEL}; border-top: 1px solid {theme.BORDER};")
        input_layout = QHBoxLayout(input_row)
        input_layout.setContentsMargins(6, 4, 6, 4)
        prompt = QLabel(">")
        prompt.setStyleSheet(f"color: {theme.PROMPT}; font-weight: bold; border: none;")
        input_layout.addWidget(prompt)

        self.input = QLineEdit()
        self.input.setPlaceholderText(PLACEHOLDER)
        self.input.setFont(theme.get_monospace_font(10))
        self.input.setStyleSheet(f"background: transparent; border: none; color: {theme.TEXT};")
        self.input.returnPressed.connect(self._submit)
        input_layout.addWidget(self.input)
        self.layout.addWidget(input_row)

        self.update_history(())

    @Slot()
    def _submit(self):
        text = self.input.text()
        self.input.clear()
        if not text.strip():
            return
        self.command_submitted.emit(text)

    # @intent:responsibility バナーと履歴から、ターミナルの表示内容を再生成します。
    def update_history(self, history: Sequence[str]) -> None:
        self.transcript.setPlainText("\n".join([BANNER, *history]))
        scrollbar = self.transcript.verticalScrollBar()
        scrollbar.setValue(scrollbar.maximum())

    def transcript_lines(self) -> list:
        return self.transcript.toPlainText().split("\n")
