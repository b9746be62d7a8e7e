# src/session_tracer/ui/register_view.py
"""
レジスタバンクを表示するウィジェット。
SessionControllerのレイアウト情報を利用して動的にUIを構築します。
"""
from typing import Dict, List

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QGridLayout, QGroupBox, QLabel, QVBoxLayout, QWidget

from session_tracer.common.types import RegisterLayoutInfo, format_word
from session_tracer.debugger.session import SessionView
from session_tracer.ui import theme

GENERAL_COLUMNS = 3
SPECIAL_COLUMNS = 2

VALUE_STYLE = "padding: 0 2px; border-radius: 2px;"

# @intent:responsibility レジスタ値と変更ハイライトを表示する汎用UIウィジェットを提供します。
class RegisterView(QWidget):
    """
    レジスタの値を表示するウィジェット。
    直近のStepで変更されたレジスタは、ハイライトの期限が切れるまで強調表示されます。
    """
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet(f"background-color: {theme.PANEL}; color: {theme.TEXT};")

        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(5, 5, 5, 5)

        self._font_family = theme.get_monospace_font_family()
        self._register_labels: Dict[str, QLabel] = {}
        self._highlighted: frozenset = frozenset()

    # @intent:responsibility レイアウト情報に基づいてUIを構築します。
    def set_layout(self, layout_info: List[RegisterLayoutInfo]) -> None:
        while self.layout.count():
            item = self.layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        self._register_labels.clear()

        for group in layout_info:
            group_box = QGroupBox(group.group_name)
            group_box.setStyleSheet(f"""
                QGroupBox {{
                    font-weight: bold;
                    border: 1px solid {theme.BORDER};
                    border-radius: 4px;
                    margin-top: 20px;
                    color: {theme.TEXT_MUTED};
                }}
                QGroupBox::title {{
                    subcontrol-origin: margin;
                    subcontrol-position: top left;
                    padding: 0 5px;
                    left: 10px;
                }}
            """)
            grid = QGridLayout(group_box)
            grid.setContentsMargins(10, 15, 10, 10)
            grid.setHorizontalSpacing(18)
            grid.setVerticalSpacing(4)
            columns = SPECIAL_COLUMNS if len(group.registers) <= SPECIAL_COLUMNS else GENERAL_COLUMNS

            for position, reg in enumerate(group.registers):
                row, column = divmod(position, columns)
                hex_width = (reg.width + 3) // 4

                label_name = QLabel(reg.name if reg.name.startswith("x") else reg.name.upper())
                label_name.setStyleSheet(f"color: {theme.TEXT_MUTED};")

                label_value = QLabel(f"0x{'0' * hex_width}")
                label_value.setAlignment(Qt.AlignLeft | Qt.AlignVCenter)
                label_value.setStyleSheet(self._value_style(False))

                grid.addWidget(label_name, row, column * 2)
                grid.addWidget(label_value, row, column * 2 + 1)
                self._register_labels[reg.name] = label_value

            self.layout.addWidget(group_box)

        self.layout.addStretch()

    def _value_style(self, changed: bool) -> str:
        if changed:
            return (f"font-family: '{self._font_family}', monospace; color: {theme.CHANGED_VALUE}; "
                    f"background-color: {theme.CHANGED_BACKGROUND}; {VALUE_STYLE}")
        return f"font-family: '{self._font_family}', monospace; color: {theme.TEXT}; {VALUE_STYLE}"

    # @intent:responsibility セッションのスナップショットでレジスタ値とハイライトを更新します。
    def update_registers(self, view: SessionView) -> None:
        for name, value in view.registers.items():
            label = self._register_labels.get(name)
            if label is None:
                continue
            label.setText(format_word(value))
            changed = name in view.changed
            if changed != (name in self._highlighted):
                label.setStyleSheet(self._value_style(changed))
        self._highlighted = frozenset(view.changed)

    def value_text(self, name: str) -> str:
        return self._register_labels[name].text()

    def is_highlighted(self, name: str) -> bool:
        return name in self._highlighted
