"""
UIテーマ管理モジュール。

クロスプラットフォーム（Windows/Mac/Linux）で最適な等幅フォントの選択と、
各ビューで共有する配色・ダークテーマの適用を提供します。
"""
from PySide6.QtGui import QColor, QFont, QFontDatabase, QPalette
from PySide6.QtWidgets import QApplication

# 配色
BACKGROUND = "#020617"
PANEL = "#0f172a"
PANEL_HEADER = "#1e293b"
BORDER = "#334155"
TEXT = "#e5e7eb"
TEXT_MUTED = "#64748b"
TEXT_DIM = "#374151"
ACTIVE_ROW = "#3a3000"
ACTIVE_TEXT = "#facc15"
MNEMONIC = "#60a5fa"
REGISTER_TOKEN = "#facc15"
IMMEDIATE_TOKEN = "#34d399"
PUNCTUATION_TOKEN = "#6b7280"
CHANGED_VALUE = "#fbbf24"
CHANGED_BACKGROUND = "#2b2410"
PROMPT = "#10b981"

# @intent:responsibility 現在のシステムで利用可能な最適な等幅フォントファミリー名を返します。
def get_monospace_font_family() -> str:
    """
    優先順位: JetBrains Mono -> Consolas -> Menlo -> Monaco -> Courier New -> システム既定
    """
    preferred_fonts = ["JetBrains Mono", "Consolas", "Menlo", "Monaco", "Courier New"]
    available_families = QFontDatabase.families()

    for font in preferred_fonts:
        if font in available_families:
            return font

    return QFontDatabase.systemFont(QFontDatabase.FixedFont).family()

# @intent:responsibility 指定されたサイズを持つ等幅フォントのQFontオブジェクトを返します。
def get_monospace_font(size: int = 10) -> QFont:
    return QFont(get_monospace_font_family(), size)

# @intent:responsibility アプリケーション全体にダークパレットを適用します。
def apply_dark_palette() -> None:
    palette = QPalette()
    palette.setColor(QPalette.Window, QColor(BACKGROUND))
    palette.setColor(QPalette.WindowText, QColor(TEXT))
    palette.setColor(QPalette.Base, QColor(PANEL))
    palette.setColor(QPalette.AlternateBase, QColor(PANEL_HEADER))
    palette.setColor(QPalette.ToolTipBase, QColor(PANEL))
    palette.setColor(QPalette.ToolTipText, QColor(TEXT))
    palette.setColor(QPalette.Text, QColor(TEXT))
    palette.setColor(QPalette.Button, QColor(PANEL_HEADER))
    palette.setColor(QPalette.ButtonText, QColor(TEXT))
    palette.setColor(QPalette.Highlight, QColor(ACTIVE_ROW))
    palette.setColor(QPalette.HighlightedText, QColor(ACTIVE_TEXT))
    QApplication.setPalette(palette)

# @intent:responsibility パネル見出し用のスタイルシートを返します。
def panel_header_style(accent: str) -> str:
    return (f"background-color: {PANEL_HEADER}; color: {accent}; font-weight: bold; "
            f"letter-spacing: 2px; padding: 6px; border-bottom: 1px solid {BORDER};")
