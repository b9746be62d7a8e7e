# src/session_tracer/ui/main_window.py
"""
メインウィンドウの実装。
命令リスト、ステータス、レジスタ、ターミナル、メモリの各パネルを保持し、
セッションの変更通知を受けて全パネルを同じSessionViewから更新します。
"""
from datetime import datetime

from PySide6.QtCore import Qt, QTimer, Slot
from PySide6.QtGui import QAction, QCloseEvent, QKeySequence
from PySide6.QtWidgets import (
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QSplitter,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from session_tracer.config.models import DisplaySettings
from session_tracer.debugger.session import SessionController, SessionView
from session_tracer.debugger.view_sync import ViewSync
from .code_view import CodeView
from .hex_view import HexView
from .register_view import RegisterView
from .terminal_view import TerminalView
from . import theme

TIMESTAMP_FORMAT = "%B %d, %Y - %H:%M:%S"

# @intent:responsibility アプリケーションのメインウィンドウを定義し、UIの主要なコンポーネントを組み立てます。
class MainWindow(QMainWindow):
    """
    アプリケーションのメインウィンドウクラス。
    ウィンドウはセッションを読むだけで、変更はコントローラのstep/reset/submitを介して行います。
    """
    def __init__(self, controller: SessionController, display: DisplaySettings = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Session Tracer")
        self.setGeometry(100, 100, 1400, 860)

        self.controller = controller
        self.display = display if display is not None else DisplaySettings()

        theme.apply_dark_palette()
        self.setStyleSheet(f"QMainWindow, QToolBar {{ background-color: {theme.BACKGROUND}; border: none; }}")
        self._create_toolbar()
        self._create_panes()
        self._create_footer()

        self.code_view.set_instructions(controller.instructions)
        self.register_view.set_layout(controller.register_layout())
        self.hex_view.set_memory(controller.memory)

        self._unsubscribe = controller.subscribe(self._update_ui_from_view)
        self.view_sync = ViewSync(controller, self.code_view.reveal)
        self._update_ui_from_view(controller.view())

    # @intent:responsibility 実行制御用のツールバーを作成します。Runは常に無効です。
    def _create_toolbar(self):
        toolbar = QToolBar("Main Toolbar")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        self.run_action = QAction("Run", self)
        self.run_action.setShortcut(QKeySequence("F5"))
        self.run_action.setToolTip("Run (F5)")
        self.run_action.setEnabled(False)
        toolbar.addAction(self.run_action)

        self.step_action = QAction("Step", self)
        self.step_action.setShortcut(QKeySequence("F7"))
        self.step_action.setToolTip("Step Into (F7)")
        self.step_action.triggered.connect(self._step_session)
        toolbar.addAction(self.step_action)

        self.reset_action = QAction("Reset", self)
        self.reset_action.setToolTip("Restart")
        self.reset_action.triggered.connect(self._reset_session)
        toolbar.addAction(self.reset_action)

    # @intent:responsibility 命令リスト・中央パネル・メモリの3ペインを配置します。
    def _create_panes(self):
        splitter = QSplitter(Qt.Horizontal)

        self.code_view = CodeView()
        splitter.addWidget(self.code_view)

        middle = QWidget()
        middle_layout = QVBoxLayout(middle)
        middle_layout.setContentsMargins(8, 0, 8, 0)
        middle_layout.addWidget(self._create_status_card())

        registers_header = QLabel("REGISTERS")
        registers_header.setStyleSheet(theme.panel_header_style(theme.IMMEDIATE_TOKEN))
        middle_layout.addWidget(registers_header)
        self.register_view = RegisterView()
        middle_layout.addWidget(self.register_view, 1)

        self.terminal_view = TerminalView()
        self.terminal_view.setFixedHeight(180)
        self.terminal_view.command_submitted.connect(self._submit_command)
        middle_layout.addWidget(self.terminal_view)
        splitter.addWidget(middle)

        self.hex_view = HexView()
        splitter.addWidget(self.hex_view)

        splitter.setSizes([380, 700, 320])
        self.setCentralWidget(splitter)

    def _create_status_card(self) -> QWidget:
        card = QFrame()
        card.setStyleSheet(f"QFrame {{ background-color: {theme.PANEL}; border: 1px solid {theme.BORDER}; border-radius: 6px; }}")
        grid = QGridLayout(card)

        step_caption = QLabel("STEP")
        pointer_caption = QLabel("INSTRUCTION POINTER")
        for caption in (step_caption, pointer_caption):
            caption.setStyleSheet(f"color: {theme.TEXT_MUTED}; font-size: 8pt; font-weight: bold; border: none;")

        self.step_label = QLabel()
        self.step_label.setStyleSheet(f"color: {theme.ACTIVE_TEXT}; font-size: 16pt; font-weight: bold; border: none;")
        self.pointer_label = QLabel()
        self.pointer_label.setStyleSheet(f"color: {theme.IMMEDIATE_TOKEN}; font-size: 16pt; border: none;")
        self.state_label = QLabel()
        self.state_label.setStyleSheet(f"color: {theme.TEXT_MUTED}; border: none;")

        grid.addWidget(step_caption, 0, 0)
        grid.addWidget(pointer_caption, 0, 1)
        grid.addWidget(self.step_label, 1, 0)
        grid.addWidget(self.pointer_label, 1, 1)
        grid.addWidget(self.state_label, 1, 2, Qt.AlignRight)
        return card

    # @intent:responsibility 画面下部のステータスバーを作成し、時刻表示を毎秒更新します。
    def _create_footer(self):
        status_bar = self.statusBar()
        status_bar.setStyleSheet(f"background-color: {theme.PANEL}; color: {theme.TEXT_MUTED};")

        left = QWidget()
        left_layout = QHBoxLayout(left)
        left_layout.setContentsMargins(4, 0, 4, 0)
        self.process_label = QLabel(f"PROCESS: ATTACHED (PID {self.display.process_id})")
        self.process_label.setStyleSheet(f"color: {theme.TEXT};")
        left_layout.addWidget(self.process_label)
        left_layout.addWidget(QLabel(f"ARCH: {self.display.architecture}"))
        left_layout.addWidget(QLabel(f"ENDIAN: {self.display.endianness}"))
        status_bar.addWidget(left)

        status_bar.addPermanentWidget(QLabel("THREADS: 1 RUNNING"))
        self.clock_label = QLabel()
        self.clock_label.setStyleSheet(f"color: {theme.TEXT};")
        status_bar.addPermanentWidget(self.clock_label)

        self._clock_timer = QTimer(self)
        self._clock_timer.timeout.connect(self._update_clock)
        self._clock_timer.start(1000)
        self._update_clock()

    @Slot()
    def _update_clock(self):
        self.clock_label.setText(datetime.now().strftime(TIMESTAMP_FORMAT).upper())

    @Slot()
    def _step_session(self):
        self.controller.step()

    @Slot()
    def _reset_session(self):
        self.controller.reset()

    @Slot(str)
    def _submit_command(self, text: str):
        self.controller.submit(text)

    # @intent:responsibility SessionViewの情報に基づいて全パネルを更新します。
    def _update_ui_from_view(self, view: SessionView):
        self.code_view.update_view(view)
        self.register_view.update_registers(view)
        self.terminal_view.update_history(view.history)
        self.step_label.setText(str(view.pc_index))
        self.pointer_label.setText(view.current_instruction.address_text)
        self.state_label.setText(view.status.value)
        self.step_action.setEnabled(not view.is_halted)

    # @intent:responsibility ウィンドウを閉じる際にセッションからの通知を解除します。
    def closeEvent(self, event: QCloseEvent):
        self._clock_timer.stop()
        self.view_sync.detach()
        self._unsubscribe()
        event.accept()
