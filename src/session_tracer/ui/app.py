# src/session_tracer/ui/app.py
"""
PySide6アプリケーションのエントリポイント。
セッション構成を読み込み、コントローラを組み立ててメインウィンドウを起動します。
"""
import argparse
import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication, QMessageBox

from session_tracer.config.builder import SessionBuilder
from session_tracer.config.loader import ConfigLoader
from session_tracer.config.models import SessionConfig
from .main_window import MainWindow
from .qt_scheduler import QtHighlightScheduler


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulated low-level debugger session.")
    parser.add_argument("--config", help="Path to a session config YAML file")
    parser.add_argument("--seed", type=int, help="Seed for reproducible instruction/register generation")
    return parser.parse_args(argv)


# @intent:responsibility コマンドライン引数からセッション構成を生成します。--seedは構成ファイルの値より優先されます。
def load_config(args: argparse.Namespace) -> SessionConfig:
    config = ConfigLoader().load_from_file(args.config) if args.config else SessionConfig()
    if args.seed is not None:
        config.session.seed = args.seed
    return config


# @intent:responsibility アプリケーションを起動し、メインウィンドウを表示します。
def main(argv: Optional[List[str]] = None):
    """
    アプリケーションのメイン関数。
    """
    args = parse_args(argv)
    app = QApplication(sys.argv[:1])

    try:
        config = load_config(args)
        controller = SessionBuilder().build(config, scheduler=QtHighlightScheduler(app))
    except (OSError, ValueError) as e:
        QMessageBox.critical(None, "Error", f"Failed to load session config: {e}")
        sys.exit(1)

    main_win = MainWindow(controller, config.display)
    main_win.show()
    sys.exit(app.exec())


if __name__ == '__main__':
    main()
