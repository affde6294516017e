#!/usr/bin/env python3
"""
Automation Canvas - Main Entry Point

A visual editor for automation graphs: triggers, actions and conditions
connected on a pannable, zoomable canvas.

Usage:
    python main.py
    python main.py --debug              # Enable debug logging
    python main.py --workspace ~/autos  # Use a different workspace
    python main.py --open <id>          # Open a stored automation
"""

import sys
import logging
import argparse
from PyQt6.QtWidgets import QApplication
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont, QPalette, QColor

from services import get_settings
from views import MainWindow


def setup_logging(debug: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if debug else logging.INFO

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized at {'DEBUG' if debug else 'INFO'} level")


def setup_application() -> QApplication:
    """Configure the Qt application."""
    # High DPI support
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName("Automation Canvas")
    app.setApplicationVersion("0.1.0")
    app.setOrganizationName("automation-canvas")

    # Set default font
    font = QFont("SF Pro Display", 10)
    if not font.exactMatch():
        font = QFont("Segoe UI", 10)
    app.setFont(font)

    palette = QPalette()
    palette.setColor(QPalette.ColorRole.Window, QColor("#F3F4F6"))
    palette.setColor(QPalette.ColorRole.WindowText, QColor("#111827"))
    palette.setColor(QPalette.ColorRole.Base, QColor("#FFFFFF"))
    palette.setColor(QPalette.ColorRole.Text, QColor("#374151"))
    palette.setColor(QPalette.ColorRole.Button, QColor("#FFFFFF"))
    palette.setColor(QPalette.ColorRole.ButtonText, QColor("#374151"))
    palette.setColor(QPalette.ColorRole.Highlight, QColor("#3B82F6"))
    palette.setColor(QPalette.ColorRole.HighlightedText, QColor("#FFFFFF"))
    app.setPalette(palette)

    return app


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Automation Canvas editor')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--workspace', metavar='DIR', help='Workspace directory for this session')
    parser.add_argument('--open', metavar='ID', dest='open_id', help='Automation id to open')
    args = parser.parse_args()

    setup_logging(debug=args.debug)

    if args.workspace:
        settings = get_settings()
        settings.set_workspace_path("custom", args.workspace)
        settings.set_workspace_profile("custom")

    app = setup_application()

    window = MainWindow(open_id=args.open_id)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
