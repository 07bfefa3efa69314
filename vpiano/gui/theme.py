"""Purple studio theme — palette and application stylesheet."""

from __future__ import annotations

from PyQt6.QtWidgets import QApplication

BG_MAIN = "#3F1370"
BG_LIST = "#553377"
BUTTON = "#9B59B6"
BUTTON_HOVER = "#AF7AC5"
RECORDING = "#C0392B"
TEXT_PRIMARY = "#FFFFFF"

KEY_WHITE_TOP = "#FFFFFF"
KEY_WHITE_BOTTOM = "#C8C8C8"
KEY_BLACK = "#000000"
KEY_PRESSED = "#D7BDE2"
KEY_BORDER = "#000000"

_STYLESHEET = f"""
QWidget {{
    background-color: {BG_MAIN};
    color: {TEXT_PRIMARY};
    font-family: Arial;
}}
QLabel#statusLabel {{
    font-size: 18px;
    font-weight: bold;
}}
QLabel#sectionLabel {{
    font-size: 14px;
    font-weight: bold;
}}
QPushButton {{
    background-color: {BUTTON};
    color: {TEXT_PRIMARY};
    font-weight: bold;
    border: none;
    border-radius: 4px;
    padding: 6px 12px;
}}
QPushButton:hover {{
    background-color: {BUTTON_HOVER};
}}
QPushButton[recording="true"] {{
    background-color: {RECORDING};
}}
QListWidget {{
    background-color: {BG_LIST};
    border: none;
}}
"""


def apply_theme(app: QApplication) -> None:
    app.setStyle("Fusion")
    app.setStyleSheet(_STYLESHEET)
