"""Entry point: logging, MIDI output, session and QApplication startup."""

from __future__ import annotations

import logging
import sys

from PyQt6.QtWidgets import QApplication, QMessageBox

from .core.config import get_config
from .core.note_sink import open_default_sink
from .core.session import PianoSession


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    app = QApplication(sys.argv)
    app.setApplicationName("Virtual Piano DAW")
    app.setOrganizationName("vpiano")

    from .gui.theme import apply_theme
    apply_theme(app)

    config = get_config()
    sink = open_default_sink(config.get("midi.output_port", ""))
    session = PianoSession(sink, config)
    restored = session.load_saved()
    if restored:
        logging.info("Restored %d saved recordings", len(restored))

    from .gui.main_window import MainWindow

    window = MainWindow(session, config)
    window.show()

    # Global exception handler
    def exception_hook(exctype, value, tb):
        import traceback
        traceback_str = "".join(traceback.format_exception(exctype, value, tb))
        logging.error("Unhandled exception:\n%s", traceback_str)

        msg = QMessageBox()
        msg.setIcon(QMessageBox.Icon.Critical)
        msg.setWindowTitle("Application Error")
        msg.setText("An unexpected error occurred. The application will close.")
        msg.setInformativeText(str(value))
        msg.setDetailedText(traceback_str)
        msg.exec()

        sys.__excepthook__(exctype, value, tb)
        sys.exit(1)

    sys.excepthook = exception_hook

    exit_code = app.exec()
    sink.close()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
