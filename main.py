# main.py
from __future__ import annotations
import sys
import logging
from tweenr.qt import QtWidgets
from app_config import ensure_app_dirs, apply_qsettings_org, banner
from tweenr.core.logging import setup_logging
from tweenr.ui.main_window import MainWindow
from tweenr.ui.theme import apply_fusion_theme


def main() -> int:
    ensure_app_dirs()
    apply_qsettings_org()
    logger = setup_logging(level=logging.DEBUG)

    app = QtWidgets.QApplication(sys.argv)
    logger.info(banner())

    apply_fusion_theme(app)
    mw = MainWindow()
    mw.show()

    return app.exec()

if __name__ == "__main__":
    raise SystemExit(main())
