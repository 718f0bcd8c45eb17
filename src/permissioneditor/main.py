"""
Application Initialization
==========================
This module constructs the Model-View architecture and starts the Qt Event
Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Sets up logging (level and log file from the environment).
2. Instantiates the Document State (model).
3. Instantiates the Main Window (view) and passes the model into it.
4. Optionally opens the file given on the command line.
"""
import logging
import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication

from permissioneditor.config import APP_NAME
from permissioneditor.logging_config import setup_logging
from permissioneditor.model.state import DocumentState
from permissioneditor.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> None:
    argv = sys.argv if argv is None else argv

    # 1. Setup Logging
    setup_logging()

    # 2. Create the Qt Application
    app = QApplication(argv)
    app.setApplicationName(APP_NAME)

    # 3. Initialize the Data Model
    state = DocumentState()

    # 4. Initialize the Main Window, passing the model
    window = MainWindow(state)
    window.show()

    # 5. Open the file passed as first argument, if any
    if len(argv) > 1:
        logger.info(f"Opening file from command line: {argv[1]}")
        window.on_file_open(argv[1])

    # 6. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
