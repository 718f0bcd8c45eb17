"""
Development Runner
==================
Starts the editor straight from a source checkout, without installing it.

Usage:
    $ python run.py [path/to/incident.json]
    $ PERMISSIONEDITOR_DEBUG=1 PERMISSIONEDITOR_LOG_FILE=editor.log python run.py
"""
import os
import sys

SRC_DIR: str = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
APP_USER_MODEL_ID: str = "PermissionEditor.JsonEditor"


def _set_windows_app_id() -> None:
    """Own taskbar group and icon on Windows; no-op elsewhere."""
    if sys.platform != "win32":
        return
    import ctypes
    ctypes.windll.shell32.SetCurrentProcessExplicitAppUserModelID(APP_USER_MODEL_ID)


if __name__ == "__main__":
    sys.path.insert(0, SRC_DIR)
    _set_windows_app_id()

    from permissioneditor.main import main
    main(sys.argv)
