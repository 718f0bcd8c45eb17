"""
The VIEW layer: PySide6 widgets that display and edit the DocumentState.
"""
