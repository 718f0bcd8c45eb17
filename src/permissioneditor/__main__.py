"""
Run with: python -m permissioneditor [FILE]
"""
from permissioneditor.main import main

if __name__ == "__main__":
    main()
