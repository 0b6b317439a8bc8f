"""
OtoEdit GUI: PySide6 timing editor for UTAU voicebanks.

Usage:
    python otoedit-gui.py [VOICEBANK_DIR]
    uv run python otoedit-gui.py [VOICEBANK_DIR]

Requires: PySide6 (install via `uv pip install PySide6`)
"""

from otoeditgui import main

if __name__ == "__main__":
    main()
