"""Team Builder — graph model behind the drag-and-drop multi-agent team editor.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
