"""
Status indicator model.

Holds what a status bar would show: the text, whether it is visible and
which side it sits on. The monitor writes to it; renderers read it.
"""

POSITIONS = ("left", "right")
DEFAULT_TOOLTIP = "Token generation speed (click for details)"


class StatusIndicator:
    def __init__(self, position: str = "right", priority: int = 100, tooltip: str = DEFAULT_TOOLTIP):
        if position not in POSITIONS:
            raise ValueError(f"position must be one of {POSITIONS}, got {position!r}")
        self.position = position
        self.priority = priority
        self.tooltip = tooltip
        self.text = ""
        self.visible = False
        self.disposed = False

    def show(self):
        if not self.disposed:
            self.visible = True

    def hide(self):
        self.visible = False

    def set_text(self, text: str):
        if not self.disposed:
            self.text = text

    def render(self) -> str:
        return self.text if self.visible else ""

    def dispose(self):
        self.visible = False
        self.disposed = True
