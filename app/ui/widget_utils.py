from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QLabel, QPushButton, QWidget


def disable_widget_interaction(widget: QWidget):
    """Disable interactive/focus states for display-only widgets."""
    widget.setFocusPolicy(Qt.FocusPolicy.NoFocus)
    if isinstance(widget, QLabel):
        widget.setTextInteractionFlags(Qt.TextInteractionFlag.NoTextInteraction)


def disable_button_focus_rect(button: QPushButton):
    """Disable focus rectangle on button while keeping it clickable."""
    button.setFocusPolicy(Qt.FocusPolicy.NoFocus)


def set_silently(widget: QWidget, setter, value):
    """Call setter(value) without emitting the widget's change signals."""
    blocked = widget.blockSignals(True)
    try:
        setter(value)
    finally:
        widget.blockSignals(blocked)
