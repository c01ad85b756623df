"""
Empty State Widget Module.

Provides a simple widget for displaying empty and loading state messages.
"""

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel

from src.gui.utils.style_helper import StyleHelper

NO_GRANTS_MESSAGE = 'No grants yet.\nClick "Add Grant" to create your first grant'
LOADING_MESSAGE = "Loading grants..."


class EmptyStateWidget(QLabel):
    """
    A QLabel subclass for displaying empty state messages.

    Applies consistent styling from StyleHelper and is hidden by default.
    """

    def __init__(self, message: str = NO_GRANTS_MESSAGE, parent=None) -> None:
        """
        Initializes the empty state widget.

        Args:
            message: The message to display in the empty state.
            parent: The parent widget, if any.
        """
        super().__init__(message, parent)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setStyleSheet(StyleHelper.get_empty_state_style())
        self.hide()  # Hidden by default

    def set_message(self, message: str) -> None:
        """
        Updates the empty state message.

        Args:
            message: The new message to display.
        """
        self.setText(message)

    def show_loading(self) -> None:
        """Shows the loading message."""
        self.setText(LOADING_MESSAGE)
        self.show()

    def show_empty(self) -> None:
        """Shows the no-grants message."""
        self.setText(NO_GRANTS_MESSAGE)
        self.show()
