"""
Grant Details Dialog Module.

Read-only summary of a grant, opened by clicking its name on the timeline.
"""

from typing import Optional

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QVBoxLayout,
    QWidget,
)

from src.core.dates import format_date
from src.core.grants import Grant


class GrantDetailsDialog(QDialog):
    """
    Shows name, dates, progress and description of a grant.
    """

    def __init__(self, grant: Grant, parent: Optional[QWidget] = None) -> None:
        """
        Initializes the dialog.

        Args:
            grant: The grant to show.
            parent: Parent widget.
        """
        super().__init__(parent)
        self.grant = grant
        self.setWindowTitle(f"Grant: {grant.name}")
        self.setMinimumWidth(360)

        main_layout = QVBoxLayout(self)
        self.form_layout = QFormLayout()

        self.fields = {
            "Name": grant.name,
            "Start": format_date(grant.start_date),
            "End": format_date(grant.end_date),
            "Progress": format_date(grant.clamp_to_span(grant.progress_date)),
            "Assigned": ", ".join(sorted(grant.assigned_users)) or "-",
        }
        for label, value in self.fields.items():
            self.form_layout.addRow(f"{label}:", QLabel(value))

        self.description_label = QLabel(grant.description or "No description.")
        self.description_label.setWordWrap(True)
        self.form_layout.addRow("Description:", self.description_label)

        main_layout.addLayout(self.form_layout)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        buttons.rejected.connect(self.reject)
        main_layout.addWidget(buttons)
