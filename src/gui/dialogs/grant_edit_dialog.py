"""
Grant Edit Dialog Module.

Form for changing a grant's name, dates and description. The dialog only
collects and validates input; the caller writes the result to the store.
"""

from typing import Any, Dict, Optional

from PySide6.QtCore import QDate
from PySide6.QtWidgets import (
    QDateEdit,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from src.core.dates import utc_date
from src.core.grants import Grant

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"
DATE_ORDER_MESSAGE = "End date must be after start date"


def _to_qdate(value) -> QDate:
    return QDate(value.year, value.month, value.day)


def _from_qdate(value: QDate):
    return utc_date(value.year(), value.month(), value.day())


class GrantEditDialog(QDialog):
    """
    Edits an existing grant. Progress is pulled back into the new span
    when the dates move past it.
    """

    def __init__(self, grant: Grant, parent: Optional[QWidget] = None) -> None:
        """
        Initializes the dialog.

        Args:
            grant: The grant to edit.
            parent: Parent widget.
        """
        super().__init__(parent)
        self.grant = grant
        self.setWindowTitle(f"Edit Grant: {grant.name}")
        self.setMinimumWidth(400)

        main_layout = QVBoxLayout(self)
        self.form_layout = QFormLayout()

        self.name_edit = QLineEdit(grant.name)
        self.name_edit.setPlaceholderText("Grant name")
        self.form_layout.addRow("Name:", self.name_edit)

        self.start_edit = QDateEdit(_to_qdate(grant.start_date))
        self.start_edit.setCalendarPopup(True)
        self.start_edit.setDisplayFormat("MMM d, yyyy")
        self.form_layout.addRow("Start:", self.start_edit)

        self.end_edit = QDateEdit(_to_qdate(grant.end_date))
        self.end_edit.setCalendarPopup(True)
        self.end_edit.setDisplayFormat("MMM d, yyyy")
        self.form_layout.addRow("End:", self.end_edit)

        self.description_edit = QTextEdit()
        self.description_edit.setPlaceholderText("Optional description...")
        self.description_edit.setMaximumHeight(80)
        self.description_edit.setPlainText(grant.description)
        self.form_layout.addRow("Description:", self.description_edit)

        main_layout.addLayout(self.form_layout)

        self.error_label = QLabel()
        self.error_label.setStyleSheet("color: #d32f2f;")
        self.error_label.hide()
        main_layout.addWidget(self.error_label)

        self.button_box = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Save
            | QDialogButtonBox.StandardButton.Cancel
        )
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)
        main_layout.addWidget(self.button_box)

    def validation_error(self) -> Optional[str]:
        """Returns why the form cannot be saved, or None if it can."""
        if not self.name_edit.text().strip():
            return REQUIRED_FIELDS_MESSAGE
        if self.end_edit.date() <= self.start_edit.date():
            return DATE_ORDER_MESSAGE
        return None

    def accept(self) -> None:
        """Closes the dialog only when the form is valid."""
        error = self.validation_error()
        if error:
            self.error_label.setText(error)
            self.error_label.show()
            return
        super().accept()

    def get_data(self) -> Dict[str, Any]:
        """
        Returns the edited fields as a store update.

        Returns:
            Dict[str, Any]: camelCase fields with ISO-8601 dates.
        """
        start = _from_qdate(self.start_edit.date())
        end = _from_qdate(self.end_edit.date())
        progress = max(start, min(end, self.grant.progress_date))
        return {
            "name": self.name_edit.text().strip(),
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            "progressDate": progress.isoformat(),
            "description": self.description_edit.toPlainText().strip(),
        }
