"""Confirmation dialog for removing a member from the roll."""

from typing import Awaitable, Callable

from nicegui import ui

from voterportal.config.constants import DELETE_REASONS
from voterportal.models import VoterRecord


class DeleteConfirmDialog:
    """Asks for a deletion reason before archiving a saved member.

    Unsaved members need no reason and are confirmed with a plain prompt.
    """

    def __init__(self, record: VoterRecord, on_confirm: Callable[[str], Awaitable[None]]):
        """Initialize dialog.

        Args:
            record: Member to delete
            on_confirm: Coroutine called with the chosen reason ("" for
                unsaved members)
        """
        self.record = record
        self.on_confirm = on_confirm
        self.reason: str | None = None

        self.dialog: ui.dialog | None = None
        self.confirm_button: ui.button | None = None

    def open(self) -> None:
        """Build and show the dialog."""
        with ui.dialog() as self.dialog, ui.card().classes("p-6 min-w-[320px]"):
            ui.label("Delete member").classes("text-h6 mb-2")
            ui.label(f"{self.record.name or '(no name)'} - voter no. {self.record.voter_no}").classes(
                "text-sm font-semibold"
            )

            if self.record.is_new:
                ui.label("This member has not been saved yet.").classes("text-xs text-gray-600")
            else:
                ui.label("The record is moved to the Deleted sheet.").classes("text-xs text-gray-600")
                ui.select(
                    options=list(DELETE_REASONS),
                    label="Reason",
                    on_change=lambda e: self._set_reason(e.value),
                ).classes("w-full")

            with ui.row().classes("w-full justify-end gap-2 mt-4"):
                ui.button("Cancel", on_click=self.dialog.close).props("flat")
                self.confirm_button = ui.button("Delete", on_click=self._confirm).props("color=negative")
                if not self.record.is_new:
                    self.confirm_button.disable()

        self.dialog.open()

    def _set_reason(self, value: str | None) -> None:
        self.reason = value
        if self.confirm_button:
            if value:
                self.confirm_button.enable()
            else:
                self.confirm_button.disable()

    async def _confirm(self) -> None:
        if self.dialog:
            self.dialog.close()
        await self.on_confirm(self.reason or "")
