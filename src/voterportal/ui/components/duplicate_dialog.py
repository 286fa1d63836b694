"""Dialog shown when an entered Aadhaar number already belongs to another voter."""

from nicegui import ui

from voterportal.models import DuplicateMember


def show_duplicate_dialog(aadhar: str, member: DuplicateMember) -> ui.dialog:
    """Warn that aadhar is already recorded for member.

    The entry is kept; the operator decides whether to correct it.

    Returns:
        The opened dialog
    """
    with ui.dialog() as dialog, ui.card().classes("p-6 min-w-[320px]"):
        with ui.row().classes("items-center gap-2 mb-2"):
            ui.icon("warning", color="negative").classes("text-2xl")
            ui.label("Duplicate Aadhaar").classes("text-h6 text-negative")

        ui.label(f"Aadhaar {aadhar} is already entered for:").classes("text-sm")

        with ui.grid(columns=2).classes("gap-x-4 gap-y-1 my-2 text-sm"):
            ui.label("Name").classes("text-gray-500")
            ui.label(member.name or "-").classes("font-semibold")
            ui.label("Booth").classes("text-gray-500")
            ui.label(member.booth or "-")
            ui.label("Voter No.").classes("text-gray-500")
            ui.label(member.voter_no or "-")
            ui.label("House No.").classes("text-gray-500")
            ui.label(member.house_no or "-")

        with ui.row().classes("w-full justify-end"):
            ui.button("OK", on_click=dialog.close).props("color=primary")

    dialog.open()
    return dialog
