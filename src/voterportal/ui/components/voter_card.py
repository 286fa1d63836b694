"""Voter Card Component.

One card per household member. Every input writes straight through a
FieldReconciler, so the collection always holds what the card shows and
a save picks up edits without any extra syncing.
"""

import base64
from datetime import date
from typing import Awaitable, Callable

from loguru import logger
from nicegui import events, ui

from voterportal.config.constants import DEFAULT_REFERENCE_DATE, GENDER_OPTIONS
from voterportal.llm import IdDocumentExtractor, LLMError
from voterportal.models import DuplicateMember, VoterRecord
from voterportal.services import FieldReconciler, RecordCollection, RemoteStoreClient
from voterportal.ui.components.delete_dialog import DeleteConfirmDialog
from voterportal.ui.components.duplicate_dialog import show_duplicate_dialog
from voterportal.utils.formatting import is_valid_aadhar_for_save, normalize_aadhar

DeleteHandler = Callable[[VoterRecord, str], Awaitable[None]]


class VoterCardComponent:
    """Editable card for a single voter record."""

    def __init__(
        self,
        record: VoterRecord,
        collection: RecordCollection,
        client: RemoteStoreClient,
        extractor: IdDocumentExtractor | None = None,
        on_delete: DeleteHandler | None = None,
        reference_date: date = DEFAULT_REFERENCE_DATE,
    ):
        """Initialize voter card.

        Args:
            record: Record as loaded; later state is read from the collection
            collection: Collection the record lives in
            client: Store client for duplicate checks
            extractor: Optional card-photo reader for auto-fill
            on_delete: Coroutine called with (record, reason) once confirmed
            reference_date: Date the displayed age is computed at
        """
        self.extractor = extractor
        self.on_delete = on_delete
        self.reconciler = FieldReconciler(
            record.key,
            collection,
            client,
            on_duplicate=self._show_duplicate,
            reference_date=reference_date,
        )

        # UI references
        self.card: ui.card | None = None
        self.aadhar_input: ui.input | None = None
        self.dob_input: ui.input | None = None
        self.age_label: ui.label | None = None
        self.photo: ui.image | None = None

    @property
    def record(self) -> VoterRecord | None:
        return self.reconciler.record

    def render(self) -> ui.card:
        """Render the card.

        Returns:
            Card element
        """
        record = self.record
        with ui.card().classes("w-full md:w-[420px] p-3 gap-2") as self.card:
            if record is None:
                ui.label("Record no longer loaded").classes("text-gray-500 italic")
                return self.card

            self._render_header(record)
            self._render_demographics(record)
            self._render_identity(record)
        return self.card

    def _render_header(self, record: VoterRecord) -> None:
        with ui.row().classes("w-full items-center justify-between"):
            with ui.row().classes("items-center gap-2"):
                ui.label(f"#{record.voter_no}").classes("text-lg font-bold text-primary")
                if record.is_new:
                    ui.badge("New", color="orange")
                ui.label(f"Booth {record.booth} / House {record.house_no}").classes("text-xs text-gray-500")
            ui.button(icon="delete", on_click=self._on_delete_click).props(
                "flat round dense color=negative"
            ).tooltip("Delete member")

    def _render_demographics(self, record: VoterRecord) -> None:
        with ui.row().classes("w-full gap-2"):
            ui.input(
                "Name",
                value=record.name,
                on_change=lambda e: self.reconciler.edit_field("name", e.value),
            ).classes("flex-grow")
            ui.input(
                "Father/Husband",
                value=record.relation_name,
                on_change=lambda e: self.reconciler.edit_field("relation_name", e.value),
            ).classes("flex-grow")

        with ui.row().classes("w-full gap-2 items-end"):
            ui.select(
                options=GENDER_OPTIONS,
                value=record.gender if record.gender in GENDER_OPTIONS else None,
                label="Gender",
                on_change=lambda e: self.reconciler.edit_field("gender", e.value),
            ).classes("w-24")
            ui.input(
                "Age (roll)",
                value=record.original_age,
                on_change=lambda e: self.reconciler.edit_field("original_age", e.value),
            ).classes("w-24")

    def _render_identity(self, record: VoterRecord) -> None:
        with ui.row().classes("w-full gap-2 items-end"):
            self.aadhar_input = ui.input(
                "Aadhaar",
                value=record.aadhar,
                placeholder="12 digits",
                validation={"Enter all 12 digits": is_valid_aadhar_for_save},
                on_change=self._on_aadhar_change,
            ).props("inputmode=numeric maxlength=14").classes("flex-grow")

            self.dob_input = ui.input(
                "Date of birth",
                value=record.dob,
                on_change=self._on_dob_change,
            ).props("type=date stack-label").classes("w-40")

            self.age_label = ui.label(self._age_text(record)).classes("text-sm text-gray-700 pb-2")

        with ui.row().classes("w-full items-center gap-2"):
            ui.upload(
                label="Aadhaar photo",
                auto_upload=True,
                max_files=1,
                on_upload=self._on_photo_upload,
            ).props("accept=image/* capture=environment flat bordered").classes("w-48")
            self.photo = ui.image(record.aadhar_photo or "").classes("w-24 h-16 rounded")
            self.photo.set_visibility(bool(record.aadhar_photo))

    @staticmethod
    def _age_text(record: VoterRecord) -> str:
        return f"Age: {record.calculated_age}" if record.calculated_age else "Age: -"

    # -------------------------------------------------------------------------
    # Event handlers
    # -------------------------------------------------------------------------

    async def _on_aadhar_change(self, e: events.ValueChangeEventArguments) -> None:
        normalized = normalize_aadhar(e.value)
        # Show the cleaned value before the lookup goes out
        if self.aadhar_input and self.aadhar_input.value != normalized:
            self.aadhar_input.value = normalized
        await self.reconciler.edit_aadhar(normalized)

    def _on_dob_change(self, e: events.ValueChangeEventArguments) -> None:
        updated = self.reconciler.edit_dob(e.value)
        if updated and self.age_label:
            self.age_label.set_text(self._age_text(updated))

    async def _on_photo_upload(self, e: events.UploadEventArguments) -> None:
        content = await e.file.read()
        mime = e.file.content_type or "image/jpeg"
        data_url = f"data:{mime};base64,{base64.b64encode(content).decode('ascii')}"

        self.reconciler.attach_photo(data_url)
        if self.photo:
            self.photo.set_source(data_url)
            self.photo.set_visibility(True)
        logger.debug(f"Attached Aadhaar photo to {self.reconciler.key} ({len(content)} bytes)")

        if self.extractor is None:
            return

        ui.notify("Reading Aadhaar card...", type="info")
        try:
            extracted = await self.extractor.extract(data_url)
        except LLMError as error:
            logger.warning(f"Aadhaar extraction failed for {self.reconciler.key}: {error}")
            ui.notify(f"Could not read the card: {error}", type="warning")
            return

        if extracted.is_empty:
            ui.notify("No Aadhaar number or birth date found on the card", type="warning")
            return

        updated = await self.reconciler.apply_extraction(extracted)
        if updated:
            self._sync_identity_inputs(updated)
            ui.notify("Filled from card photo", type="positive")

    def _sync_identity_inputs(self, record: VoterRecord) -> None:
        """Show values that were set without typing."""
        if self.aadhar_input and self.aadhar_input.value != record.aadhar:
            self.aadhar_input.value = record.aadhar
        if self.dob_input and self.dob_input.value != record.dob:
            self.dob_input.value = record.dob
        if self.age_label:
            self.age_label.set_text(self._age_text(record))

    def _show_duplicate(self, member: DuplicateMember) -> None:
        record = self.record
        show_duplicate_dialog(record.aadhar if record else "", member)

    def _on_delete_click(self) -> None:
        record = self.record
        if record is None or self.on_delete is None:
            return

        async def confirm(reason: str) -> None:
            await self.on_delete(record, reason)

        DeleteConfirmDialog(record, on_confirm=confirm).open()
