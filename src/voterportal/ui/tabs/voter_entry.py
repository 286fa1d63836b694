"""Voter Entry Tab for VoterPortal.

The data-entry page:
- Top: name search across all booths
- Selectors: booth, ward (when the booth tracks wards) and house number
- Results: one editable card per member, with add and save actions
"""

from datetime import date

from loguru import logger
from nicegui import events, ui

from voterportal.config.constants import DEFAULT_REFERENCE_DATE
from voterportal.llm import IdDocumentExtractor
from voterportal.models import ErrorKind, StoreMetadata, StoreResult, VoterRecord
from voterportal.services import EntryOrchestrator, RemoteStoreClient
from voterportal.ui.components.voter_card import VoterCardComponent


class VoterEntryTab:
    """Voter entry tab component."""

    def __init__(
        self,
        client: RemoteStoreClient,
        extractor: IdDocumentExtractor | None = None,
        reference_date: date = DEFAULT_REFERENCE_DATE,
    ) -> None:
        """Initialize voter entry tab.

        Args:
            client: Store client shared by the orchestrator and cards
            extractor: Optional card-photo reader
            reference_date: Date ages are computed at
        """
        self.client = client
        self.extractor = extractor
        self.reference_date = reference_date
        self.orchestrator = EntryOrchestrator(client)

        # State
        self.metadata = StoreMetadata()
        self.cards: list[VoterCardComponent] = []

        # UI references (will be set when rendering)
        self.name_input: ui.input | None = None
        self.booth_select: ui.select | None = None
        self.ward_select: ui.select | None = None
        self.house_select: ui.select | None = None
        self.status_label: ui.label | None = None
        self.save_button: ui.button | None = None
        self.cards_container: ui.row | None = None

    def render(self) -> None:
        """Render the voter entry tab."""
        with ui.column().classes("w-full gap-4 p-4"):
            self._render_name_search()
            self._render_selectors()
            self._render_toolbar()
            self.cards_container = ui.row().classes("w-full gap-4 items-start")
            self._render_cards()

        ui.timer(0.1, self._load_metadata, once=True)

    def _render_name_search(self) -> None:
        with ui.row().classes("w-full items-end gap-2"):
            self.name_input = ui.input("Search by name", placeholder="Voter or relative name").classes(
                "flex-grow"
            )
            self.name_input.on("keydown.enter", self._on_name_search)
            ui.button("Find", icon="person_search", on_click=self._on_name_search).props("outline")

    def _render_selectors(self) -> None:
        with ui.row().classes("w-full items-end gap-2"):
            self.booth_select = ui.select(
                options=[], label="Booth", with_input=True, on_change=self._on_booth_change
            ).classes("w-32")
            self.ward_select = ui.select(
                options=[], label="Ward", on_change=self._on_ward_change
            ).classes("w-32")
            self.ward_select.set_visibility(False)
            self.house_select = ui.select(options=[], label="House No.", with_input=True).classes("w-40")

            ui.button("Search", icon="search", on_click=self._on_search)
            ui.button("Clear", icon="clear", on_click=self._on_clear).props("flat")

    def _render_toolbar(self) -> None:
        with ui.row().classes("w-full items-center justify-between"):
            self.status_label = ui.label("Select a booth and house number").classes("text-sm text-gray-600")
            with ui.row().classes("gap-2"):
                ui.button("Add member", icon="person_add", on_click=self._on_add_member).props("outline")
                self.save_button = ui.button("Save all", icon="save", on_click=self._on_save).props(
                    "color=positive"
                )

    def _render_cards(self) -> None:
        """Rebuild the cards from the collection."""
        if not self.cards_container:
            return

        self.cards_container.clear()
        self.cards = []
        records = self.orchestrator.collection.records

        with self.cards_container:
            if not records:
                ui.label("No members to show").classes("text-gray-500 italic")
            for record in records:
                card = VoterCardComponent(
                    record,
                    self.orchestrator.collection,
                    self.client,
                    extractor=self.extractor,
                    on_delete=self._on_delete,
                    reference_date=self.reference_date,
                )
                card.render()
                self.cards.append(card)

        self._update_status()

    def _update_status(self) -> None:
        if not self.status_label:
            return
        ctx = self.orchestrator.context
        count = len(self.orchestrator.collection)
        if ctx.is_house_search:
            where = f"Booth {ctx.booth}" + (f", ward {ctx.ward}" if ctx.ward else "") + f", house {ctx.house}"
        elif ctx.is_name_search:
            where = f"Name matching '{ctx.name_query}'"
        else:
            self.status_label.set_text("Select a booth and house number")
            return
        self.status_label.set_text(f"{where}: {count} member(s)")

    @staticmethod
    def _notify(result: StoreResult, success_message: str | None = None) -> None:
        if result.success:
            ui.notify(success_message or result.message or "Done", type="positive")
        elif result.error_kind == ErrorKind.VALIDATION:
            ui.notify(result.message, type="warning")
        else:
            ui.notify(result.message, type="negative")

    # -------------------------------------------------------------------------
    # Selectors
    # -------------------------------------------------------------------------

    async def _load_metadata(self) -> None:
        result = await self.client.fetch_metadata()
        if not result.success:
            self._notify(result)
            return

        self.metadata = result.data
        if self.booth_select:
            self.booth_select.set_options(self.metadata.booths, value=None)
        logger.debug(f"Booth selector loaded with {len(self.metadata.booths)} booth(s)")

    def _on_booth_change(self, e: events.ValueChangeEventArguments) -> None:
        booth = e.value or ""
        wards = self.metadata.wards_for(booth) if booth else []
        if self.ward_select:
            self.ward_select.set_options(wards, value=None)
            self.ward_select.set_visibility(bool(wards))
        if self.house_select:
            self.house_select.set_options(self.metadata.houses_for(booth) if booth else [], value=None)

    def _on_ward_change(self, e: events.ValueChangeEventArguments) -> None:
        booth = self.booth_select.value if self.booth_select else None
        if not booth or not self.house_select:
            return
        self.house_select.set_options(self.metadata.houses_for(booth, ward=e.value), value=None)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def _on_search(self) -> None:
        booth = self.booth_select.value if self.booth_select else None
        house = self.house_select.value if self.house_select else None
        ward = self.ward_select.value if self.ward_select else None

        result = await self.orchestrator.search(booth or "", house or "", ward=ward or None)
        if not result.success:
            self._notify(result)
        self._render_cards()

    async def _on_name_search(self) -> None:
        query = self.name_input.value if self.name_input else ""
        if not (query or "").strip():
            ui.notify("Type a name to search", type="warning")
            return

        result = await self.orchestrator.search_by_name(query)
        if not result.success:
            self._notify(result)
        self._render_cards()

    def _on_clear(self) -> None:
        self.orchestrator.clear()
        if self.name_input:
            self.name_input.value = ""
        if self.booth_select:
            self.booth_select.value = None
        self._render_cards()

    def _on_add_member(self) -> None:
        result = self.orchestrator.add_member()
        if not result.success:
            self._notify(result)
            return
        self._render_cards()

    async def _on_save(self) -> None:
        if self.save_button:
            self.save_button.disable()
        try:
            result = await self.orchestrator.save_all()
        finally:
            if self.save_button:
                self.save_button.enable()

        self._notify(result)
        if result.success:
            self._render_cards()

    async def _on_delete(self, record: VoterRecord, reason: str) -> None:
        result = await self.orchestrator.delete_one(record, reason)
        self._notify(result)
        if result.success:
            self._render_cards()
