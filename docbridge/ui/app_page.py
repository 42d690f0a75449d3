"""NiceGUI page over the orchestration controller."""

from nicegui import events, ui

from docbridge.config import get_client_config
from docbridge.models.schemas import Endpoint, Provider, RawFile
from docbridge.orchestration.controller import AppController
from docbridge.orchestration.state import AppState, Phase
from docbridge.session.local_provider import LocalAuthProvider

PROVIDER_LABELS = {
    Provider.OPENAI.value: "OpenAI",
    Provider.CLAUDE.value: "Claude AI",
    Provider.CUSTOM.value: "Custom Model",
}


class PendingBatch:
    """Files picked in the upload widget but not yet sent."""

    def __init__(self) -> None:
        self.files: list[RawFile] = []

    def clear(self) -> None:
        self.files = []


@ui.page("/")
def app_page() -> None:
    """Main document/AI page."""
    config = get_client_config()
    auth = LocalAuthProvider()
    controller = AppController(auth, config=config)
    batch = PendingBatch()

    @ui.refreshable
    def status_area(state: AppState) -> None:
        if state.message:
            with ui.element("div").classes("w-full bg-red-50 text-red-700 rounded p-3"):
                ui.label(state.message)
        if state.response:
            ui.label("AI Response:").classes("text-lg font-semibold")
            ui.markdown(state.response).classes("w-full")

    @ui.refreshable
    def documents_area(state: AppState) -> None:
        if state.extracted:
            with ui.expansion("Extracted Document Content").classes("w-full"):
                for index, text in enumerate(state.extracted, start=1):
                    ui.label(f"Document {index}").classes("font-semibold")
                    ui.label(text).classes("whitespace-pre-wrap text-sm")

        options = {doc.id: doc.name for doc in state.documents}
        ui.select(
            options,
            multiple=True,
            value=sorted(state.selection & options.keys()),
            label="Select documents",
            on_change=lambda e: controller.set_selection(e.value or []),
        ).classes("w-full").props("use-chips")
        delete_btn = ui.button("Delete selected", icon="delete", on_click=delete_selected)
        delete_btn.props("flat color=negative").set_enabled(bool(state.selection))

    def render(state: AppState) -> None:
        signed_in = state.phase is not Phase.SIGNED_OUT
        sign_in_card.set_visibility(not signed_in)
        workspace.set_visibility(signed_in)
        endpoint_switch.value = state.endpoint is Endpoint.HOSTED
        upload_btn.set_enabled(not state.uploading)
        submit_btn.set_enabled(not state.submitting)
        status_area.refresh(state)
        documents_area.refresh(state)

    async def handle_pick(e: events.UploadEventArguments) -> None:
        content = await e.file.read()
        batch.files.append(
            RawFile(name=e.file.name, content=content, content_type=e.file.content_type)
        )

    async def upload_batch() -> None:
        outcome = await controller.upload(batch.files)
        if outcome.ok:
            batch.clear()
            picker.reset()

    async def delete_selected() -> None:
        await controller.delete_selected()

    async def submit() -> None:
        await controller.submit(
            prompt=prompt_input.value or "",
            provider=provider_select.value,
            use_caller_credential=key_switch.value,
            caller_credential=key_input.value or None,
            max_tokens=int(max_tokens_input.value) if max_tokens_input.value else None,
        )

    def sign_in() -> None:
        uid = (uid_input.value or "").strip()
        if not uid or "." in uid:
            ui.notify("Enter a user id without dots", type="warning")
            return
        auth.sign_in(uid, email_input.value or None)

    def on_endpoint_switch(e: events.ValueChangeEventArguments) -> None:
        wanted = Endpoint.HOSTED if e.value else Endpoint.LOCAL
        if wanted is not controller.selector.current():
            controller.toggle_endpoint()

    # === UI Layout ===
    with ui.column().classes("w-full max-w-3xl mx-auto p-6 gap-4"):
        with ui.row().classes("w-full items-center justify-between"):
            ui.label("AI Document Processor").classes("text-2xl font-semibold")
            endpoint_switch = ui.switch("Hosted backend", on_change=on_endpoint_switch)

        with ui.card().classes("w-full") as sign_in_card:
            ui.label("Sign in").classes("text-lg font-semibold")
            uid_input = ui.input("User id").classes("w-full")
            email_input = ui.input("Email (optional)").classes("w-full")
            ui.button("Sign in", on_click=sign_in)

        with ui.column().classes("w-full gap-4") as workspace:
            with ui.row().classes("w-full items-center justify-end"):
                ui.button("Sign out", on_click=auth.sign_out).props("flat")

            picker = ui.upload(
                label="Choose files",
                multiple=True,
                auto_upload=True,
                on_upload=handle_pick,
            ).props(f'accept="{",".join(config.accepted_extensions)}"').classes("w-full")
            upload_btn = ui.button("Upload", icon="upload", on_click=upload_batch)

            documents_area(controller.state)

            provider_select = ui.select(
                PROVIDER_LABELS, value=Provider.OPENAI.value, label="Select AI API"
            ).classes("w-full")
            key_switch = ui.switch("Use my own API key")
            key_input = (
                ui.input("API key for the selected provider", password=True)
                .classes("w-full")
                .bind_visibility_from(key_switch, "value")
            )
            max_tokens_input = ui.number("Max tokens", min=1, step=1, format="%d").classes("w-48")
            prompt_input = ui.textarea("Prompt").props("autogrow").classes("w-full")
            submit_btn = ui.button("Send to AI", icon="send", on_click=submit)

            status_area(controller.state)

    controller.subscribe(render)
    render(controller.state)
    ui.context.client.on_disconnect(controller.aclose)
