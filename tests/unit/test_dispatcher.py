"""Unit tests for request composition and AiDispatcher."""

import asyncio
from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_check as check

from docbridge.api.client import BackendClient
from docbridge.config import ClientConfig
from docbridge.endpoints import EndpointSelector
from docbridge.errors import (
    AiFailureKind,
    AiRequestFailed,
    NoContentSource,
    OperationInProgress,
    Unauthenticated,
)
from docbridge.models.schemas import AiRequestDraft, Provider
from docbridge.orchestration.dispatcher import AiDispatcher, compose_request
from docbridge.session.manager import SessionManager
from tests.conftest import FakeAuthProvider, RecordingBackend

AI_PATH = "/api/send-to-ai"


def draft(**overrides) -> AiRequestDraft:
    fields = {"prompt": "Summarize", "selected_ids": frozenset({"id1"})}
    fields.update(overrides)
    return AiRequestDraft(**fields)


def wire(request) -> dict:
    return request.model_dump(mode="json", by_alias=True, exclude_none=True)


class TestComposeRequest:
    """Tests for shaping the send-to-ai body."""

    def test_minimal_body(self) -> None:
        body = wire(compose_request(draft(selected_ids=frozenset({"id2", "id1"}))))

        assert body == {
            "api": "openai",
            "prompt": "Summarize",
            "selectedDocumentIds": ["id1", "id2"],
            "useFrontendApiKey": False,
        }

    def test_caller_key_omitted_unless_opted_in(self) -> None:
        body = wire(compose_request(draft(caller_credential="sk-user")))

        check.is_not_in("openAiApiKey", body)
        check.is_not_in("claudeApiKey", body)

    def test_only_active_provider_key_is_sent(self) -> None:
        body = wire(
            compose_request(
                draft(
                    provider=Provider.CLAUDE,
                    use_caller_credential=True,
                    caller_credential="  claude-key  ",
                )
            )
        )

        check.equal(body["claudeApiKey"], "claude-key")
        check.is_not_in("openAiApiKey", body)
        check.is_true(body["useFrontendApiKey"])

    def test_custom_provider_sends_no_key(self) -> None:
        body = wire(
            compose_request(
                draft(provider=Provider.CUSTOM, use_caller_credential=True, caller_credential="k")
            )
        )

        check.equal(body["api"], "custom")
        check.is_not_in("openAiApiKey", body)
        check.is_not_in("claudeApiKey", body)

    def test_max_tokens_forwarded_as_int(self) -> None:
        body = wire(compose_request(draft(max_tokens=256)))

        assert body["maxTokens"] == 256

    def test_missing_caller_key_cannot_be_sent(self) -> None:
        with pytest.raises(AiRequestFailed) as exc_info:
            compose_request(draft(use_caller_credential=True, caller_credential=" "))

        check.equal(exc_info.value.failure, AiFailureKind.NOT_SENT)
        check.is_in("openai", exc_info.value.user_message)

    def test_non_positive_max_tokens_cannot_be_sent(self) -> None:
        with pytest.raises(AiRequestFailed) as exc_info:
            compose_request(draft(max_tokens=0))

        check.equal(exc_info.value.failure, AiFailureKind.NOT_SENT)
        check.is_in("invalid max", exc_info.value.user_message)


async def build(
    auth: FakeAuthProvider, config: ClientConfig, backend: RecordingBackend
) -> tuple[AiDispatcher, BackendClient]:
    selector = EndpointSelector(config.base_urls(), config.default_endpoint)
    client = BackendClient(selector, transport=backend.transport)
    return AiDispatcher(client, SessionManager(auth)), client


@pytest.fixture
async def dispatcher(
    auth: FakeAuthProvider, config: ClientConfig, backend: RecordingBackend
) -> AsyncGenerator[AiDispatcher]:
    built, client = await build(auth, config, backend)
    yield built
    await client.aclose()


class TestSubmitPreconditions:
    """Tests for checks that stop a submit before any network call."""

    async def test_signed_out_is_unauthenticated(
        self, signed_out_auth: FakeAuthProvider, config: ClientConfig, backend: RecordingBackend
    ) -> None:
        built, client = await build(signed_out_auth, config, backend)

        with pytest.raises(Unauthenticated):
            await built.submit(draft())

        assert backend.requests == []
        await client.aclose()

    async def test_identity_checked_before_selection(
        self, signed_out_auth: FakeAuthProvider, config: ClientConfig, backend: RecordingBackend
    ) -> None:
        built, client = await build(signed_out_auth, config, backend)

        with pytest.raises(Unauthenticated):
            await built.submit(draft(selected_ids=frozenset()))

        await client.aclose()

    @pytest.mark.parametrize("prompt", ["", "Summarize"])
    async def test_empty_selection_is_no_content_source(
        self,
        dispatcher: AiDispatcher,
        backend: RecordingBackend,
        auth: FakeAuthProvider,
        prompt: str,
    ) -> None:
        with pytest.raises(NoContentSource):
            await dispatcher.submit(draft(prompt=prompt, selected_ids=frozenset()))

        check.equal(backend.requests, [])
        check.equal(auth.issued, [])


class TestSubmitSuccess:
    async def test_returns_flat_message(
        self, dispatcher: AiDispatcher, backend: RecordingBackend, auth: FakeAuthProvider
    ) -> None:
        backend.json("POST", AI_PATH, {"message": "Summary text"})

        answer = await dispatcher.submit(draft(provider=Provider.OPENAI))

        check.equal(answer, "Summary text")
        check.equal(
            backend.body(),
            {
                "api": "openai",
                "prompt": "Summarize",
                "selectedDocumentIds": ["id1"],
                "useFrontendApiKey": False,
            },
        )
        check.equal(backend.requests[0].headers["Authorization"], f"Bearer {auth.issued[0]}")
        check.is_false(dispatcher.busy)

    async def test_each_submit_uses_new_credential(
        self, dispatcher: AiDispatcher, backend: RecordingBackend
    ) -> None:
        backend.json("POST", AI_PATH, {"message": "ok"})

        await dispatcher.submit(draft())
        await dispatcher.submit(draft())

        tokens = [r.headers["Authorization"] for r in backend.requests]
        assert len(set(tokens)) == 2


class TestSubmitFailures:
    """Tests for failure classification."""

    async def test_error_status_with_server_message(
        self, dispatcher: AiDispatcher, backend: RecordingBackend
    ) -> None:
        backend.json("POST", AI_PATH, {"message": "upstream provider down"}, status=502)

        with pytest.raises(AiRequestFailed) as exc_info:
            await dispatcher.submit(draft())

        error = exc_info.value
        check.equal(error.failure, AiFailureKind.RESPONDED)
        check.equal(error.status_code, 502)
        check.equal(
            error.user_message, "AI request failed with status 502: upstream provider down"
        )

    async def test_error_status_with_nested_provider_error(
        self, dispatcher: AiDispatcher, backend: RecordingBackend
    ) -> None:
        backend.json(
            "POST", AI_PATH, {"error": {"message": "Incorrect API key provided"}}, status=401
        )

        with pytest.raises(AiRequestFailed) as exc_info:
            await dispatcher.submit(draft())

        check.equal(exc_info.value.status_code, 401)
        check.equal(exc_info.value.detail, "Incorrect API key provided")

    async def test_error_status_without_payload(
        self, dispatcher: AiDispatcher, backend: RecordingBackend
    ) -> None:
        backend.on("POST", AI_PATH, lambda request: httpx.Response(500))

        with pytest.raises(AiRequestFailed) as exc_info:
            await dispatcher.submit(draft())

        assert exc_info.value.user_message == "AI request failed with status 500"

    @pytest.mark.parametrize(
        "exc_type", [httpx.ConnectError, httpx.ReadTimeout, httpx.RemoteProtocolError]
    )
    async def test_no_response(
        self, dispatcher: AiDispatcher, backend: RecordingBackend, exc_type: type
    ) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise exc_type("no answer", request=request)

        backend.on("POST", AI_PATH, fail)

        with pytest.raises(AiRequestFailed) as exc_info:
            await dispatcher.submit(draft())

        check.equal(exc_info.value.failure, AiFailureKind.NO_RESPONSE)
        check.is_in("No response", exc_info.value.user_message)
        check.is_false(dispatcher.busy)

    async def test_local_protocol_error_is_not_sent(
        self, dispatcher: AiDispatcher, backend: RecordingBackend
    ) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.LocalProtocolError("illegal header", request=request)

        backend.on("POST", AI_PATH, fail)

        with pytest.raises(AiRequestFailed) as exc_info:
            await dispatcher.submit(draft())

        assert exc_info.value.failure is AiFailureKind.NOT_SENT

    async def test_construction_failure_makes_no_call(
        self, dispatcher: AiDispatcher, backend: RecordingBackend
    ) -> None:
        with pytest.raises(AiRequestFailed) as exc_info:
            await dispatcher.submit(draft(use_caller_credential=True))

        check.equal(exc_info.value.failure, AiFailureKind.NOT_SENT)
        check.equal(backend.requests, [])

    async def test_legacy_choices_shape_is_not_accepted(
        self, dispatcher: AiDispatcher, backend: RecordingBackend
    ) -> None:
        """Only the flat message payload is a valid answer."""
        backend.json("POST", AI_PATH, {"data": {"choices": [{"text": "old"}]}})

        with pytest.raises(AiRequestFailed) as exc_info:
            await dispatcher.submit(draft())

        check.equal(exc_info.value.failure, AiFailureKind.RESPONDED)
        check.is_in("malformed", exc_info.value.user_message)

    async def test_second_submit_while_busy_is_rejected(
        self, dispatcher: AiDispatcher, backend: RecordingBackend
    ) -> None:
        release = asyncio.Event()

        async def slow(request: httpx.Request) -> httpx.Response:
            await release.wait()
            return httpx.Response(200, json={"message": "first"})

        backend.on("POST", AI_PATH, slow)

        first = asyncio.create_task(dispatcher.submit(draft()))
        await asyncio.sleep(0)

        with pytest.raises(OperationInProgress):
            await dispatcher.submit(draft())

        release.set()
        check.equal(await first, "first")
        check.equal(len(backend.requests), 1)
