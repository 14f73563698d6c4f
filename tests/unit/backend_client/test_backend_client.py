"""Tests for PolicyBackendClient against a fake backend."""

import json

import httpx
import pytest

from policychat.audit import DiagnosticLog
from policychat.client import PolicyBackendClient
from policychat.config.models import BackendConfig
from policychat.exceptions import TransportError, ValidationError
from tests.factories import (
    BASE_URL,
    PDF_BYTES,
    FakeBackend,
    decode_data_url,
    make_client,
)


@pytest.fixture
def client(backend: FakeBackend, log: DiagnosticLog) -> PolicyBackendClient:
    return make_client(backend, log)


def client_with_handler(handler, log: DiagnosticLog) -> PolicyBackendClient:
    return PolicyBackendClient(
        BASE_URL, log=log, token="test-token", transport=httpx.MockTransport(handler)
    )


class TestPrepareDocument:
    """Validation happens before any remote call."""

    def test_rejects_other_types(self, client, backend, log) -> None:
        with pytest.raises(ValidationError):
            client.prepare_document(b"hello", "text/plain")
        assert backend.requests == []
        assert len(log) == 0

    def test_rejects_empty_content(self, client, log) -> None:
        with pytest.raises(ValidationError):
            client.prepare_document(b"", "application/pdf")
        assert len(log) == 0

    def test_builds_store_body(self, client) -> None:
        request = client.prepare_document(PDF_BYTES, "application/pdf")

        assert request.created_object_name.startswith("hr_policies_")
        assert request.data_type == "files"
        assert decode_data_url(request.input_data[0]) == ("application/pdf", PDF_BYTES)

    def test_repeated_uploads_get_distinct_names(self, client) -> None:
        first = client.prepare_document(PDF_BYTES, "application/pdf")
        second = client.prepare_document(PDF_BYTES, "application/pdf")
        assert first.created_object_name != second.created_object_name


class TestStoreDocument:
    """Tests for POST /input_data."""

    @pytest.mark.asyncio
    async def test_store_returns_object_name(self, client, backend, log) -> None:
        name = await client.store_document(PDF_BYTES, "application/pdf")

        assert name in backend.objects
        body = backend.bodies("store")[0]
        assert body["created_object_name"] == name
        assert body["data_type"] == "files"
        assert len(body["input_data"]) == 1

    @pytest.mark.asyncio
    async def test_sends_credential_and_json_headers(self, client, backend) -> None:
        await client.store_document(PDF_BYTES, "application/pdf")

        request = backend.requests[0]
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Content-Type"] == "application/json"
        assert str(request.url) == f"{BASE_URL}/input_data"

    @pytest.mark.asyncio
    async def test_store_is_logged_verbatim(self, client, log) -> None:
        name = await client.store_document(PDF_BYTES, "application/pdf")

        (record,) = log.snapshot()
        assert record.endpoint_path == "/input_data"
        assert record.http_method == "POST"
        assert record.request_payload["created_object_name"] == name
        assert record.response_payload == {"status": "success"}
        assert record.status_code == 200
        assert record.succeeded

    @pytest.mark.asyncio
    async def test_store_failure_raises_and_logs(self, client, backend, log) -> None:
        backend.failures.add("store")

        with pytest.raises(TransportError) as exc_info:
            await client.store_document(PDF_BYTES, "application/pdf")

        assert exc_info.value.backend_status == 500
        assert exc_info.value.message == "store unavailable"
        (record,) = log.snapshot()
        assert not record.succeeded
        assert record.error == "HTTP 500: store unavailable"
        assert record.response_payload == {"error": "store unavailable"}


class TestProvisionAgent:
    """Tests for POST /create-agent."""

    @pytest.mark.asyncio
    async def test_returns_agent_id(self, client, backend) -> None:
        agent_id = await client.provision_agent("Be helpful", "HR Policy Assistant")

        assert agent_id == "agent-42"
        assert backend.bodies("create-agent") == [
            {"instructions": "Be helpful", "agent_name": "HR Policy Assistant"}
        ]

    @pytest.mark.asyncio
    async def test_object_name_not_sent_by_default(self, client, backend) -> None:
        await client.provision_agent("Be helpful", "Bot", object_name="hr_policies_1")
        assert "object_name" not in backend.bodies("create-agent")[0]

    @pytest.mark.asyncio
    async def test_object_name_sent_when_binding_enabled(self, backend, log) -> None:
        client = make_client(backend, log, bind_object_on_provision=True)
        await client.provision_agent("Be helpful", "Bot", object_name="hr_policies_1")
        assert backend.bodies("create-agent")[0]["object_name"] == "hr_policies_1"

    @pytest.mark.asyncio
    async def test_numeric_agent_id_coerced(self, log) -> None:
        client = client_with_handler(lambda r: httpx.Response(200, json={"agent_id": 7}), log)
        assert await client.provision_agent("i", "n") == "7"

    @pytest.mark.asyncio
    async def test_missing_agent_id_is_transport_error(self, log) -> None:
        client = client_with_handler(lambda r: httpx.Response(200, json={"ok": True}), log)

        with pytest.raises(TransportError):
            await client.provision_agent("i", "n")

        (record,) = log.snapshot()
        assert record.response_payload == {"ok": True}
        assert record.error is not None
        assert "agent_id" in record.error


class TestSendQuery:
    """Tests for POST /chat."""

    @pytest.mark.asyncio
    async def test_returns_reply(self, client, backend) -> None:
        backend.chat_replies.append("Up to $50 per day.")

        reply = await client.send_query("agent-42", "What is the meal allowance?")

        assert reply == "Up to $50 per day."
        assert backend.bodies("chat") == [
            {"agent_id": "agent-42", "message": "What is the meal allowance?"}
        ]

    @pytest.mark.asyncio
    async def test_unparsable_body_is_transport_error(self, log) -> None:
        client = client_with_handler(lambda r: httpx.Response(200, text="<html>oops</html>"), log)

        with pytest.raises(TransportError):
            await client.send_query("a", "hi")

        (record,) = log.snapshot()
        assert record.response_payload == "<html>oops</html>"
        assert record.error == "Unparsable response body (HTTP 200)"

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_error(self, log) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = client_with_handler(refuse, log)

        with pytest.raises(TransportError) as exc_info:
            await client.send_query("a", "hi")

        assert exc_info.value.backend_status is None
        (record,) = log.snapshot()
        assert record.endpoint_path == "/chat"
        assert record.request_payload == {"agent_id": "a", "message": "hi"}
        assert record.response_payload is None
        assert record.error.startswith("ConnectError")


class TestDeleteResource:
    """Tests for DELETE /objects/{name}."""

    @pytest.mark.asyncio
    async def test_deletes_stored_object(self, client, backend, log) -> None:
        name = await client.store_document(PDF_BYTES, "application/pdf")

        ack = await client.delete_resource(name)

        assert ack == {"deleted": name}
        assert name not in backend.objects
        record = log.snapshot()[-1]
        assert record.endpoint_path == f"/objects/{name}"
        assert record.http_method == "DELETE"
        assert record.request_payload == {}

    @pytest.mark.asyncio
    async def test_already_gone_is_acknowledged(self, client, log) -> None:
        ack = await client.delete_resource("hr_policies_missing")

        assert ack == {"detail": "not found"}
        assert log.snapshot()[-1].status_code == 404
        assert log.snapshot()[-1].succeeded

    @pytest.mark.asyncio
    async def test_empty_acknowledgement(self, log) -> None:
        client = client_with_handler(lambda r: httpx.Response(204), log)
        assert await client.delete_resource("x") == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [["ok"], "ok", 1])
    async def test_non_object_acknowledgement_is_logged_as_failure(
        self, body, log
    ) -> None:
        client = client_with_handler(lambda r: httpx.Response(200, json=body), log)

        with pytest.raises(TransportError):
            await client.delete_resource("x")

        (record,) = log.snapshot()
        assert record.succeeded is False
        assert record.status_code == 200
        assert record.response_payload == body
        assert record.error.startswith("Unexpected response shape")

    @pytest.mark.asyncio
    async def test_server_error_raises(self, client, backend) -> None:
        backend.failures.add("delete")
        with pytest.raises(TransportError):
            await client.delete_resource("x")


class TestFetchRawData:
    """Tests for GET /return_data/{name}."""

    @pytest.mark.asyncio
    async def test_returns_stored_payload(self, client, backend, log) -> None:
        name = await client.store_document(PDF_BYTES, "application/pdf")

        data = await client.fetch_raw_data(name)

        assert data["object_name"] == name
        assert log.snapshot()[-1].http_method == "GET"
        assert log.snapshot()[-1].endpoint_path == f"/return_data/{name}"


class TestFromConfig:
    """Tests for building the client from settings."""

    @pytest.mark.asyncio
    async def test_uses_config_values(self, backend, log) -> None:
        config = BackendConfig(base_url=f"{BASE_URL}/", api_token="secret-token")

        async with PolicyBackendClient.from_config(
            config, log=log, transport=backend.transport()
        ) as client:
            await client.send_query("a", "hi")

        assert client.base_url == BASE_URL
        assert backend.requests[0].headers["Authorization"] == "Bearer secret-token"
        assert json.loads(backend.requests[0].content) == {"agent_id": "a", "message": "hi"}

    @pytest.mark.asyncio
    async def test_blank_token_sends_no_authorization(self, backend, log) -> None:
        client = PolicyBackendClient.from_config(
            BackendConfig(base_url=BASE_URL), log=log, transport=backend.transport()
        )
        await client.send_query("a", "hi")
        await client.close()

        assert "Authorization" not in backend.requests[0].headers
