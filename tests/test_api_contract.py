import unittest
from contextlib import ExitStack
from unittest.mock import AsyncMock, Mock, patch

from fastapi.testclient import TestClient

import app as app_module
from mcp_chat.connectors import build_default_registry
from mcp_chat.constants import DEFAULT_ACTIVE_CONNECTORS
from mcp_chat.errors import BadRequestError
from mcp_chat.model_registry import build_default_catalog
from mcp_chat.services.chat_session import ChatSession
from mcp_chat.services.dispatch_controller import DispatchController


class StubProvider:
    def __init__(self, response: str = "Hi there", error: Exception | None = None) -> None:
        self._response = response
        self._error = error

    async def request(
        self, model_id: str, text: str, active_connectors: frozenset[str]
    ) -> str:
        if self._error is not None:
            raise self._error
        return self._response


def build_session(provider: StubProvider) -> ChatSession:
    catalog = build_default_catalog()
    connectors = build_default_registry(DEFAULT_ACTIVE_CONNECTORS)
    controller = DispatchController(catalog, connectors, provider, response_timeout=5)
    return ChatSession(catalog, connectors, controller)


class ApiContractTests(unittest.TestCase):
    def setUp(self) -> None:
        app_module.get_chat_session.cache_clear()
        self.session = build_session(StubProvider())
        self.stack = ExitStack()
        self.stack.enter_context(
            patch.object(app_module, "get_chat_session", return_value=self.session)
        )
        self.flush_mock = self.stack.enter_context(
            patch.object(app_module, "flush_langsmith_traces", return_value=None)
        )
        self.client = self.stack.enter_context(TestClient(app_module.app))

    def tearDown(self) -> None:
        self.client.portal.call(self.session.aclose)
        self.stack.close()

    def test_health_endpoint(self) -> None:
        response = self.client.get("/api/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_models_endpoint_groups_by_category(self) -> None:
        response = self.client.get("/api/models")

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(
            [group["category"] for group in payload], ["code", "chat", "orchestration", "vision"]
        )
        first = payload[0]["models"][0]
        self.assertEqual(
            first,
            {
                "id": "claude-4-opus-code",
                "displayName": "Claude 4 Opus Code",
                "category": "code",
                "tier": "premium",
            },
        )

    def test_models_endpoint_filters_category(self) -> None:
        response = self.client.get("/api/models", params={"category": "vision"})

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(len(payload), 1)
        self.assertEqual(
            [model["id"] for model in payload[0]["models"]], ["claude-4-vision", "gpt-4-vision"]
        )

    def test_models_endpoint_rejects_unknown_category(self) -> None:
        response = self.client.get("/api/models", params={"category": "audio"})

        self.assertEqual(response.status_code, 422)

    def test_send_message_and_wait_for_reply(self) -> None:
        response = self.client.post(
            "/api/messages",
            params={"wait": "true"},
            json={"text": "  Hello ", "modelId": "claude-4-sonnet"},
        )

        self.assertEqual(response.status_code, 202)
        payload = response.json()
        self.assertEqual(payload["turn"]["text"], "Hello")
        self.assertEqual(payload["turn"]["sender"], "user")
        self.assertEqual(payload["turn"]["modelDisplayName"], "Claude 4 Sonnet")
        self.assertEqual(payload["reply"]["sender"], "assistant")
        self.assertEqual(payload["reply"]["text"], "Hi there")
        self.assertEqual(payload["reply"]["correlationId"], payload["turn"]["id"])
        self.assertFalse(payload["reply"]["failed"])
        self.assertIsNone(payload["state"])
        self.assertEqual(self.flush_mock.call_count, 1)

        turns = self.client.get("/api/turns").json()
        self.assertEqual([turn["sender"] for turn in turns], ["user", "assistant"])

        usage = self.client.get("/api/usage").json()
        self.assertEqual(usage["reasoning"], 1)
        self.assertEqual(usage["superSearch"], 1)

    def test_send_message_without_wait_returns_user_turn(self) -> None:
        response = self.client.post("/api/messages", json={"text": "Hello"})

        self.assertEqual(response.status_code, 202)
        payload = response.json()
        self.assertEqual(payload["turn"]["modelId"], "claude-4-sonnet")
        self.assertIsNone(payload["reply"])
        self.assertEqual(payload["state"], "pending")

    def test_unknown_model_falls_back_to_default_display_name(self) -> None:
        response = self.client.post(
            "/api/messages", params={"wait": "true"}, json={"text": "hi", "modelId": "old-model"}
        )

        self.assertEqual(response.status_code, 202)
        payload = response.json()
        self.assertEqual(payload["turn"]["modelId"], "old-model")
        self.assertEqual(payload["turn"]["modelDisplayName"], "Claude 4 Sonnet")

    def test_blank_message_is_ignored(self) -> None:
        response = self.client.post("/api/messages", json={"text": "   "})

        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get("/api/turns").json(), [])

    def test_provider_failure_is_reported_inline(self) -> None:
        session = build_session(StubProvider(error=RuntimeError("provider down")))
        with patch.object(app_module, "get_chat_session", return_value=session):
            response = self.client.post(
                "/api/messages", params={"wait": "true"}, json={"text": "hi"}
            )

        self.assertEqual(response.status_code, 202)
        reply = response.json()["reply"]
        self.assertTrue(reply["failed"])
        self.assertEqual(reply["error"], "provider down")

    def test_bad_request_error_maps_to_400(self) -> None:
        session = Mock()
        session.send.side_effect = BadRequestError("invalid message")

        with patch.object(app_module, "get_chat_session", return_value=session):
            response = self.client.post("/api/messages", json={"text": "hi"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "invalid message")
        self.assertEqual(self.flush_mock.call_count, 1)

    def test_unexpected_error_maps_to_502(self) -> None:
        session = Mock()
        session.send.side_effect = RuntimeError("controller down")

        with patch.object(app_module, "get_chat_session", return_value=session):
            response = self.client.post("/api/messages", json={"text": "hi"})

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], "controller down")
        self.assertEqual(self.flush_mock.call_count, 1)

    def test_cancel_endpoint(self) -> None:
        response = self.client.post("/api/messages/99/cancel")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"cancelled": False})

    def test_toggle_connector(self) -> None:
        response = self.client.post("/api/connectors/web/toggle")

        self.assertEqual(response.status_code, 200)
        web = next(c for c in response.json() if c["id"] == "web")
        self.assertEqual(web, {"id": "web", "displayName": "Web Search", "active": False})

    def test_toggle_unknown_connector_is_not_fatal(self) -> None:
        before = self.client.get("/api/connectors").json()

        response = self.client.post("/api/connectors/telepathy/toggle")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), before)

    def test_ui_state_endpoints(self) -> None:
        state = self.client.get("/api/ui-state").json()
        self.assertEqual(state["selectedModelId"], "claude-4-sonnet")
        self.assertTrue(state["darkMode"])

        selected = self.client.put("/api/ui-state/selected-model", json={"modelId": "gpt-4-vision"})
        self.assertEqual(selected.status_code, 200)
        self.assertEqual(selected.json()["selectedModelDisplayName"], "GPT-4 Vision")

        missing = self.client.put("/api/ui-state/selected-model", json={"modelId": "gpt-2"})
        self.assertEqual(missing.status_code, 404)

        dark = self.client.post("/api/ui-state/dark-mode/toggle").json()
        self.assertFalse(dark["darkMode"])

        panel = self.client.post("/api/ui-state/panels/settings/toggle").json()
        self.assertTrue(panel["settingsOpen"])

        invalid = self.client.post("/api/ui-state/panels/sidebar/toggle")
        self.assertEqual(invalid.status_code, 422)

    def test_requests_endpoint_lists_in_flight_states(self) -> None:
        self.assertEqual(self.client.get("/api/requests").json(), {})


class LifespanTests(unittest.TestCase):
    def setUp(self) -> None:
        app_module.get_chat_session.cache_clear()
        self.addCleanup(app_module.get_chat_session.cache_clear)

    def test_shutdown_closes_cached_session(self) -> None:
        session = build_session(StubProvider())
        with (
            patch.object(app_module, "build_chat_session", return_value=session),
            patch.object(app_module, "get_settings", return_value=None),
            patch.object(session, "aclose", new_callable=AsyncMock) as aclose_mock,
        ):
            with TestClient(app_module.app) as client:
                self.assertEqual(client.get("/api/turns").json(), [])

        aclose_mock.assert_awaited_once()

    def test_shutdown_without_session_builds_nothing(self) -> None:
        with patch.object(app_module, "build_chat_session") as build_mock:
            with TestClient(app_module.app) as client:
                client.get("/api/health")

        build_mock.assert_not_called()


if __name__ == "__main__":
    unittest.main()
