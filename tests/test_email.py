"""Tests for outbound email delivery."""

import json

import httpx
import pytest
import respx

from warfront.services import email
from warfront.services.email import (
    RESEND_API_URL,
    Outbox,
    friend_request_email,
    friend_response_email,
    send_email,
    verification_email,
)


@pytest.fixture
def resend_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(email.settings, "resend_api_key", "re_test")


class TestSendEmail:
    async def test_disabled_without_key(self) -> None:
        """No API key means nothing is sent."""
        with respx.mock(assert_all_called=False) as router:
            route = router.post(RESEND_API_URL)

            sent = await send_email("a@example.com", "Hi", "<p>hi</p>")

        assert sent is False
        assert not route.called

    @pytest.mark.usefixtures("resend_key")
    async def test_sends_payload(self) -> None:
        with respx.mock as router:
            route = router.post(RESEND_API_URL).mock(
                return_value=httpx.Response(200, json={"id": "email-1"})
            )

            sent = await send_email("a@example.com", "Hi", "<p>hi</p>")

        assert sent is True
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer re_test"
        payload = json.loads(request.content)
        assert payload["to"] == ["a@example.com"]
        assert payload["subject"] == "Hi"

    @pytest.mark.usefixtures("resend_key")
    async def test_provider_error_is_swallowed(self) -> None:
        """A failing provider never raises into the caller."""
        with respx.mock as router:
            router.post(RESEND_API_URL).mock(return_value=httpx.Response(500))

            sent = await send_email("a@example.com", "Hi", "<p>hi</p>")

        assert sent is False

    @pytest.mark.usefixtures("resend_key")
    async def test_network_error_is_swallowed(self) -> None:
        with respx.mock as router:
            router.post(RESEND_API_URL).mock(side_effect=httpx.ConnectError("down"))

            sent = await send_email("a@example.com", "Hi", "<p>hi</p>")

        assert sent is False


class TestTemplates:
    def test_verification_link(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(email.settings, "public_api_url", "https://api.warfront.test/")

        message = verification_email("a@example.com", "tok123")

        assert message.to == "a@example.com"
        assert "https://api.warfront.test/auth/verify-email?token=tok123" in message.html

    def test_display_name_is_escaped(self) -> None:
        message = friend_response_email("a@example.com", "bob", "<b>Bob</b>", accepted=True)

        assert "<b>Bob</b>" not in message.html
        assert "accepted" in message.subject

    def test_request_mentions_handle(self) -> None:
        message = friend_request_email("a@example.com", "alice", None)

        assert "@alice" in message.html
        assert message.subject == "alice sent you a friend request on Warfront"


class TestOutbox:
    async def test_empty_outbox_sends_nothing(self) -> None:
        with respx.mock(assert_all_called=False) as router:
            route = router.post(RESEND_API_URL)

            sent = await Outbox().deliver()

        assert sent == 0
        assert not route.called

    @pytest.mark.usefixtures("resend_key")
    async def test_delivers_queued_messages(self) -> None:
        outbox = Outbox()
        outbox.add(verification_email("a@example.com", "tok1"))
        outbox.add(friend_request_email("b@example.com", "alice", None))

        with respx.mock as router:
            route = router.post(RESEND_API_URL).mock(return_value=httpx.Response(200))

            sent = await outbox.deliver()

        assert sent == 2
        recipients = [json.loads(call.request.content)["to"] for call in route.calls]
        assert recipients == [["a@example.com"], ["b@example.com"]]
        assert outbox.messages == []

    @pytest.mark.usefixtures("resend_key")
    async def test_failed_message_does_not_stop_the_rest(self) -> None:
        outbox = Outbox()
        outbox.add(verification_email("a@example.com", "tok1"))
        outbox.add(verification_email("b@example.com", "tok2"))

        with respx.mock as router:
            router.post(RESEND_API_URL).mock(
                side_effect=[httpx.Response(500), httpx.Response(200)]
            )

            sent = await outbox.deliver()

        assert sent == 1
