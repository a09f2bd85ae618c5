"""
Outbound email through the Resend HTTP API.

Email is a side channel: delivery problems are logged and never fail the
request that triggered them. With no API key configured, messages are
logged and skipped.

Messages are built by the template functions below and queued on an
`Outbox`; nothing is sent from inside a database transaction.
"""

import logging
from dataclasses import dataclass, field
from html import escape

import httpx

from warfront.config import settings

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
REQUEST_TIMEOUT = 10.0

SIGNATURE = "<p>Happy gaming!</p><p>- The Warfront Team</p>"


async def send_email(
    to: str,
    subject: str,
    html: str,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """
    Send one email.

    Args:
        to: Recipient address
        subject: Subject line
        html: HTML body
        client: Optional httpx client for connection reuse

    Returns:
        True if the provider accepted the message
    """
    if not settings.resend_api_key:
        logger.info("Email delivery disabled; skipping %r to %s", subject, to)
        return False

    payload = {
        "from": settings.email_from,
        "to": [to],
        "subject": subject,
        "html": html,
    }
    headers = {"Authorization": f"Bearer {settings.resend_api_key}"}

    try:
        if client:
            response = await client.post(RESEND_API_URL, json=payload, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as own_client:
                response = await own_client.post(RESEND_API_URL, json=payload, headers=headers)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("Failed to send %r to %s: %s", subject, to, e)
        return False

    logger.info("Sent %r to %s", subject, to)
    return True


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    html: str


@dataclass
class Outbox:
    """
    Emails collected while a request runs.

    Services only queue. The caller runs `deliver` once the transaction that
    produced the emails has committed, so a rolled back request sends
    nothing.
    """

    messages: list[OutgoingEmail] = field(default_factory=list)

    def add(self, message: OutgoingEmail) -> None:
        self.messages.append(message)

    async def deliver(self) -> int:
        """Send every queued email over one connection. Returns how many were accepted."""
        if not self.messages:
            return 0
        sent = 0
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            for message in self.messages:
                if await send_email(message.to, message.subject, message.html, client=client):
                    sent += 1
        self.messages.clear()
        return sent


def _display(name: str, display_name: str | None) -> str:
    return escape(display_name or name)


def verification_email(to: str, token: str) -> OutgoingEmail:
    link = f"{settings.public_api_url.rstrip('/')}/auth/verify-email?token={token}"
    html = (
        "<h2>Confirm your email</h2>"
        f'<p>Click <a href="{escape(link)}">here</a> to verify your Warfront account.</p>'
        f"{SIGNATURE}"
    )
    return OutgoingEmail(to, "Verify your Warfront account", html)


def friend_request_email(
    to: str, requester_name: str, requester_display_name: str | None
) -> OutgoingEmail:
    who = _display(requester_name, requester_display_name)
    html = (
        "<h2>New Friend Request</h2>"
        f"<p>{who} (@{escape(requester_name)}) has sent you a friend request on Warfront!</p>"
        "<p>Log in to your account to accept or decline this request.</p>"
        f"{SIGNATURE}"
    )
    return OutgoingEmail(to, f"{who} sent you a friend request on Warfront", html)


def friend_response_email(
    to: str,
    requestee_name: str,
    requestee_display_name: str | None,
    accepted: bool,
) -> OutgoingEmail:
    who = _display(requestee_name, requestee_display_name)
    handle = escape(requestee_name)
    if accepted:
        subject = f"{who} accepted your friend request!"
        message = (
            f"Great news! {who} (@{handle}) has accepted your friend request on Warfront. "
            "You can now challenge them to battles!"
        )
    else:
        subject = f"{who} declined your friend request"
        message = f"{who} (@{handle}) has declined your friend request on Warfront."

    heading = "Accepted" if accepted else "Declined"
    html = f"<h2>Friend Request {heading}</h2><p>{message}</p>{SIGNATURE}"
    return OutgoingEmail(to, subject, html)
