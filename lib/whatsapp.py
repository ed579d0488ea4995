# =============================================================================
# lib/whatsapp.py - WhatsApp Deep Links
# =============================================================================
# Order confirmation happens by hand over WhatsApp: checkout produces a
# wa.me link with the order summary pre-filled. Nothing here talks to
# WhatsApp; delivery is never confirmed.
#
# Usage:
#   url = build_whatsapp_url("New Order from ada@example.com\n...")
# =============================================================================

from urllib.parse import quote

from app.config import settings

WHATSAPP_BASE_URL = "https://wa.me"

# Characters left unescaped, matching the browser's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_message(text: str) -> str:
    """Percent-encode message text for the `text` query parameter."""
    return quote(text, safe=_URI_COMPONENT_SAFE)


def build_whatsapp_url(text: str, number: str | None = None) -> str:
    """
    Build a wa.me link that opens a chat with the message pre-filled.

    Args:
        text: Message body
        number: Destination number (defaults to settings.WHATSAPP_NUMBER)

    Returns:
        e.g. "https://wa.me/+2349122834983?text=New%20Order..."
    """
    destination = number or settings.WHATSAPP_NUMBER
    return f"{WHATSAPP_BASE_URL}/{destination}?text={encode_message(text)}"
