DEFAULT_TITLE = "Untitled Conversation"
FALLBACK_TITLE_CHARS = 30


def fallback_title(message: str) -> str:
    """First 30 characters of *message*, with ``...`` if it was longer."""
    title = message[:FALLBACK_TITLE_CHARS]
    if len(message) > FALLBACK_TITLE_CHARS:
        title += "..."
    return title


def resolve_title(
    decoded: str | None,
    stored: str | None,
    message: str,
) -> str | None:
    """Pick the title to write after an exchange, or ``None`` to keep the stored one.

    A title sent by the backend always wins.  Otherwise a conversation
    that is still untitled gets one derived from the user's message.
    """
    if decoded is not None:
        return decoded
    if stored is None or stored == DEFAULT_TITLE:
        return fallback_title(message)
    return None
