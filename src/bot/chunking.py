"""Split long replies to fit Telegram's message size limit.

Telegram counts message length in UTF-16 code units, so a character
outside the Basic Multilingual Plane (most emoji) uses two of them.
"""

TELEGRAM_MAX_LENGTH = 4096

# Split points in order of preference.
_SEPARATORS = ("\n\n", "\n", " ")


def utf16_len(text: str) -> int:
    """Length of *text* as Telegram measures it."""
    return len(text) + sum(1 for ch in text if ord(ch) > 0xFFFF)


def _fitting_prefix(text: str, limit: int) -> int:
    """Number of leading characters of *text* within *limit* UTF-16 units."""
    units = 0
    for i, ch in enumerate(text):
        units += 2 if ord(ch) > 0xFFFF else 1
        if units > limit:
            return i
    return len(text)


def _split_point(text: str, limit: int) -> int:
    """Find where to cut *text* so the first piece is at most *limit* chars.

    Tries a paragraph break, then a line break, then a space. A candidate
    in the first half of the window is too early to be worth it, so the
    search falls through to the next separator and finally to a hard cut
    at *limit*.
    """
    half = limit / 2
    for sep in _SEPARATORS:
        # Match may start at index <= limit; the piece before it then fits.
        pos = text.rfind(sep, 0, limit + len(sep))
        if pos >= half:
            return pos
    return limit


def split_message(text: str, limit: int = TELEGRAM_MAX_LENGTH) -> list[str]:
    """Split text at natural boundaries into chunks of at most *limit* UTF-16 units.

    Leading whitespace at each cut is dropped, so joining the chunks loses
    the separators that were split on. A lone astral character with
    ``limit=1`` is still emitted as its own chunk.
    """
    if limit < 1:
        msg = f"limit must be positive, got {limit}"
        raise ValueError(msg)
    if utf16_len(text) <= limit:
        return [text]

    chunks: list[str] = []
    remaining = text
    while remaining:
        window = _fitting_prefix(remaining, limit)
        if window == len(remaining):
            chunks.append(remaining)
            break
        cut = _split_point(remaining, max(window, 1))
        chunks.append(remaining[:cut])
        remaining = remaining[cut:].lstrip()
    return chunks
