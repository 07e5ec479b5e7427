import unicodedata

# str.isspace() also accepts the C0 separators U+001C..U+001F, which are not
# White_Space in the Unicode character database.
_NON_WHITE_SPACE_SEPARATORS = frozenset("\x1c\x1d\x1e\x1f")


def _is_whitespace(ch: str) -> bool:
    return ch.isspace() and ch not in _NON_WHITE_SPACE_SEPARATORS


def _is_punctuation(ch: str) -> bool:
    return unicodedata.category(ch).startswith("P")


def tokenize(text: str) -> list[str]:
    """Split text into word runs and standalone punctuation marks.

    This is a local progress yardstick only; it does not mirror the remote
    model's subword tokenizer.
    """
    tokens: list[str] = []
    current: list[str] = []

    for ch in text:
        if _is_whitespace(ch) or _is_punctuation(ch):
            if current:
                tokens.append("".join(current))
                current.clear()
            if not _is_whitespace(ch):
                tokens.append(ch)
        else:
            current.append(ch)

    if current:
        tokens.append("".join(current))

    return tokens


def count_tokens(text: str) -> int:
    return len(tokenize(text))
