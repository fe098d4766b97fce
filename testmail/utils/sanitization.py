"""
Sanitization Utility Module
Makes addresses, subjects and header values safe to put on a log line.
"""

import re
import unicodedata

ANSI_ESCAPE_PATTERN = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


def sanitize_for_logging(text, max_length: int = 255) -> str:
    """
    Sanitize a value before logging it.

    Message fields come from callers and may carry CRLF sequences that would
    forge extra log lines (or extra headers if echoed back).

    Args:
        text: The value to sanitize; non-strings are converted with str().
        max_length: Maximum length kept (longer values are truncated).

    Returns:
        Sanitized single-line string.
    """
    if text is None or text == "":
        return ""
    text = unicodedata.normalize('NFKC', str(text))

    text = text.replace('\n', '\\n').replace('\r', '\\r')
    text = ANSI_ESCAPE_PATTERN.sub('', text)

    # Drop control (Cc), format (Cf) and line/paragraph separators (Zl, Zp), keep tabs
    text = "".join(
        ch for ch in text
        if ch == '\t' or unicodedata.category(ch) not in ('Cc', 'Cf', 'Zl', 'Zp')
    )

    if len(text) > max_length:
        text = text[:max_length] + "..."
    return text
