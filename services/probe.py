# Text-likelihood check and the shared binary-probe fallback used by the
# Word, Excel and PowerPoint extractors when structured parsing is not
# possible.

from services.message import FileHandle

DEFAULT_THRESHOLD = 0.1

BINARY_MARKER = "[Binary content detected]"


def _is_control(ch: str) -> bool:
    code = ord(ch)
    return code <= 0x09 or 0x0B <= code <= 0x1F or 0x7F <= code <= 0x9F


def is_probably_text(text: str, threshold: float = DEFAULT_THRESHOLD) -> bool:
    """Return True if fewer than *threshold* of the characters are control
    characters (``U+0000-0009``, ``U+000B-001F``, ``U+007F-009F``).

    The empty string counts as text.
    """
    if not text:
        return True
    control = sum(1 for ch in text if _is_control(ch))
    return control / len(text) < threshold


def probe_binary(
    file: FileHandle,
    placeholder: str,
    encoding: str = "utf-8",
    threshold: float = DEFAULT_THRESHOLD,
) -> str:
    """Return the file decoded as text if it looks like text, otherwise
    *placeholder* followed by a binary-content marker line."""
    content = file.read_text(encoding, errors="replace")
    if is_probably_text(content, threshold):
        return content
    return f"{placeholder}\n{BINARY_MARKER}"
