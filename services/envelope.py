"""
Attachment envelopes: how extracted files travel inside a message body.

Each selected file is appended to the typed text as one block::

    <blank line>
    <ATTACHMENT_FILE>
    <FILE_INDEX>0</FILE_INDEX>
    <FILE_NAME>report.pdf</FILE_NAME>
    <FILE_CONTENT>
    ...extracted text...
    </FILE_CONTENT>
    </ATTACHMENT_FILE>

The tag names are stored with every message and must never change.
"""

from typing import Sequence

import aiohttp

import services.logger as log
import services.media as media
from services.engine import ExtractionEngine
from services.message import AttachmentRef, DecodedMessage, FileHandle, FileSource

l = log.get_logger()

ENVELOPE_OPEN = "<ATTACHMENT_FILE>"
ENVELOPE_CLOSE = "</ATTACHMENT_FILE>"
INDEX_TAG = "FILE_INDEX"
NAME_TAG = "FILE_NAME"
CONTENT_TAG = "FILE_CONTENT"


# ----------------------------------------------------------------------
# Encode
# ----------------------------------------------------------------------

def envelope_name(name: str) -> str:
    """File name as written into an envelope; the name tag must stay on one line."""
    return name.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")


def build_envelope(index: int, name: str, content: str) -> str:
    name = envelope_name(name)
    return (
        f"\n\n{ENVELOPE_OPEN}\n"
        f"<{INDEX_TAG}>{index}</{INDEX_TAG}>\n"
        f"<{NAME_TAG}>{name}</{NAME_TAG}>\n"
        f"<{CONTENT_TAG}>\n{content}\n</{CONTENT_TAG}>\n"
        f"{ENVELOPE_CLOSE}\n"
    )


def build_error_envelope(index: int, name: str, error: Exception | str) -> str:
    message = str(error) or type(error).__name__
    return build_envelope(index, name, f"Error reading file: {message}")


async def encode_message(
    text: str,
    files: Sequence[FileHandle | FileSource],
    engine: ExtractionEngine,
    max_bytes: int = media.DEFAULT_MAX,
) -> str:
    """
    Append one envelope per selected file to the typed *text*.

    Files are opened and extracted one after another in selection order, and
    each gets the index of its position in *files*.  A file that cannot be
    read still produces an envelope, holding the error message.
    """
    parts = [text]
    remote = any(isinstance(f, FileSource) and f.is_remote for f in files)
    session = aiohttp.ClientSession() if remote else None
    try:
        for index, source in enumerate(files):
            name = media.display_name(source)
            try:
                handle = await media.open_file(source, max_bytes, session)
                content = await engine.extract(handle)
            except Exception as e:
                l.error(f"Error reading file {name!r}: {e}")
                parts.append(build_error_envelope(index, name, e))
                continue
            parts.append(build_envelope(index, name, content))
    finally:
        if session is not None:
            await session.close()
    l.debug(f"Encoded message with {len(files)} attachment(s)")
    return "".join(parts)


# ----------------------------------------------------------------------
# Decode
# ----------------------------------------------------------------------

def iter_envelopes(message: str):
    """
    Yield ``(start, end, body)`` for each envelope, left to right.

    ``message[start:end]`` spans the whole envelope including both tags.  An
    opening tag is closed by the first closing tag after it, so an envelope
    never nests; an opening tag with no closing tag after it ends the scan.
    """
    pos = 0
    while True:
        start = message.find(ENVELOPE_OPEN, pos)
        if start < 0:
            return
        body_start = start + len(ENVELOPE_OPEN)
        close = message.find(ENVELOPE_CLOSE, body_start)
        if close < 0:
            return
        end = close + len(ENVELOPE_CLOSE)
        yield start, end, message[body_start:close]
        pos = end


def _tag_value(body: str, tag: str) -> str | None:
    """Value of the first ``<tag>...</tag>`` in *body*, which must sit on one line."""
    open_tag, close_tag = f"<{tag}>", f"</{tag}>"
    start = body.find(open_tag)
    if start < 0:
        return None
    start += len(open_tag)
    end = body.find(close_tag, start)
    if end < 0:
        return None
    value = body[start:end]
    if "\n" in value or "\r" in value:
        return None
    return value


def parse_envelope(body: str) -> AttachmentRef | None:
    index = _tag_value(body, INDEX_TAG)
    name = _tag_value(body, NAME_TAG)
    if index is None or name is None:
        return None
    if not (index.isascii() and index.isdigit()):
        return None
    return AttachmentRef(index=int(index), name=name)


def decode_message(message: str) -> DecodedMessage:
    """
    Split a stored message into its display text and attachment list.

    Every envelope is removed from the display text, including malformed
    ones; only envelopes with a valid index and name are listed.  The file
    content is not parsed.
    """
    if not isinstance(message, str):
        return DecodedMessage(display_text=message, attachments=[])

    pieces: list[str] = []
    attachments: list[AttachmentRef] = []
    pos = 0
    for start, end, body in iter_envelopes(message):
        pieces.append(message[pos:start])
        ref = parse_envelope(body)
        if ref is None:
            l.debug(f"Dropping malformed attachment envelope at offset {start}")
        else:
            attachments.append(ref)
        pos = end
    pieces.append(message[pos:])

    return DecodedMessage(display_text="".join(pieces).strip(), attachments=attachments)


def strip_envelopes(message: str) -> str:
    return decode_message(message).display_text
