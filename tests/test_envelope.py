"""Encoding attachments into a message body and decoding them back out."""

from __future__ import annotations

import pytest

from services.envelope import (
    build_envelope,
    build_error_envelope,
    decode_message,
    encode_message,
    iter_envelopes,
    strip_envelopes,
)
from services.engine import ExtractionEngine
from services.message import AttachmentRef, FileHandle, FileSource


class TestBuildEnvelope:
    def test_exact_layout(self) -> None:
        assert build_envelope(2, "a.txt", "hello") == (
            "\n\n<ATTACHMENT_FILE>\n"
            "<FILE_INDEX>2</FILE_INDEX>\n"
            "<FILE_NAME>a.txt</FILE_NAME>\n"
            "<FILE_CONTENT>\nhello\n</FILE_CONTENT>\n"
            "</ATTACHMENT_FILE>\n"
        )

    def test_error_envelope(self) -> None:
        env = build_error_envelope(0, "gone.txt", FileNotFoundError("No such file"))
        assert "<FILE_CONTENT>\nError reading file: No such file\n</FILE_CONTENT>" in env


class TestEncodeMessage:
    async def test_typed_text_first_then_envelopes(self, engine: ExtractionEngine) -> None:
        files = [FileHandle("a.txt", b"hello"), FileHandle("b.csv", b"x,y")]
        message = await encode_message("Look at these", files, engine)
        assert message == (
            "Look at these"
            + build_envelope(0, "a.txt", "hello")
            + build_envelope(1, "b.csv", "x,y")
        )

    async def test_no_files_leaves_text_unchanged(self, engine: ExtractionEngine) -> None:
        assert await encode_message("  just text ", [], engine) == "  just text "

    async def test_unreadable_file_gets_error_envelope(self, engine: ExtractionEngine, tmp_path) -> None:
        ok = tmp_path / "ok.txt"
        ok.write_text("fine")
        files = [FileSource(str(tmp_path / "missing.txt")), FileSource(str(ok))]
        message = await encode_message("", files, engine)

        bodies = [body for _, _, body in iter_envelopes(message)]
        assert len(bodies) == 2
        assert "<FILE_NAME>missing.txt</FILE_NAME>" in bodies[0]
        assert "<FILE_CONTENT>\nError reading file: " in bodies[0]
        assert "<FILE_CONTENT>\nfine\n</FILE_CONTENT>" in bodies[1]

    async def test_oversized_file_gets_error_envelope(self, engine: ExtractionEngine) -> None:
        message = await encode_message("", [FileHandle("big.txt", b"x" * 11)], engine, max_bytes=10)
        assert "Error reading file: file is 11 bytes, limit is 10" in message

    async def test_order_follows_selection_not_size(self, engine: ExtractionEngine) -> None:
        files = [FileHandle("big.txt", b"x" * 100_000), FileHandle("small.txt", b"y")]
        decoded = decode_message(await encode_message("", files, engine))
        assert decoded.attachments == [AttachmentRef(0, "big.txt"), AttachmentRef(1, "small.txt")]


class TestDecodeMessage:
    def test_no_envelopes(self) -> None:
        decoded = decode_message("  hello there \n")
        assert decoded.display_text == "hello there"
        assert decoded.attachments == []

    def test_text_around_envelopes_is_kept(self) -> None:
        message = "before" + build_envelope(0, "a.txt", "A") + "middle" + build_envelope(1, "b.txt", "B") + "\nafter"
        decoded = decode_message(message)
        assert decoded.display_text == "before\n\n\nmiddle\n\n\n\nafter"
        assert [a.name for a in decoded.attachments] == ["a.txt", "b.txt"]

    def test_missing_name_close_tag(self) -> None:
        message = (
            "hi\n\n<ATTACHMENT_FILE>\n<FILE_INDEX>0</FILE_INDEX>\n"
            "<FILE_NAME>broken.txt\n<FILE_CONTENT>\nx\n</FILE_CONTENT>\n</ATTACHMENT_FILE>\n"
        )
        decoded = decode_message(message)
        assert decoded.attachments == []
        assert decoded.display_text == "hi"

    def test_missing_index(self) -> None:
        message = "hi<ATTACHMENT_FILE><FILE_NAME>a.txt</FILE_NAME></ATTACHMENT_FILE>"
        assert decode_message(message).attachments == []
        assert decode_message(message).display_text == "hi"

    def test_non_numeric_index(self) -> None:
        message = "<ATTACHMENT_FILE><FILE_INDEX>one</FILE_INDEX><FILE_NAME>a</FILE_NAME></ATTACHMENT_FILE>"
        assert decode_message(message).attachments == []

    @pytest.mark.parametrize("index", [" 1 ", "+1", "1_0", "-1", "\u00b2", ""])
    def test_index_must_be_plain_digits(self, index: str) -> None:
        message = f"<ATTACHMENT_FILE><FILE_INDEX>{index}</FILE_INDEX><FILE_NAME>a</FILE_NAME></ATTACHMENT_FILE>"
        assert decode_message(message).attachments == []

    def test_malformed_envelope_does_not_hide_valid_ones(self) -> None:
        message = (
            "<ATTACHMENT_FILE>garbage</ATTACHMENT_FILE>"
            + build_envelope(1, "good.txt", "ok")
        )
        assert decode_message(message).attachments == [AttachmentRef(1, "good.txt")]

    def test_unterminated_envelope_stays_in_text(self) -> None:
        message = "text" + build_envelope(0, "a.txt", "A") + "\n<ATTACHMENT_FILE>\n<FILE_INDEX>1</FILE_INDEX>"
        decoded = decode_message(message)
        assert decoded.attachments == [AttachmentRef(0, "a.txt")]
        assert decoded.display_text == "text\n\n\n\n<ATTACHMENT_FILE>\n<FILE_INDEX>1</FILE_INDEX>"

    def test_first_index_and_name_win(self) -> None:
        content = "<FILE_INDEX>9</FILE_INDEX>\n<FILE_NAME>fake.txt</FILE_NAME>"
        decoded = decode_message(build_envelope(0, "real.txt", content))
        assert decoded.attachments == [AttachmentRef(0, "real.txt")]

    def test_nested_open_tag_closes_at_first_close(self) -> None:
        message = (
            "<ATTACHMENT_FILE><FILE_INDEX>0</FILE_INDEX><FILE_NAME>outer</FILE_NAME>"
            "<ATTACHMENT_FILE>inner</ATTACHMENT_FILE>tail</ATTACHMENT_FILE>"
        )
        decoded = decode_message(message)
        assert decoded.attachments == [AttachmentRef(0, "outer")]
        assert decoded.display_text == "tail</ATTACHMENT_FILE>"

    def test_name_with_spaces_and_unicode(self) -> None:
        decoded = decode_message(build_envelope(3, "Q3 résumé (final).docx", ""))
        assert decoded.attachments == [AttachmentRef(3, "Q3 résumé (final).docx")]

    def test_decode_is_idempotent(self) -> None:
        message = "hello" + build_envelope(0, "a.txt", "A")
        assert decode_message(message) == decode_message(message)
        assert decode_message(decode_message(message).display_text).display_text == "hello"

    def test_non_string_passthrough(self) -> None:
        decoded = decode_message(None)  # type: ignore[arg-type]
        assert decoded.display_text is None
        assert decoded.attachments == []

    def test_strip_envelopes(self) -> None:
        assert strip_envelopes("  hi" + build_envelope(0, "a", "b")) == "hi"

    def test_to_dict(self) -> None:
        decoded = decode_message("x" + build_envelope(0, "a.txt", ""))
        assert decoded.to_dict() == {"display_text": "x", "attachments": [{"index": 0, "name": "a.txt"}]}


class TestRoundTrip:
    async def test_two_files(self, engine: ExtractionEngine) -> None:
        files = [FileHandle("a.txt", b"hello"), FileHandle("b.csv", b"x,y")]
        decoded = decode_message(await encode_message("Compare these", files, engine))
        assert decoded.attachments == [AttachmentRef(0, "a.txt"), AttachmentRef(1, "b.csv")]
        assert decoded.display_text == "Compare these"

    @pytest.mark.parametrize("count", [1, 3, 12])
    async def test_indices_are_contiguous(self, engine: ExtractionEngine, count: int) -> None:
        files = [FileHandle(f"f{i}.png", b"") for i in range(count)]
        decoded = decode_message(await encode_message("", files, engine))
        assert [a.index for a in decoded.attachments] == list(range(count))
        assert [a.name for a in decoded.attachments] == [f.name for f in files]

    async def test_line_break_in_file_name(self, engine: ExtractionEngine) -> None:
        files = [FileHandle("a\nb.txt", b"x"), FileHandle("c\r\nd.txt", b"y")]
        decoded = decode_message(await encode_message("", files, engine))
        assert decoded.attachments == [AttachmentRef(0, "a b.txt"), AttachmentRef(1, "c d.txt")]

    async def test_ascii_content_survives(self, engine: ExtractionEngine) -> None:
        content = "".join(chr(c) for c in range(0x20, 0x7F)) + "\nsecond line\n"
        message = await encode_message("", [FileHandle("all.txt", content.encode())], engine)
        body = next(iter_envelopes(message))[2]
        assert f"<FILE_CONTENT>\n{content}\n</FILE_CONTENT>" in body

    async def test_pdf_parse_failure_scenario(self, engine: ExtractionEngine, monkeypatch) -> None:
        def broken_reader(*args, **kwargs):
            raise ValueError("corrupt stream")

        monkeypatch.setattr("extractors.pdf.PdfReader", broken_reader)
        message = await encode_message("Please summarise", [FileHandle("report.pdf", b"%PDF-1.7")], engine)

        assert "<FILE_CONTENT>\n[Error parsing PDF: corrupt stream]\n</FILE_CONTENT>" in message
        decoded = decode_message(message)
        assert decoded.attachments == [AttachmentRef(0, "report.pdf")]
        assert decoded.display_text == "Please summarise"
