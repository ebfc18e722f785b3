# Word extractor built on python-docx.
#
# Raw text only: body paragraphs followed by table cell text, one entry per
# line.  Formatting, images and headers/footers are ignored.  Legacy binary
# .doc files cannot be opened by python-docx and take the binary-probe path
# with a "[Word document: <name>]" placeholder, as does any .docx that fails
# to parse.

import io

from docx import Document

import services.logger as log
from services.message import FileHandle
from services.probe import probe_binary
from extractors import BaseExtractor
from extractors.registry import FileCategory, register

l = log.get_logger()


def _raw_text(data: bytes) -> str:
    doc = Document(io.BytesIO(data))
    lines = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                if cell.text:
                    lines.append(cell.text)
    return "\n".join(lines)


class WordExtractor(BaseExtractor):

    def extract(self, file: FileHandle) -> str:
        try:
            text = _raw_text(file.read_bytes())
        except Exception as e:
            l.warning(f"Word extraction failed for {file.name!r}, probing as text: {e}")
            return probe_binary(
                file,
                f"[Word document: {file.name}]",
                self.config.encoding,
                self.config.binary_threshold,
            )
        if not text.strip():
            return f"[Empty Word document: {file.name}]"
        return text


register(FileCategory.WORD, WordExtractor)
