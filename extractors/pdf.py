# PDF extractor built on pypdf.
#
# Output layout, one block per page in page order:
#
#   --- Page 1 ---
#   <text fragments of page 1 joined with single spaces>
#   <blank line>
#   --- Page 2 ---
#   ...
#
# Any failure (truncated file, bad xref, encrypted without the right
# password) becomes "[Error parsing PDF: <reason>]".

import io

from pypdf import PdfReader

import services.logger as log
from services.message import FileHandle
from extractors import BaseExtractor
from extractors.registry import FileCategory, register

l = log.get_logger()


def error_message(e: Exception) -> str:
    return str(e) or type(e).__name__


class PdfExtractor(BaseExtractor):

    def extract(self, file: FileHandle) -> str:
        try:
            return self._extract_pages(file)
        except Exception as e:
            l.error(f"Error parsing PDF {file.name!r}: {e}")
            return f"[Error parsing PDF: {error_message(e)}]"

    def _open(self, file: FileHandle) -> PdfReader:
        opts = self.config.pdf
        reader = PdfReader(io.BytesIO(file.read_bytes()), strict=opts.strict)
        if reader.is_encrypted and opts.password:
            reader.decrypt(opts.password)
        return reader

    def _extract_pages(self, file: FileHandle) -> str:
        reader = self._open(file)
        blocks: list[str] = []
        for number, page in enumerate(reader.pages, start=1):
            items: list[str] = []

            def collect(text, cm, tm, font_dict, font_size):
                items.append(text)

            page.extract_text(visitor_text=collect)
            blocks.append(f"--- Page {number} ---\n{' '.join(items)}\n\n")
        l.debug(f"PDF {file.name!r}: extracted {len(blocks)} page(s)")
        return "".join(blocks)


register(FileCategory.PDF, PdfExtractor)
