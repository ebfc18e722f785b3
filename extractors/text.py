# Plain-text extractor.
#
# Handles the text allow-list (source code, markup, config and log formats)
# and is also the default for unknown extensions: the bytes are decoded with
# the configured encoding and returned verbatim.  Bytes that do not decode
# yield a "[Binary or unsupported file: <name>]" placeholder.

import services.logger as log
from services.message import FileHandle
from extractors import BaseExtractor
from extractors.registry import FileCategory, register

l = log.get_logger()


class TextExtractor(BaseExtractor):

    def extract(self, file: FileHandle) -> str:
        try:
            return self.decode_strict(file)
        except UnicodeDecodeError as e:
            l.debug(f"Text decode failed for {file.name!r}: {e}")
            return f"[Binary or unsupported file: {file.name}]"


register(FileCategory.TEXT, TextExtractor)
register(FileCategory.OTHER, TextExtractor)
