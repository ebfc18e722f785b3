# Images are never sent as text; the model only sees a placeholder naming
# the file.  The bytes are not inspected.

from services.message import FileHandle
from extractors import BaseExtractor
from extractors.registry import FileCategory, register


class ImageExtractor(BaseExtractor):

    def extract(self, file: FileHandle) -> str:
        return f"[Image file: {file.name}]"


register(FileCategory.IMAGE, ImageExtractor)
