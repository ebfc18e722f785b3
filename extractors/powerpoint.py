# PowerPoint files get no structured extraction.  The binary probe returns
# the raw content only when it happens to be text-like (e.g. a mislabelled
# export); real .ppt/.pptx files end up as a placeholder.

from services.message import FileHandle
from services.probe import probe_binary
from extractors import BaseExtractor
from extractors.registry import FileCategory, register


class PowerPointExtractor(BaseExtractor):

    def extract(self, file: FileHandle) -> str:
        return probe_binary(
            file,
            f"[PowerPoint presentation: {file.name}]",
            self.config.encoding,
            self.config.binary_threshold,
        )


register(FileCategory.POWERPOINT, PowerPointExtractor)
