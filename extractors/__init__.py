from abc import ABC, abstractmethod

from services.config_schema import ExtractionConfig
from services.message import FileHandle


class BaseExtractor(ABC):
    """Abstract base class for all file-type extractors.

    ``extract`` is synchronous and may block on parsing; the engine runs it in
    a worker thread.  It must return a string for every input: format errors
    are turned into bracketed placeholder text, never raised.
    """

    def __init__(self, config: ExtractionConfig):
        self.config = config

    @abstractmethod
    def extract(self, file: FileHandle) -> str:
        """Return the text representation of *file*."""

    def decode_strict(self, file: FileHandle) -> str:
        return file.read_text(self.config.encoding)
