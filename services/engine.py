import asyncio
import importlib
import pkgutil

import services.logger as log
from services.error import raise_and_log
from services.config_schema import ExtractionConfig
from services.message import FileHandle

import extractors as _extractors_pkg
from extractors import BaseExtractor
from extractors.registry import LABELS, FileCategory, all_extractors, classify, missing_categories

l = log.get_logger()


def _load_all_extractors() -> None:
    """Import every module in the ``extractors/`` package.

    Each extractor module calls ``extractors.registry.register()`` at import
    time, so this one pass is enough to populate the registry.  The
    ``registry`` module itself is skipped to avoid a circular bootstrap.
    """
    for _, mod_name, _ in pkgutil.iter_modules(_extractors_pkg.__path__):
        if mod_name != "registry":
            importlib.import_module(f"extractors.{mod_name}")


class ExtractionEngine:
    """
    Turns a ``FileHandle`` into the text sent to the model.

    One extractor instance per ``FileCategory`` is created from *config* at
    construction.  ``extract`` never raises for bad file content: every
    failure is returned as a bracketed placeholder string.
    """

    def __init__(self, config: ExtractionConfig | None = None):
        self.config = config or ExtractionConfig()

        _load_all_extractors()
        missing = missing_categories()
        if missing:
            raise_and_log(
                "No extractor registered for: " + ", ".join(c.value for c in missing),
                RuntimeError,
            )

        self._extractors: dict[FileCategory, BaseExtractor] = {
            category: cls(self.config) for category, cls in all_extractors().items()
        }

    def classify(self, name: str) -> FileCategory:
        return classify(name, self.config.extra_text_extensions)

    def extract_sync(self, file: FileHandle) -> str:
        """Blocking variant of ``extract`` without the timeout guard."""
        category = self.classify(file.name)
        l.debug(f"Extracting {file.name!r} ({file.size} bytes) as {LABELS[category]}")
        try:
            return self._extractors[category].extract(file)
        except Exception as e:
            l.error(f"{type(self._extractors[category]).__name__} crashed on {file.name!r}: {e}", exc_info=True)
            return f"[Binary or unsupported file: {file.name}]"

    async def extract(self, file: FileHandle) -> str:
        work = asyncio.to_thread(self.extract_sync, file)
        if not self.config.timeout:
            return await work
        try:
            return await asyncio.wait_for(work, self.config.timeout)
        except asyncio.TimeoutError:
            l.error(f"Extraction of {file.name!r} timed out after {self.config.timeout}s")
            return f"[Extraction timed out: {file.name}]"
