"""
Extractor registry and file classification.

Each extractor module calls ``register()`` at import time.  The extraction
engine auto-discovers all extractor modules via ``pkgutil.iter_modules`` and
then checks that every ``FileCategory`` has exactly one extractor, so a new
category without an extractor fails at engine construction instead of
silently falling through.
"""

from __future__ import annotations

from enum import Enum

import services.util as u


class FileCategory(str, Enum):
    TEXT = "text"
    PDF = "pdf"
    WORD = "word"
    EXCEL = "excel"
    POWERPOINT = "powerpoint"
    IMAGE = "image"
    OTHER = "other"


TEXT_EXTENSIONS = frozenset({
    "txt", "json", "md", "js", "ts", "jsx", "tsx", "py", "java", "c", "cpp",
    "cs", "html", "css", "sql", "xml", "yml", "yaml", "sh", "log", "csv", "ini",
})

# Checked in this order; first match wins.
_EXTENSIONS: list[tuple[FileCategory, frozenset[str]]] = [
    (FileCategory.TEXT,       TEXT_EXTENSIONS),
    (FileCategory.PDF,        frozenset({"pdf"})),
    (FileCategory.WORD,       frozenset({"doc", "docx"})),
    (FileCategory.EXCEL,      frozenset({"xls", "xlsx"})),
    (FileCategory.POWERPOINT, frozenset({"ppt", "pptx"})),
    (FileCategory.IMAGE,      frozenset({"jpg", "jpeg", "png", "gif", "bmp", "webp", "svg"})),
]

# Human-readable label per category, used in log lines.
LABELS = {
    FileCategory.TEXT:       "text",
    FileCategory.PDF:        "PDF",
    FileCategory.WORD:       "Word",
    FileCategory.EXCEL:      "Excel",
    FileCategory.POWERPOINT: "PowerPoint",
    FileCategory.IMAGE:      "image",
    FileCategory.OTHER:      "unknown",
}


def classify(name: str, extra_text_extensions=()) -> FileCategory:
    """Map a file name to its ``FileCategory`` by lower-cased extension."""
    ext = u.get_extension(name)
    if ext in extra_text_extensions:
        return FileCategory.TEXT
    for category, extensions in _EXTENSIONS:
        if ext in extensions:
            return category
    return FileCategory.OTHER


_REGISTRY: dict[FileCategory, type] = {}


def register(category: FileCategory, extractor_cls: type) -> None:
    """Register the extractor class that handles *category*.

    Args:
        category:      The ``FileCategory`` the extractor handles.
        extractor_cls: ``BaseExtractor`` subclass to instantiate.
    """
    if category in _REGISTRY and _REGISTRY[category] is not extractor_cls:
        raise ValueError(
            f"{category.value!r} already handled by {_REGISTRY[category].__name__}"
        )
    _REGISTRY[category] = extractor_cls


def all_extractors() -> dict[FileCategory, type]:
    """Return a snapshot of ``{category: extractor_cls}``."""
    return dict(_REGISTRY)


def missing_categories() -> list[FileCategory]:
    return [c for c in FileCategory if c not in _REGISTRY]
