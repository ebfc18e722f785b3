from __future__ import annotations

import codecs
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Reusable bool coercion: "true" / "1" / "yes" → True
# ---------------------------------------------------------------------------

def _coerce_bool(v: object) -> object:
    if isinstance(v, str):
        return v.lower() in ("true", "1", "yes")
    return v


CoercedBool = Annotated[bool, BeforeValidator(_coerce_bool)]


# ---------------------------------------------------------------------------
# Base for nested config blocks — unknown keys are a validation error
# ---------------------------------------------------------------------------

class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class PdfConfig(_Section):
    strict:   CoercedBool = False
    password: str         = ""


class ExtractionConfig(_Section):
    encoding:              str                               = "utf-8"
    extra_text_extensions: list[str]                         = Field(default_factory=list)
    binary_threshold:      Annotated[float, Field(gt=0, le=1)] = 0.1
    timeout:               Annotated[float, Field(ge=0)]       = 0
    pdf:                   PdfConfig                         = Field(default_factory=PdfConfig)

    @field_validator("extra_text_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value):
        if isinstance(value, str):
            value = value.replace(";", ",").split(",")
        if isinstance(value, list):
            return [str(v).strip().lstrip(".").lower() for v in value if str(v).strip()]
        return value

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError:
            raise ValueError(f"unknown text encoding: {value!r}")
        return value


# ---------------------------------------------------------------------------
# Top-level application config
# ---------------------------------------------------------------------------

class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_file_size: Annotated[int, Field(gt=0)] = 10 * 1024 * 1024
    extraction:    ExtractionConfig = Field(default_factory=ExtractionConfig)

    def sensitive_values(self) -> frozenset[str]:
        """Config values that must be masked in log output."""
        return frozenset(v for v in (self.extraction.pdf.password,) if v)
