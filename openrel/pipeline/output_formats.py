"""Renderers for scored extractions."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from openrel.errors import ConfigurationError
from openrel.extraction.models import ExtractionCandidate

NO_EXTRACTIONS = "No extractions found."

TABBED_COLUMNS = (
    "confidence",
    "arg1",
    "rel",
    "arg2",
    "enabler",
    "attribution",
    "text",
    "pattern",
    "dependencies",
)
TABBED_SINGLE_COLUMNS = (
    "confidence",
    "extraction",
    "enabler",
    "attribution",
    "text",
    "pattern",
    "dependencies",
)


def format_confidence(confidence: float) -> str:
    """Three decimal places, rounded to nearest."""
    return f"{confidence:.3f}"


class OutputFormat(str, Enum):
    """Supported output formats, selected by name."""

    INTERACTIVE = "interactive"
    TABBED = "tabbed"
    TABBED_SINGLE = "tabbedsingle"
    SERIALIZED = "serialized"

    @classmethod
    def parse(cls, name: str) -> "OutputFormat":
        try:
            return cls(name.strip().lower())
        except ValueError:
            choices = ", ".join(f.value for f in cls)
            raise ConfigurationError(f"Unknown output format '{name}' (expected one of: {choices})") from None

    @property
    def header(self) -> Optional[str]:
        if self is OutputFormat.TABBED:
            return "\t".join(TABBED_COLUMNS)
        if self is OutputFormat.TABBED_SINGLE:
            return "\t".join(TABBED_SINGLE_COLUMNS)
        return None

    def format(self, confidence: float, candidate: ExtractionCandidate) -> str:
        extraction = candidate.extraction
        conf = format_confidence(confidence)
        enabler = extraction.enabler.text if extraction.enabler is not None else ""
        attribution = extraction.attribution.text if extraction.attribution is not None else ""

        if self is OutputFormat.INTERACTIVE:
            return f"{conf}: {extraction}"
        if self is OutputFormat.TABBED:
            return "\t".join(
                [
                    conf,
                    extraction.arg1.text,
                    extraction.rel.text,
                    extraction.arg2.text,
                    enabler,
                    attribution,
                    candidate.text,
                    candidate.pattern,
                    candidate.serialized_graph,
                ]
            )
        if self is OutputFormat.TABBED_SINGLE:
            return "\t".join(
                [
                    conf,
                    str(extraction),
                    enabler,
                    attribution,
                    candidate.text,
                    candidate.pattern,
                    candidate.serialized_graph,
                ]
            )
        if self is OutputFormat.SERIALIZED:
            return f"{conf}\t{extraction}\t{candidate.serialize()}"
        raise ValueError(f"Unhandled output format: {self!r}")
