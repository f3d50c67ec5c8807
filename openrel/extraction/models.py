"""Shared data models for extraction modules."""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from openrel.parsing.graph import DependencyGraph


class Part(BaseModel):
    """A span of an extraction, tied to the tokens it was built from."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str
    indices: Tuple[int, ...] = ()

    def __str__(self) -> str:
        return self.text


class Extraction(BaseModel):
    """A relational tuple: (arg1; rel; arg2) with optional context."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    arg1: Part
    rel: Part
    arg2: Part
    enabler: Optional[Part] = None
    attribution: Optional[Part] = None

    @property
    def triple(self) -> Tuple[str, str, str]:
        return (self.arg1.text, self.rel.text, self.arg2.text)

    def __str__(self) -> str:
        text = f"({self.arg1.text}; {self.rel.text}; {self.arg2.text})"
        if self.enabler is not None:
            text += f"[enabler={self.enabler.text}]"
        if self.attribution is not None:
            text += f"[attrib={self.attribution.text}]"
        return text


class ExtractionCandidate(BaseModel):
    """An extraction together with the pattern and sentence that produced it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    extraction: Extraction
    pattern: str
    graph: DependencyGraph
    pattern_confidence: float = 0.0

    @property
    def text(self) -> str:
        return self.graph.text

    @property
    def serialized_graph(self) -> str:
        return self.graph.serialize()

    def serialize(self) -> str:
        return self.model_dump_json()

    @classmethod
    def deserialize(cls, data: str) -> "ExtractionCandidate":
        return cls.model_validate_json(data)

    def __str__(self) -> str:
        return str(self.extraction)


class ScoredExtraction(BaseModel):
    """A candidate paired with its confidence."""

    model_config = ConfigDict(frozen=True)

    confidence: float = Field(default=0.0)
    candidate: ExtractionCandidate
