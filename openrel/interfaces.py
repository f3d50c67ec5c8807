"""Contracts for the components the extraction pipeline orchestrates."""

from __future__ import annotations

from typing import Iterable, Protocol

from openrel.extraction.models import ExtractionCandidate
from openrel.parsing.graph import DependencyGraph


class Segmenter(Protocol):
    def segment(self, text: str) -> Iterable[str]: ...


class Parser(Protocol):
    def parse(self, sentence: str) -> DependencyGraph: ...


class Extractor(Protocol):
    def extract(self, graph: DependencyGraph) -> Iterable[ExtractionCandidate]: ...


class ConfidenceScorer(Protocol):
    def score(self, candidate: ExtractionCandidate) -> float: ...
