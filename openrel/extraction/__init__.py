"""Extraction package exports."""

from openrel.extraction.confidence import LogisticConfidenceScorer
from openrel.extraction.dependency_extractor import DependencyPatternExtractor
from openrel.extraction.models import Extraction, ExtractionCandidate, Part, ScoredExtraction

__all__ = [
    "Part",
    "Extraction",
    "ExtractionCandidate",
    "ScoredExtraction",
    "DependencyPatternExtractor",
    "LogisticConfidenceScorer",
]
