"""Sentence segmentation and dependency parsing."""

from openrel.parsing.graph import DependencyGraph, DependencyToken
from openrel.parsing.segmenter import SpacySentenceSegmenter, segment_lines

__all__ = [
    "DependencyGraph",
    "DependencyToken",
    "SpacySentenceSegmenter",
    "segment_lines",
]
