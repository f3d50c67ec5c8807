"""Sentence segmentation of prose input."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator, List

import spacy
from spacy.language import Language

if TYPE_CHECKING:
    from openrel.interfaces import Segmenter


class SpacySentenceSegmenter:
    """Rule-based sentence splitter (spaCy ``sentencizer``)."""

    def __init__(self, nlp: Language | None = None) -> None:
        if nlp is None:
            nlp = spacy.blank("en")
            nlp.add_pipe("sentencizer")
        self.nlp = nlp

    def segment(self, text: str) -> Iterator[str]:
        for sent in self.nlp(text).sents:
            sentence = sent.text.strip()
            if sentence:
                yield sentence


def segment_lines(lines: Iterable[str], segmenter: Segmenter) -> Iterator[str]:
    """Re-segment a stream of lines into sentences.

    Consecutive non-blank lines form a paragraph; a blank line or the end of the
    stream hands the paragraph to the segmenter. A sentence may therefore span
    several lines and a line may hold several sentences.
    """
    paragraph: List[str] = []
    for line in lines:
        stripped = line.strip()
        if stripped:
            paragraph.append(stripped)
            continue
        if paragraph:
            yield from segmenter.segment(" ".join(paragraph))
            paragraph = []
    if paragraph:
        yield from segmenter.segment(" ".join(paragraph))
