"""Shared helpers for building parsed sentences without a spaCy model."""

from __future__ import annotations

from typing import Sequence, Tuple

from openrel.extraction.models import Extraction, ExtractionCandidate, Part
from openrel.parsing.graph import DependencyGraph, DependencyToken

# (text, lemma, pos, dep, head)
TokenSpec = Tuple[str, str, str, str, int]

PUNCTUATION = {".", ",", "!", "?", ";", ":"}


def build_graph(specs: Sequence[TokenSpec]) -> DependencyGraph:
    tokens = []
    offset = 0
    for i, (text, lemma, pos, dep, head) in enumerate(specs):
        is_last = i == len(specs) - 1
        whitespace = "" if is_last or specs[i + 1][0] in PUNCTUATION else " "
        tokens.append(
            DependencyToken(
                index=i,
                text=text,
                lemma=lemma,
                pos=pos,
                dep=dep,
                head=head,
                offset=offset,
                whitespace=whitespace,
            )
        )
        offset += len(text) + len(whitespace)
    text = "".join(t.text + t.whitespace for t in tokens)
    return DependencyGraph(text=text, tokens=tuple(tokens))


def make_candidate(
    arg1: str,
    rel: str,
    arg2: str,
    *,
    sentence: str = "",
    pattern: str = "test-pattern",
) -> ExtractionCandidate:
    return ExtractionCandidate(
        extraction=Extraction(arg1=Part(text=arg1), rel=Part(text=rel), arg2=Part(text=arg2)),
        pattern=pattern,
        graph=DependencyGraph(text=sentence),
    )


CAT_SAT = [
    ("The", "the", "DET", "det", 1),
    ("cat", "cat", "NOUN", "nsubj", 2),
    ("sat", "sit", "VERB", "ROOT", 2),
    ("on", "on", "ADP", "prep", 2),
    ("the", "the", "DET", "det", 5),
    ("mat", "mat", "NOUN", "pobj", 3),
    (".", ".", "PUNCT", "punct", 2),
]

COMPUTER_CONTROLS = [
    ("The", "the", "DET", "det", 2),
    ("main", "main", "ADJ", "amod", 2),
    ("computer", "computer", "NOUN", "nsubj", 3),
    ("controls", "control", "VERB", "ROOT", 3),
    ("the", "the", "DET", "det", 5),
    ("thrusters", "thruster", "NOUN", "dobj", 3),
    (".", ".", "PUNCT", "punct", 3),
]

OBAMA_PRESIDENT = [
    ("Obama", "Obama", "PROPN", "nsubj", 1),
    ("is", "be", "AUX", "ROOT", 1),
    ("president", "president", "NOUN", "attr", 1),
    ("of", "of", "ADP", "prep", 2),
    ("the", "the", "DET", "det", 6),
    ("United", "United", "PROPN", "compound", 6),
    ("States", "States", "PROPN", "pobj", 3),
    (".", ".", "PUNCT", "punct", 1),
]

IF_PRICES_FALL = [
    ("If", "if", "SCONJ", "mark", 2),
    ("prices", "price", "NOUN", "nsubj", 2),
    ("fall", "fall", "VERB", "advcl", 5),
    (",", ",", "PUNCT", "punct", 5),
    ("investors", "investor", "NOUN", "nsubj", 5),
    ("buy", "buy", "VERB", "ROOT", 5),
    ("stocks", "stock", "NOUN", "dobj", 5),
    (".", ".", "PUNCT", "punct", 5),
]

ANALYSTS_SAID = [
    ("Analysts", "analyst", "NOUN", "nsubj", 1),
    ("said", "say", "VERB", "ROOT", 1),
    ("that", "that", "SCONJ", "mark", 5),
    ("the", "the", "DET", "det", 4),
    ("company", "company", "NOUN", "nsubj", 5),
    ("acquired", "acquire", "VERB", "ccomp", 1),
    ("the", "the", "DET", "det", 7),
    ("startup", "startup", "NOUN", "dobj", 5),
    (".", ".", "PUNCT", "punct", 1),
]
