from __future__ import annotations

import pytest
from conftest import CAT_SAT, build_graph, make_candidate
from pydantic import ValidationError

from openrel.extraction.models import Extraction, ExtractionCandidate, Part, ScoredExtraction


def test_extraction_display_text() -> None:
    extraction = Extraction(
        arg1=Part(text="investors"),
        rel=Part(text="buy"),
        arg2=Part(text="stocks"),
        enabler=Part(text="If prices fall"),
        attribution=Part(text="Analysts said"),
    )

    assert str(extraction) == "(investors; buy; stocks)[enabler=If prices fall][attrib=Analysts said]"
    assert extraction.triple == ("investors", "buy", "stocks")


def test_candidate_exposes_sentence_and_graph() -> None:
    graph = build_graph(CAT_SAT)
    candidate = ExtractionCandidate(
        extraction=Extraction(
            arg1=Part(text="The cat", indices=(0, 1)),
            rel=Part(text="sat on", indices=(2, 3)),
            arg2=Part(text="the mat", indices=(4, 5)),
        ),
        pattern="subj-verb-prep-obj",
        graph=graph,
        pattern_confidence=0.55,
    )

    assert candidate.text == "The cat sat on the mat."
    assert candidate.serialized_graph == graph.serialize()
    assert str(candidate) == "(The cat; sat on; the mat)"


def test_candidate_serialization_is_single_line() -> None:
    candidate = make_candidate("The cat", "sat on", "the mat", sentence="The cat sat on the mat.")

    data = candidate.serialize()

    assert "\n" not in data
    assert ExtractionCandidate.deserialize(data) == candidate


def test_models_are_immutable() -> None:
    candidate = make_candidate("a", "b", "c")
    scored = ScoredExtraction(confidence=0.5, candidate=candidate)

    with pytest.raises(ValidationError):
        scored.candidate.extraction.arg1.text = "changed"  # type: ignore[misc]
