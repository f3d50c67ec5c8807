from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from conftest import make_candidate

from openrel.extraction.confidence import (
    LogisticConfidenceScorer,
    LogisticModel,
    candidate_features,
)
from openrel.extraction.models import Extraction, ExtractionCandidate, Part
from openrel.parsing.graph import DependencyGraph


def _candidate(arg1: str = "The cat", enabler: str | None = None) -> ExtractionCandidate:
    return ExtractionCandidate(
        extraction=Extraction(
            arg1=Part(text=arg1, indices=(0, 1)),
            rel=Part(text="sat on", indices=(2, 3)),
            arg2=Part(text="the mat", indices=(4, 5)),
            enabler=Part(text=enabler) if enabler else None,
        ),
        pattern="subj-verb-prep-obj",
        graph=DependencyGraph(text="The cat sat on the mat."),
        pattern_confidence=0.55,
    )


def test_candidate_features() -> None:
    features = candidate_features(_candidate())

    assert features["pattern_confidence"] == pytest.approx(0.55)
    assert features["pattern=subj-verb-prep-obj"] == 1.0
    assert features["has_enabler"] == 0.0
    assert features["arg1_length"] == 2.0
    assert features["arg1_is_pronoun"] == 0.0


def test_zero_model_scores_one_half() -> None:
    scorer = LogisticConfidenceScorer(LogisticModel())

    assert scorer.score(make_candidate("a", "b", "c")) == pytest.approx(0.5)


def test_weights_apply_to_features() -> None:
    scorer = LogisticConfidenceScorer(LogisticModel(intercept=1.0, weights={"has_enabler": -2.0}))

    assert scorer.score(_candidate()) > 0.5
    assert scorer.score(_candidate(enabler="If it rains")) < 0.5


def test_default_model_scores_in_unit_interval() -> None:
    scorer = LogisticConfidenceScorer.from_yaml()

    plain = scorer.score(_candidate())
    pronoun = scorer.score(_candidate(arg1="it"))

    assert 0.0 < plain < 1.0
    assert pronoun < plain


def test_scores_are_deterministic() -> None:
    scorer = LogisticConfidenceScorer.from_yaml()
    candidate = _candidate()

    assert scorer.score(candidate) == scorer.score(candidate)


def test_from_yaml_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        LogisticConfidenceScorer.from_yaml(tmp_path / "missing.yaml")


def test_from_yaml_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "model.yaml"
    path.write_text(yaml.safe_dump([1, 2, 3]), encoding="utf-8")

    with pytest.raises(ValueError, match="root must be a mapping"):
        LogisticConfidenceScorer.from_yaml(path)
