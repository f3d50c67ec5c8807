"""Confidence scoring for extraction candidates."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Dict

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from openrel.extraction.models import ExtractionCandidate

DEFAULT_CONFIDENCE_MODEL_PATH = (
    Path(__file__).resolve().parent.parent / "resources" / "confidence_model.yaml"
)

PRONOUNS = {"he", "she", "it", "they", "we", "i", "you", "this", "that", "these", "those"}


def candidate_features(candidate: ExtractionCandidate) -> Dict[str, float]:
    """Feature map for a candidate.

    Lengths are token counts. The pattern id is one-hot as ``pattern=<name>``.
    """
    extraction = candidate.extraction
    return {
        "pattern_confidence": candidate.pattern_confidence,
        f"pattern={candidate.pattern}": 1.0,
        "has_enabler": float(extraction.enabler is not None),
        "has_attribution": float(extraction.attribution is not None),
        "arg1_length": float(len(extraction.arg1.indices)),
        "arg2_length": float(len(extraction.arg2.indices)),
        "rel_length": float(len(extraction.rel.indices)),
        "sentence_length": float(len(candidate.graph)),
        "arg1_is_pronoun": float(extraction.arg1.text.lower() in PRONOUNS),
    }


class LogisticModel(BaseModel):
    """Weights of a logistic confidence model."""

    model_config = ConfigDict(extra="forbid")

    intercept: float = 0.0
    weights: Dict[str, float] = Field(default_factory=dict)


class LogisticConfidenceScorer:
    """Scores candidates with ``sigmoid(intercept + w . features)``."""

    def __init__(self, model: LogisticModel) -> None:
        self.model = model

    @classmethod
    def from_yaml(cls, path: str | Path = DEFAULT_CONFIDENCE_MODEL_PATH) -> "LogisticConfidenceScorer":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Confidence model not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Confidence model root must be a mapping/dict: {path}")

        model = LogisticModel(**data)
        logger.info(f"Loaded confidence model with {len(model.weights)} weights", path=str(path))
        return cls(model)

    def score(self, candidate: ExtractionCandidate) -> float:
        weights = self.model.weights
        z = self.model.intercept + sum(
            weights.get(name, 0.0) * value for name, value in candidate_features(candidate).items()
        )
        return 1.0 / (1.0 + math.exp(-z))
