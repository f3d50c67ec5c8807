"""Syntactic dependency-based relation extractor."""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import spacy
import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator
from spacy.matcher import DependencyMatcher
from spacy.vocab import Vocab

from openrel.extraction.models import Extraction, ExtractionCandidate, Part
from openrel.parsing.graph import DependencyGraph

DEFAULT_PATTERNS_PATH = Path(__file__).resolve().parent.parent / "resources" / "extraction_patterns.yaml"
DEFAULT_EXTRACTOR_THRESHOLD = 0.005

# Left-hand modifiers that belong to a noun phrase.
NOUN_PHRASE_DEPS = {"det", "amod", "compound", "poss", "nummod", "nmod", "quantmod", "case", "predet"}
RELATION_DEPS = {"aux", "auxpass", "neg", "prt"}
ENABLER_MARKERS = {"if", "when", "although", "because", "unless", "while", "after", "before", "since"}
ATTRIBUTION_VERBS = {
    "say",
    "believe",
    "report",
    "claim",
    "think",
    "state",
    "announce",
    "suggest",
    "argue",
    "know",
    "deny",
    "assume",
}


class PatternSpec(BaseModel):
    """One entry of the pattern model."""

    model_config = ConfigDict(extra="forbid")

    name: str
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    pattern: List[Dict[str, Any]]

    @field_validator("pattern")
    @classmethod
    def validate_anchors(cls, v: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        anchors = [node.get("RIGHT_ID") for node in v]
        if anchors[:1] != ["rel"]:
            raise ValueError("the first pattern node must be the 'rel' anchor")
        for required in ("arg1", "arg2"):
            if required not in anchors:
                raise ValueError(f"pattern is missing the '{required}' anchor")
        return v

    @property
    def anchors(self) -> List[str]:
        return [node["RIGHT_ID"] for node in self.pattern]


def load_patterns(path: str | Path) -> List[PatternSpec]:
    """Load and validate a YAML pattern model."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Pattern model not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict) or not isinstance(data.get("patterns"), list):
        raise ValueError(f"Pattern model must be a mapping with a 'patterns' list: {path}")

    return [PatternSpec(**entry) for entry in data["patterns"]]


class DependencyPatternExtractor:
    """Extracts (arg1; rel; arg2) tuples by matching dependency patterns.

    Graphs are turned back into spaCy ``Doc`` objects so the patterns can be run
    with spaCy's ``DependencyMatcher``. The extractor holds no per-sentence state
    and can be shared between threads.
    """

    def __init__(
        self,
        patterns_path: str | Path = DEFAULT_PATTERNS_PATH,
        *,
        threshold: float = DEFAULT_EXTRACTOR_THRESHOLD,
        vocab: Optional[Vocab] = None,
    ) -> None:
        self.patterns_path = Path(patterns_path)
        self.threshold = threshold
        self.vocab: Vocab = vocab or spacy.blank("en").vocab

        self.patterns: Dict[str, PatternSpec] = {}
        self._order: Dict[str, int] = {}
        self.matcher = DependencyMatcher(self.vocab, validate=True)
        self._register_patterns(load_patterns(self.patterns_path))

        logger.info(
            f"Initialized DependencyPatternExtractor with {len(self.patterns)} patterns",
            path=str(self.patterns_path),
            threshold=threshold,
        )

    def extract(self, graph: DependencyGraph) -> List[ExtractionCandidate]:
        """Extract candidates from a parsed sentence, in match order."""
        if len(graph) == 0:
            return []

        doc = graph.to_doc(self.vocab)
        matches = []
        for match_id, token_ids in self.matcher(doc):
            name = self.vocab.strings[match_id]
            matches.append((token_ids[0], self._order[name], list(token_ids), name))
        matches.sort(key=lambda m: (m[0], m[1], m[2]))

        candidates: List[ExtractionCandidate] = []
        seen: Set[Tuple[str, str, str]] = set()
        for _, _, token_ids, name in matches:
            spec = self.patterns[name]
            extraction = self._build_extraction(graph, dict(zip(spec.anchors, token_ids)))
            if extraction is None or extraction.triple in seen:
                continue
            seen.add(extraction.triple)
            candidates.append(
                ExtractionCandidate(
                    extraction=extraction,
                    pattern=name,
                    graph=graph,
                    pattern_confidence=spec.confidence,
                )
            )

        return candidates

    def _register_patterns(self, specs: Iterable[PatternSpec]) -> None:
        for spec in specs:
            if spec.confidence < self.threshold:
                logger.debug(f"Skipping pattern {spec.name} below threshold", confidence=spec.confidence)
                continue
            if spec.name in self.patterns:
                raise ValueError(f"Duplicate pattern name: {spec.name}")
            self.matcher.add(spec.name, [spec.pattern])
            self._order[spec.name] = len(self.patterns)
            self.patterns[spec.name] = spec

    def _build_extraction(self, graph: DependencyGraph, anchors: Dict[str, int]) -> Optional[Extraction]:
        reserved = set(anchors.values())
        rel_index = anchors["rel"]

        arg1 = self._noun_phrase(graph, anchors["arg1"], reserved)
        arg2 = self._noun_phrase(graph, anchors["arg2"], reserved)

        rel_indices = {index for anchor, index in anchors.items() if anchor.startswith("rel")}
        rel_indices.update(
            child.index for child in graph.children(rel_index) if child.dep in RELATION_DEPS
        )
        rel = Part(text=graph.span_text(rel_indices), indices=tuple(sorted(rel_indices)))

        if not arg1.text or not arg2.text or arg1.text.lower() == arg2.text.lower():
            return None

        return Extraction(
            arg1=arg1,
            rel=rel,
            arg2=arg2,
            enabler=self._enabler(graph, rel_index),
            attribution=self._attribution(graph, rel_index),
        )

    def _noun_phrase(self, graph: DependencyGraph, index: int, reserved: Set[int]) -> Part:
        """Expand a token to its noun phrase, with any "of" complements."""
        indices = {index}
        frontier = [index]
        while frontier:
            current = frontier.pop()
            for child in graph.children(current):
                if child.index in reserved or child.index in indices:
                    continue
                if child.dep in NOUN_PHRASE_DEPS:
                    indices.add(child.index)
                    frontier.append(child.index)
                elif child.dep == "prep" and child.text.lower() == "of":
                    for pobj in graph.children(child.index):
                        if pobj.dep == "pobj" and pobj.index not in reserved:
                            indices.update({child.index, pobj.index})
                            frontier.append(pobj.index)
        return Part(text=graph.span_text(indices), indices=tuple(sorted(indices)))

    def _enabler(self, graph: DependencyGraph, rel_index: int) -> Optional[Part]:
        for clause in graph.children(rel_index):
            if clause.dep != "advcl":
                continue
            markers = [c for c in graph.children(clause.index) if c.dep == "mark"]
            if any(m.text.lower() in ENABLER_MARKERS for m in markers):
                indices = graph.subtree(clause.index)
                return Part(text=graph.span_text(indices), indices=tuple(indices))
        return None

    def _attribution(self, graph: DependencyGraph, rel_index: int) -> Optional[Part]:
        token = graph.tokens[rel_index]
        if token.dep != "ccomp" or token.head == rel_index:
            return None
        governor = graph.tokens[token.head]
        if (governor.lemma or governor.text).lower() not in ATTRIBUTION_VERBS:
            return None
        subjects = [c for c in graph.children(governor.index) if c.dep == "nsubj"]
        if not subjects:
            return None
        subject = self._noun_phrase(graph, subjects[0].index, {governor.index})
        indices = set(subject.indices) | {governor.index}
        return Part(text=graph.span_text(indices), indices=tuple(sorted(indices)))
