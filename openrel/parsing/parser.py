"""spaCy-backed dependency parser."""

from __future__ import annotations

import spacy
from loguru import logger
from spacy.language import Language

from openrel.parsing.graph import DependencyGraph

DEFAULT_PARSER_MODEL = "en_core_web_sm"


class SpacyDependencyParser:
    """Parses sentences into :class:`DependencyGraph` objects.

    ``model`` is anything ``spacy.load`` accepts: an installed package name or a
    path to a model directory. Components the parser does not need are disabled.
    """

    def __init__(self, model: str = DEFAULT_PARSER_MODEL, nlp: Language | None = None) -> None:
        self.model = model
        self.nlp: Language = nlp if nlp is not None else self._load_model(model)
        if "parser" not in self.nlp.pipe_names:
            raise RuntimeError(f"spaCy pipeline '{model}' has no dependency parser")
        logger.debug("Initialized SpacyDependencyParser", model=model, pipes=self.nlp.pipe_names)

    def parse(self, sentence: str) -> DependencyGraph:
        return DependencyGraph.from_doc(self.nlp(sentence))

    def _load_model(self, model: str) -> Language:
        try:
            return spacy.load(model, disable=["ner", "textcat"])
        except OSError as exc:
            raise RuntimeError(
                f"spaCy model '{model}' is not installed. "
                f"Install it with `python -m spacy download {model}` or pass a model path."
            ) from exc
