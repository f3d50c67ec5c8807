"""Dependency graph representation shared by parsers and extractors."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
from spacy.tokens import Doc
from spacy.vocab import Vocab

from openrel.errors import GraphFormatError


class DependencyToken(BaseModel):
    """A single token of a parsed sentence."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    index: int
    text: str
    lemma: str = ""
    pos: str = ""
    tag: str = ""
    dep: str = ""
    # The root token is its own head.
    head: int
    offset: int = 0
    whitespace: str = " "


class DependencyGraph(BaseModel):
    """A sentence and its dependency parse.

    The serialized form is single-line JSON so it can be embedded in tab separated
    output and read back with ``--dependencies``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str
    tokens: Tuple[DependencyToken, ...] = ()

    @model_validator(mode="after")
    def _check_structure(self) -> "DependencyGraph":
        size = len(self.tokens)
        for position, token in enumerate(self.tokens):
            if token.index != position:
                raise ValueError(f"token {token.text!r} has index {token.index}, expected {position}")
            if not 0 <= token.head < size:
                raise ValueError(f"token {token.text!r} has out of range head {token.head}")
        return self

    def __len__(self) -> int:
        return len(self.tokens)

    def serialize(self) -> str:
        return self.model_dump_json()

    @classmethod
    def deserialize(cls, data: str) -> "DependencyGraph":
        try:
            return cls.model_validate_json(data)
        except ValidationError as exc:
            raise GraphFormatError(f"Malformed dependency graph: {exc.error_count()} error(s)") from exc

    def children(self, index: int) -> List[DependencyToken]:
        return [t for t in self.tokens if t.head == index and t.index != index]

    def subtree(self, index: int) -> List[int]:
        """Indices of ``index`` and all of its descendants, in sentence order."""
        found = {index}
        frontier = [index]
        while frontier:
            current = frontier.pop()
            for child in self.children(current):
                if child.index not in found:
                    found.add(child.index)
                    frontier.append(child.index)
        return sorted(found)

    def span_text(self, indices: Iterable[int]) -> str:
        ordered = sorted(set(indices))
        parts = []
        for position, index in enumerate(ordered):
            token = self.tokens[index]
            parts.append(token.text)
            if position < len(ordered) - 1:
                # Adjacent tokens keep their original spacing, gaps become one space.
                adjacent = ordered[position + 1] == index + 1
                parts.append(token.whitespace if adjacent else " ")
        return "".join(parts).strip()

    def to_doc(self, vocab: Vocab) -> Doc:
        """Build a spaCy ``Doc`` carrying this graph's annotation."""
        tokens = self.tokens
        pos = [t.pos for t in tokens] if all(t.pos for t in tokens) else None
        tags = [t.tag for t in tokens] if all(t.tag for t in tokens) else None
        return Doc(
            vocab,
            words=[t.text for t in tokens],
            spaces=[bool(t.whitespace) for t in tokens],
            heads=[t.head for t in tokens],
            deps=[t.dep for t in tokens],
            pos=pos,
            tags=tags,
            lemmas=[t.lemma or t.text.lower() for t in tokens],
        )

    @classmethod
    def from_doc(cls, doc: Doc) -> "DependencyGraph":
        return cls(
            text=doc.text,
            tokens=tuple(
                DependencyToken(
                    index=token.i,
                    text=token.text,
                    lemma=token.lemma_,
                    pos=token.pos_,
                    tag=token.tag_,
                    dep=token.dep_,
                    head=token.head.i,
                    offset=token.idx,
                    whitespace=token.whitespace_,
                )
                for token in doc
            ),
        )
