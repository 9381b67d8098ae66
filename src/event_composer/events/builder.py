"""Building SentenceAnalysis objects from parser output.

Helpers for turning CoNLL-U style parser output (1-indexed heads, 0 for
root) into the 0-indexed arcs and sentence flags the composer consumes.

Example:
    analysis = (
        SentenceAnalysisBuilder("John runs")
        .add_token("John", "John", "PROPN")
        .add_token("runs", "run", "VERB")
        .add_arc(1, 0, "nsubj")
        .build()
    )

    # Or from a CoNLL-U block
    analysis = parse_conllu_sentence(block)
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from ..exceptions import InvalidInputError
from .types import (
    DependencyArc,
    DependencyRelation,
    SentenceAnalysis,
    SentenceMetadata,
    TokenAnalysis,
    UPos,
)

logger = logging.getLogger(__name__)

NEGATION_LEMMAS = frozenset({"not", "n't", "never", "no"})
INTERROGATIVE_MOODS = frozenset({"Int", "Inter"})


class SentenceAnalysisBuilder:
    """Fluent builder for SentenceAnalysis."""

    def __init__(self, text: str = ""):
        self.text = text
        self.tokens: list[TokenAnalysis] = []
        self.arcs: list[DependencyArc] = []
        self.metadata: SentenceMetadata | None = None

    def add_token(
        self,
        text: str,
        lemma: str | None = None,
        pos: str | UPos | None = None,
        **kwargs: Any,
    ) -> SentenceAnalysisBuilder:
        """Append a token. Extra keyword arguments go to TokenAnalysis."""
        if not isinstance(pos, UPos):
            pos = UPos.parse(pos)
        self.tokens.append(TokenAnalysis(
            text=text,
            lemma=lemma if lemma is not None else text,
            pos=pos,
            id=kwargs.pop("id", len(self.tokens) + 1),
            **kwargs,
        ))
        return self

    def add_arc(
        self,
        head_idx: int,
        dependent_idx: int,
        relation: str | DependencyRelation,
        confidence: float = 1.0,
    ) -> SentenceAnalysisBuilder:
        """Append an arc between 0-indexed token positions."""
        if not isinstance(relation, DependencyRelation):
            relation = DependencyRelation.parse(relation)
        self.arcs.append(DependencyArc(head_idx, dependent_idx, relation, confidence))
        return self

    def with_metadata(self, metadata: SentenceMetadata | None = None, **flags: Any) -> SentenceAnalysisBuilder:
        """Set sentence flags, either as an object or as keyword flags."""
        self.metadata = metadata or SentenceMetadata(**flags)
        return self

    def build(self) -> SentenceAnalysis:
        """Assemble the sentence.

        Without explicit arcs, arcs are derived from token heads. Without
        explicit metadata, flags are derived from tokens and arcs.
        """
        arcs = self.arcs or arcs_from_heads(self.tokens)
        metadata = self.metadata or extract_metadata(self.tokens, arcs)
        text = self.text or " ".join(t.text for t in self.tokens)
        return SentenceAnalysis(text=text, tokens=self.tokens, dependencies=arcs, metadata=metadata)


# =============================================================================
# CoNLL-U Helpers
# =============================================================================


def arcs_from_heads(tokens: Iterable[TokenAnalysis]) -> list[DependencyArc]:
    """Convert 1-indexed parser heads into 0-indexed arcs.

    Root attachments (head 0), punctuation and tokens without a head are
    skipped. Tokens without an id take their position.
    """
    arcs = []
    for position, token in enumerate(tokens):
        if not token.head or token.deprel is None:
            continue
        relation = DependencyRelation.parse(token.deprel)
        if relation == DependencyRelation.PUNCTUATION:
            continue
        token_id = token.id if token.id is not None else position + 1
        arcs.append(DependencyArc(
            head_idx=token.head - 1,
            dependent_idx=token_id - 1,
            relation=relation,
            confidence=token.treebank_confidence if token.treebank_confidence is not None else 1.0,
        ))
    return arcs


def extract_metadata(
    tokens: Iterable[TokenAnalysis],
    arcs: Iterable[DependencyArc] = (),
    sentence_id: str | None = None,
) -> SentenceMetadata:
    """Derive sentence flags from morphological features and relations."""
    tokens = list(tokens)
    relations = {arc.relation for arc in arcs}
    token_relations = [
        DependencyRelation.parse(t.deprel) if t.deprel else None for t in tokens
    ]

    is_passive = (
        any(t.features.get("Voice") == "Pass" for t in tokens)
        or any(t.deprel is not None and t.deprel.endswith(":pass") for t in tokens)
        or bool(relations & {
            DependencyRelation.NOMINAL_SUBJECT_PASSIVE,
            DependencyRelation.AUXILIARY_PASSIVE,
        })
    )

    is_interrogative = any(
        t.features.get("Mood") in INTERROGATIVE_MOODS for t in tokens
    ) or (bool(tokens) and tokens[-1].text.endswith("?"))

    is_negated = any(
        relation in (DependencyRelation.ADVERBIAL_MODIFIER, DependencyRelation.NEGATION)
        and t.lemma.lower() in NEGATION_LEMMAS
        for t, relation in zip(tokens, token_relations)
    )

    is_imperative = any(t.features.get("Mood") == "Imp" for t in tokens)

    return SentenceMetadata(
        sentence_id=sentence_id,
        is_passive=is_passive,
        is_interrogative=is_interrogative,
        is_negated=is_negated,
        is_imperative=is_imperative,
    )


def _parse_features(field: str) -> Mapping[str, str]:
    if field in ("", "_"):
        return {}
    features = {}
    for pair in field.split("|"):
        key, sep, value = pair.partition("=")
        if sep:
            features[key] = value
    return features


def parse_conllu_sentence(block: str) -> SentenceAnalysis:
    """Parse one CoNLL-U sentence block.

    Comment lines supply ``sent_id`` and ``text``. Multiword token ranges
    (``1-2``) and empty nodes (``1.1``) are skipped.

    Raises:
        InvalidInputError: If a token line has fewer than 8 columns or a
            non-numeric id or head
    """
    comments: dict[str, str] = {}
    tokens: list[TokenAnalysis] = []

    for line_number, line in enumerate(block.strip().splitlines(), start=1):
        line = line.rstrip("\n")
        if not line.strip():
            continue
        if line.startswith("#"):
            key, sep, value = line[1:].partition("=")
            if sep:
                comments[key.strip()] = value.strip()
            continue

        fields = line.split("\t")
        if "-" in fields[0] or "." in fields[0]:
            continue
        if len(fields) < 8:
            raise InvalidInputError(
                f"Line {line_number}: expected at least 8 columns, got {len(fields)}"
            )
        try:
            token_id = int(fields[0])
            head = int(fields[6]) if fields[6] != "_" else None
        except ValueError as e:
            raise InvalidInputError(f"Line {line_number}: invalid token id or head", cause=e) from e

        tokens.append(TokenAnalysis(
            text=fields[1],
            lemma=fields[2] if fields[2] != "_" else fields[1],
            pos=UPos.parse(fields[3]),
            id=token_id,
            head=head,
            deprel=fields[7] if fields[7] != "_" else None,
            features=_parse_features(fields[5]),
        ))

    arcs = arcs_from_heads(tokens)
    text = comments.get("text") or " ".join(t.text for t in tokens)
    logger.debug(f"Parsed CoNLL-U sentence with {len(tokens)} tokens, {len(arcs)} arcs")
    return SentenceAnalysis(
        text=text,
        tokens=tokens,
        dependencies=arcs,
        metadata=extract_metadata(tokens, arcs, sentence_id=comments.get("sent_id")),
    )
