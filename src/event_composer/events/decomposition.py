"""Predicate decomposition into little-v operators.

Maps a predicate to a primitive event operator (Cause, Become, Do, Go, ...)
with a template of expected thematic roles. Causative predicates decompose
into a chain: Cause over a nested Become (or Have, Exist), stored in a
small arena of nodes addressed by integer id rather than as nested objects.

Evidence is consulted in priority order:
1. Semantic predicates of the verb's classes (e.g. cause, transfer, motion)
2. Verb-class id defaults (give-13.1 -> Cause)
3. Frame names (Motion -> Go, Statement -> Say)
4. Closed lemma cues (be -> Be, have -> Have)
5. Coverage of the roles the dependency arcs suggest, preferring Do

Unknown verbs never fail: they fall through to step 5 with low confidence.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from ..config import DecomposerConfig
from ..exceptions import DecompositionError
from ..lexicon.models import ThetaRole, VerbClass
from ..lexicon.resources import FrameAnalysis, VerbClassAnalysis
from .types import LittleVType

logger = logging.getLogger(__name__)

A = ThetaRole


# =============================================================================
# Arena
# =============================================================================


@dataclass(frozen=True)
class DecompositionNode:
    """One operator in a decomposition chain."""

    node_id: int
    little_v: LittleVType
    expected_roles: tuple[ThetaRole, ...]
    confidence: float
    source: str | None = None
    parent: int | None = None
    child: int | None = None


class DecompositionArena:
    """Append-only node storage with bounded nesting depth."""

    def __init__(self, max_depth: int = 3):
        self.max_depth = max_depth
        self._nodes: list[DecompositionNode] = []

    def add(
        self,
        little_v: LittleVType,
        expected_roles: Iterable[ThetaRole],
        confidence: float,
        source: str | None = None,
        parent: int | None = None,
    ) -> int:
        """Append a node, linking it under ``parent`` if given.

        Raises:
            DecompositionError: If the parent is unknown, already has a
                child, or the new node would exceed max_depth.
        """
        if parent is not None:
            parent_node = self.node(parent)
            if parent_node.child is not None:
                raise DecompositionError(f"Node {parent} already has a sub-event")
            if self.depth(parent) + 1 > self.max_depth:
                raise DecompositionError(
                    f"Decomposition deeper than {self.max_depth} levels"
                )

        node_id = len(self._nodes)
        self._nodes.append(DecompositionNode(
            node_id=node_id,
            little_v=little_v,
            expected_roles=tuple(expected_roles),
            confidence=confidence,
            source=source,
            parent=parent,
        ))
        if parent is not None:
            self._nodes[parent] = dataclasses.replace(self._nodes[parent], child=node_id)
        return node_id

    def node(self, node_id: int) -> DecompositionNode:
        if not 0 <= node_id < len(self._nodes):
            raise DecompositionError(f"No decomposition node {node_id}")
        return self._nodes[node_id]

    def depth(self, node_id: int) -> int:
        """Levels from the root to ``node_id`` inclusive."""
        depth = 1
        node = self.node(node_id)
        while node.parent is not None:
            depth += 1
            node = self._nodes[node.parent]
        return depth

    def freeze(self) -> tuple[DecompositionNode, ...]:
        return tuple(self._nodes)


@dataclass(frozen=True)
class DecomposedEvent:
    """Result of decomposing one predicate.

    ``nodes[root]`` is the primary operator; each node's ``child`` points at
    its sub-event.
    """

    nodes: tuple[DecompositionNode, ...]
    confidence: float
    verbnet_confidence: float | None = None
    sources: tuple[str, ...] = ()
    verb_class: str | None = None
    frame: str | None = None
    root: int = 0

    @property
    def primary(self) -> DecompositionNode:
        return self.nodes[self.root]

    @property
    def primary_type(self) -> LittleVType:
        return self.primary.little_v

    @property
    def expected_roles(self) -> tuple[ThetaRole, ...]:
        return self.primary.expected_roles

    @property
    def sub_event(self) -> DecompositionNode | None:
        child = self.primary.child
        return self.nodes[child] if child is not None else None

    def chain(self) -> Iterator[DecompositionNode]:
        """Nodes from the root down through sub-events."""
        node: DecompositionNode | None = self.primary
        while node is not None:
            yield node
            node = self.nodes[node.child] if node.child is not None else None

    @property
    def depth(self) -> int:
        return sum(1 for _ in self.chain())


# =============================================================================
# Templates
# =============================================================================


@dataclass(frozen=True)
class DecompositionTemplate:
    """Operator and role template for a semantic predicate."""

    primary_type: LittleVType
    expected_roles: tuple[ThetaRole, ...]
    base_confidence: float
    sub_event: DecompositionTemplate | None = None


def _template(
    little_v: LittleVType,
    roles: tuple[ThetaRole, ...],
    confidence: float,
    sub: DecompositionTemplate | None = None,
) -> DecompositionTemplate:
    return DecompositionTemplate(little_v, roles, confidence, sub)


_BECOME_THEME = _template(LittleVType.BECOME, (A.THEME,), 0.9)
_BECOME_PATIENT = _template(LittleVType.BECOME, (A.PATIENT,), 0.9)

PREDICATE_TEMPLATES: dict[str, DecompositionTemplate] = {
    # Causation and change of state
    "cause": _template(LittleVType.CAUSE, (A.AGENT, A.PATIENT), 0.95, _BECOME_THEME),
    "become": _template(LittleVType.BECOME, (A.THEME,), 0.9),
    "degradation_material_integrity": _template(LittleVType.BECOME, (A.PATIENT,), 0.85),
    "created": _template(
        LittleVType.CAUSE, (A.AGENT, A.THEME), 0.9,
        _template(LittleVType.EXIST, (A.THEME,), 0.9),
    ),
    "destroyed": _template(LittleVType.CAUSE, (A.AGENT, A.PATIENT), 0.9, _BECOME_PATIENT),
    # Motion
    "motion": _template(LittleVType.GO, (A.THEME, A.SOURCE, A.GOAL), 0.9),
    "path_rel": _template(LittleVType.GO, (A.THEME, A.GOAL), 0.85),
    # Possession
    "transfer": _template(
        LittleVType.CAUSE, (A.AGENT, A.THEME, A.RECIPIENT), 0.95,
        _template(LittleVType.HAVE, (A.RECIPIENT, A.THEME), 0.9),
    ),
    "has_possession": _template(LittleVType.HAVE, (A.AGENT, A.THEME), 0.9),
    # States
    "state": _template(LittleVType.BE, (A.THEME,), 0.85),
    "property": _template(LittleVType.BE, (A.THEME,), 0.85),
    # Activities
    "do": _template(LittleVType.DO, (A.AGENT,), 0.85),
    "manner": _template(LittleVType.DO, (A.AGENT,), 0.8),
    # Psychological
    "experience": _template(LittleVType.EXPERIENCE, (A.EXPERIENCER, A.STIMULUS), 0.9),
    "emotional_state": _template(LittleVType.EXPERIENCE, (A.EXPERIENCER, A.STIMULUS), 0.85),
    "perceive": _template(LittleVType.EXPERIENCE, (A.EXPERIENCER, A.STIMULUS), 0.85),
    # Communication
    "say": _template(LittleVType.SAY, (A.AGENT, A.RECIPIENT), 0.9),
    "communicate": _template(LittleVType.SAY, (A.AGENT, A.RECIPIENT), 0.85),
    "transfer_info": _template(LittleVType.SAY, (A.AGENT, A.RECIPIENT, A.THEME), 0.85),
    # Existence
    "exist": _template(LittleVType.EXIST, (A.THEME, A.LOCATION), 0.9),
    "location": _template(LittleVType.EXIST, (A.THEME, A.LOCATION), 0.85),
}

# Matched exactly first, then as a prefix of the class id
CLASS_DEFAULTS: dict[str, LittleVType] = {
    # Motion
    "run-51.3": LittleVType.DO,
    "slide-11.2": LittleVType.GO,
    "roll-51.3.1": LittleVType.GO,
    "escape-51.1": LittleVType.GO,
    "arrive-48.1.1": LittleVType.GO,
    # Transfer
    "give-13.1": LittleVType.CAUSE,
    "send-11.1": LittleVType.CAUSE,
    "obtain-13.5.2": LittleVType.CAUSE,
    "get-13.5.1": LittleVType.CAUSE,
    # Change of state
    "break-45.1": LittleVType.CAUSE,
    "destroy-44": LittleVType.CAUSE,
    "build-26.1": LittleVType.CAUSE,
    "create-26.4": LittleVType.CAUSE,
    "cut-21.1": LittleVType.CAUSE,
    # Psychological
    "admire-31.2": LittleVType.EXPERIENCE,
    "amuse-31.1": LittleVType.CAUSE,
    "fear-31.3": LittleVType.EXPERIENCE,
    "marvel-31.3": LittleVType.EXPERIENCE,
    # Communication
    "say-37.7": LittleVType.SAY,
    "tell-37.2": LittleVType.SAY,
    "complain-37.8": LittleVType.SAY,
    # Existence and appearance
    "exist-47.1": LittleVType.EXIST,
    "appear-48.1": LittleVType.BECOME,
    # Possession
    "own-100.1": LittleVType.HAVE,
    "contain-47.8": LittleVType.HAVE,
    # Consumption
    "eat-39.1": LittleVType.DO,
    "devour-39.4": LittleVType.CAUSE,
    # Placement
    "put-9.1": LittleVType.CAUSE,
    "spray-9.7": LittleVType.CAUSE,
}

FRAME_CUES: list[tuple[tuple[str, ...], LittleVType]] = [
    (("caus", "destroy", "break"), LittleVType.CAUSE),
    (("motion", "travel"), LittleVType.GO),
    (("statement", "communication", "tell"), LittleVType.SAY),
    (("experiencer", "emotion"), LittleVType.EXPERIENCE),
    (("possess", "have"), LittleVType.HAVE),
    (("exist", "presence"), LittleVType.EXIST),
]

LEMMA_CUES: dict[str, LittleVType] = {
    "be": LittleVType.BE, "seem": LittleVType.BE,
    "have": LittleVType.HAVE, "own": LittleVType.HAVE, "possess": LittleVType.HAVE,
    "go": LittleVType.GO, "come": LittleVType.GO, "move": LittleVType.GO,
    "travel": LittleVType.GO,
    "say": LittleVType.SAY, "tell": LittleVType.SAY, "speak": LittleVType.SAY,
    "ask": LittleVType.SAY,
    "feel": LittleVType.EXPERIENCE, "think": LittleVType.EXPERIENCE,
    "know": LittleVType.EXPERIENCE, "believe": LittleVType.EXPERIENCE,
    "exist": LittleVType.EXIST,
}


# =============================================================================
# Decomposer
# =============================================================================


class PredicateDecomposer:
    """Decomposes predicates into little-v operator chains.

    Stateless after construction; safe to share between threads.
    """

    def __init__(
        self,
        config: DecomposerConfig | None = None,
        use_framenet_fallback: bool = True,
    ):
        self.config = config or DecomposerConfig()
        self.use_framenet_fallback = use_framenet_fallback

    def decompose(
        self,
        lemma: str,
        verb_classes: VerbClassAnalysis | None = None,
        frames: FrameAnalysis | None = None,
        upstream_confidence: float = 1.0,
        evidence_roles: Iterable[ThetaRole] = (),
    ) -> DecomposedEvent:
        """Decompose a predicate.

        Args:
            lemma: Predicate lemma
            verb_classes: Verb-class lookup for the lemma, if any
            frames: Frame lookup for the lemma, if any
            upstream_confidence: Parser/lemmatizer confidence for the token
            evidence_roles: Roles suggested by the predicate's dependency arcs

        Returns:
            DecomposedEvent; never fails for unknown verbs.
        """
        if verb_classes is not None and verb_classes.verb_classes:
            result = self._from_semantic_predicates(verb_classes, upstream_confidence)
            if result is None:
                result = self._from_class_defaults(verb_classes, upstream_confidence)
            if result is not None:
                return result

        if self.use_framenet_fallback and frames is not None and frames.frames:
            return self._from_frames(frames, upstream_confidence)

        cue = LEMMA_CUES.get(lemma.lower())
        if cue is not None:
            return self._single(
                cue,
                cue.default_roles(),
                self.config.heuristic_confidence * upstream_confidence,
                source="Heuristic",
            )

        little_v = select_by_coverage(set(evidence_roles))
        logger.debug(f"No lexical evidence for '{lemma}', coverage selected {little_v.value}")
        return self._single(
            little_v,
            little_v.default_roles(),
            self.config.unknown_confidence * upstream_confidence,
            source="Coverage",
        )

    # =========================================================================
    # Evidence Sources
    # =========================================================================

    def _combine(self, evidence: float, upstream: float) -> float:
        w = self.config.evidence_weight
        return w * evidence + (1.0 - w) * upstream

    def _from_semantic_predicates(
        self, analysis: VerbClassAnalysis, upstream: float
    ) -> DecomposedEvent | None:
        for verb_class in analysis.verb_classes:
            for predicate in verb_class.semantic_predicates():
                template = PREDICATE_TEMPLATES.get(predicate.name)
                if template is not None:
                    return self._apply_template(template, verb_class, analysis, upstream)
        return None

    def _from_class_defaults(
        self, analysis: VerbClassAnalysis, upstream: float
    ) -> DecomposedEvent | None:
        for verb_class in analysis.verb_classes:
            little_v = CLASS_DEFAULTS.get(verb_class.id)
            if little_v is None:
                little_v = next(
                    (v for pattern, v in CLASS_DEFAULTS.items()
                     if verb_class.id.startswith(pattern)),
                    None,
                )
            if little_v is None:
                continue

            confidence = self.config.class_default_confidence * self._combine(
                analysis.confidence, upstream
            )
            return self._single(
                little_v,
                _class_roles(verb_class) or little_v.default_roles(),
                confidence,
                source=f"VerbNet-class:{verb_class.id}",
                verbnet_confidence=analysis.confidence,
                verb_class=verb_class.id,
            )
        return None

    def _from_frames(self, analysis: FrameAnalysis, upstream: float) -> DecomposedEvent:
        frame = analysis.frames[0]
        name = frame.name.lower()
        little_v = next(
            (v for cues, v in FRAME_CUES if any(cue in name for cue in cues)),
            LittleVType.DO,
        )
        confidence = self.config.frame_confidence * self._combine(
            analysis.confidence, upstream
        )
        decomposed = self._single(
            little_v,
            little_v.default_roles(),
            confidence,
            source=f"FrameNet:{frame.name}",
        )
        return dataclasses.replace(decomposed, frame=frame.name)

    def _apply_template(
        self,
        template: DecompositionTemplate,
        verb_class: VerbClass,
        analysis: VerbClassAnalysis,
        upstream: float,
    ) -> DecomposedEvent:
        arena = DecompositionArena(self.config.max_depth)
        combined = self._combine(analysis.confidence, upstream)
        confidence = template.base_confidence * combined

        parent = arena.add(
            template.primary_type,
            _class_roles(verb_class) or template.expected_roles,
            confidence,
            source=f"VerbNet:{verb_class.id}",
        )
        sources = [f"VerbNet:{verb_class.id}"]

        sub = template.sub_event
        while sub is not None:
            parent = arena.add(
                sub.primary_type,
                sub.expected_roles,
                sub.base_confidence * combined,
                source="VerbNet-sub",
                parent=parent,
            )
            sources.append("VerbNet-sub")
            sub = sub.sub_event

        return DecomposedEvent(
            nodes=arena.freeze(),
            confidence=confidence,
            verbnet_confidence=analysis.confidence,
            sources=tuple(dict.fromkeys(sources)),
            verb_class=verb_class.id,
        )

    def _single(
        self,
        little_v: LittleVType,
        roles: Iterable[ThetaRole],
        confidence: float,
        source: str,
        verbnet_confidence: float | None = None,
        verb_class: str | None = None,
    ) -> DecomposedEvent:
        arena = DecompositionArena(self.config.max_depth)
        arena.add(little_v, roles, confidence, source=source)
        return DecomposedEvent(
            nodes=arena.freeze(),
            confidence=confidence,
            verbnet_confidence=verbnet_confidence,
            sources=(source,),
            verb_class=verb_class,
        )


def _class_roles(verb_class: VerbClass) -> tuple[ThetaRole, ...]:
    """The class's role inventory without duplicates, in declared order."""
    return tuple(dict.fromkeys(verb_class.role_types))


def select_by_coverage(evidence: set[ThetaRole]) -> LittleVType:
    """Pick the operator whose default roles best cover the evidence.

    Most covered roles wins; ties go to the fewest unused expected roles,
    then to Do as the unmarked default, then to declaration order.
    """
    def score(little_v: LittleVType) -> tuple[int, int, int]:
        roles = set(little_v.default_roles())
        covered = len(roles & evidence)
        unused = len(roles - evidence)
        return (-covered, unused, 0 if little_v == LittleVType.DO else 1)

    return min(LittleVType, key=score)
