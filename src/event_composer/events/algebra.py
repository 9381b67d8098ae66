"""Event composition algebra.

Combines composed events into higher-order CompositeEvents related by
temporal and causal relations:
- Conjunction: "John sang and Mary danced" (simultaneous)
- Sequence: "John woke up, then left" (ordered by Before)
- Causation: "The storm caused the flood" (cause -> effect)

Sub-events are referenced by event id. Relations are checked for
membership when added; temporal consistency is checked on demand.

Example:
    >>> composite = compose_sequence([1, 2, 3], result_id=10)
    >>> composite.is_temporally_consistent()
    True
    >>> composite.add_temporal_relation(3, 1, TemporalRelationType.BEFORE)
    True
    >>> composite.is_temporally_consistent()
    False
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Iterable, TypeVar

NodeT = TypeVar("NodeT", bound=Hashable)


# =============================================================================
# Relation Types
# =============================================================================


class CompositionType(str, Enum):
    CONJUNCTION = "conjunction"
    SEQUENCE = "sequence"
    CAUSATION = "causation"


class TemporalRelationType(str, Enum):
    """Allen-style interval relations between two events."""

    BEFORE = "before"
    MEETS = "meets"
    OVERLAPS = "overlaps"
    STARTS = "starts"
    DURING = "during"
    FINISHES = "finishes"
    EQUALS = "equals"
    SIMULTANEOUS = "simultaneous"


# Relations that order event1 strictly ahead of event2
PRECEDENCE_RELATIONS = frozenset({TemporalRelationType.BEFORE, TemporalRelationType.MEETS})


class CausationType(str, Enum):
    DIRECT = "direct"  # "John broke the vase"
    INDIRECT = "indirect"  # "John made Mary break the vase"
    ENABLING = "enabling"  # "John let Mary in"
    PREVENTING = "preventing"  # "John stopped Mary from leaving"


@dataclass(frozen=True)
class TemporalRelation:
    event1: int
    event2: int
    relation_type: TemporalRelationType


@dataclass(frozen=True)
class CausalRelation:
    cause: int
    effect: int
    causation_type: CausationType = CausationType.DIRECT
    confidence: float = 0.8


# =============================================================================
# Relation Graph
# =============================================================================


class RelationGraph(Generic[NodeT]):
    """Directed graph as an adjacency list keyed by node id.

    Independent of any relation enum: callers decide which relations
    become edges.
    """

    def __init__(self, edges: Iterable[tuple[NodeT, NodeT]] = ()):
        self._adjacency: dict[NodeT, list[NodeT]] = {}
        for source, target in edges:
            self.add_edge(source, target)

    def add_node(self, node: NodeT) -> None:
        self._adjacency.setdefault(node, [])

    def add_edge(self, source: NodeT, target: NodeT) -> None:
        self.add_node(source)
        self.add_node(target)
        if target not in self._adjacency[source]:
            self._adjacency[source].append(target)

    @property
    def nodes(self) -> list[NodeT]:
        return list(self._adjacency)

    def neighbors(self, node: NodeT) -> list[NodeT]:
        return list(self._adjacency.get(node, ()))

    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._adjacency.values())

    def has_cycle(self) -> bool:
        return self.find_cycle() is not None

    def find_cycle(self) -> list[NodeT] | None:
        """Find one cycle by depth-first search.

        The walk keeps an explicit stack of (node, remaining targets)
        frames, so chain length is not bounded by the interpreter's
        recursion limit.

        Returns:
            Nodes along the cycle with the first node repeated at the end
            (e.g. [1, 2, 3, 1]), or None if the graph is acyclic.
        """
        visited: set[NodeT] = set()
        rec_stack: set[NodeT] = set()
        path: list[NodeT] = []

        for start in self._adjacency:
            if start in visited:
                continue
            visited.add(start)
            rec_stack.add(start)
            path.append(start)
            stack = [(start, iter(self._adjacency[start]))]

            while stack:
                node, targets = stack[-1]
                for target in targets:
                    if target in rec_stack:
                        return path[path.index(target):] + [target]
                    if target not in visited:
                        visited.add(target)
                        rec_stack.add(target)
                        path.append(target)
                        stack.append((target, iter(self._adjacency[target])))
                        break
                else:
                    stack.pop()
                    rec_stack.remove(node)
                    path.pop()
        return None

    def topological_order(self) -> list[NodeT]:
        """Nodes ordered so every edge points forward.

        Raises:
            ValueError: If the graph contains a cycle
        """
        cycle = self.find_cycle()
        if cycle is not None:
            raise ValueError(f"Cycle detected: {' -> '.join(str(n) for n in cycle)}")

        visited: set[NodeT] = set()
        order: list[NodeT] = []

        for start in self._adjacency:
            if start in visited:
                continue
            visited.add(start)
            stack = [(start, iter(self._adjacency[start]))]

            while stack:
                node, targets = stack[-1]
                for target in targets:
                    if target not in visited:
                        visited.add(target)
                        stack.append((target, iter(self._adjacency[target])))
                        break
                else:
                    stack.pop()
                    order.append(node)

        order.reverse()
        return order


# =============================================================================
# Composite Events
# =============================================================================


@dataclass
class CompositeEvent:
    """An aggregate of events joined by temporal and causal relations."""

    id: int
    composition_type: CompositionType
    sub_events: list[int] = field(default_factory=list)
    temporal_relations: list[TemporalRelation] = field(default_factory=list)
    causal_relations: list[CausalRelation] = field(default_factory=list)

    def add_sub_event(self, event_id: int) -> None:
        if event_id not in self.sub_events:
            self.sub_events.append(event_id)

    def add_temporal_relation(
        self,
        event1: int,
        event2: int,
        relation_type: TemporalRelationType,
    ) -> bool:
        """Relate two sub-events in time.

        Returns:
            False (and nothing is recorded) if either event is not a
            sub-event of this composite.
        """
        if event1 not in self.sub_events or event2 not in self.sub_events:
            return False
        self.temporal_relations.append(TemporalRelation(event1, event2, relation_type))
        return True

    def add_causal_relation(
        self,
        cause: int,
        effect: int,
        causation_type: CausationType = CausationType.DIRECT,
        confidence: float = 0.8,
    ) -> bool:
        """Record that one sub-event causes another.

        Returns:
            False if either event is not a sub-event of this composite.
        """
        if cause not in self.sub_events or effect not in self.sub_events:
            return False
        self.causal_relations.append(CausalRelation(cause, effect, causation_type, confidence))
        return True

    def predecessors(self, event_id: int) -> set[int]:
        """Sub-events ordered directly before ``event_id``."""
        return {
            r.event1 for r in self.temporal_relations
            if r.event2 == event_id and r.relation_type in PRECEDENCE_RELATIONS
        }

    def successors(self, event_id: int) -> set[int]:
        """Sub-events ordered directly after ``event_id``."""
        return {
            r.event2 for r in self.temporal_relations
            if r.event1 == event_id and r.relation_type in PRECEDENCE_RELATIONS
        }

    def precedence_graph(self) -> RelationGraph[int]:
        """Graph of Before edges over the sub-events."""
        graph: RelationGraph[int] = RelationGraph()
        for event_id in self.sub_events:
            graph.add_node(event_id)
        for relation in self.temporal_relations:
            if relation.relation_type == TemporalRelationType.BEFORE:
                graph.add_edge(relation.event1, relation.event2)
        return graph

    def is_temporally_consistent(self) -> bool:
        """False iff the Before relations form a cycle."""
        return not self.precedence_graph().has_cycle()


# =============================================================================
# Composition Operations
# =============================================================================


def compose_conjunction(event1: int, event2: int, result_id: int) -> CompositeEvent:
    """Two events holding at the same time."""
    composite = CompositeEvent(id=result_id, composition_type=CompositionType.CONJUNCTION)
    composite.add_sub_event(event1)
    composite.add_sub_event(event2)
    composite.add_temporal_relation(event1, event2, TemporalRelationType.SIMULTANEOUS)
    return composite


def compose_causation(
    cause: int,
    effect: int,
    result_id: int,
    causation_type: CausationType = CausationType.DIRECT,
) -> CompositeEvent:
    """A cause event bringing about an effect event."""
    composite = CompositeEvent(id=result_id, composition_type=CompositionType.CAUSATION)
    composite.add_sub_event(cause)
    composite.add_sub_event(effect)
    composite.add_causal_relation(cause, effect, causation_type)
    return composite


def compose_sequence(events: Iterable[int], result_id: int) -> CompositeEvent:
    """Events in order, each Before the next."""
    composite = CompositeEvent(id=result_id, composition_type=CompositionType.SEQUENCE)
    ordered: list[int] = []
    for event_id in events:
        if event_id not in composite.sub_events:
            composite.add_sub_event(event_id)
            ordered.append(event_id)

    for earlier, later in zip(ordered, ordered[1:]):
        composite.add_temporal_relation(earlier, later, TemporalRelationType.BEFORE)
    return composite


def is_temporally_consistent(composite: CompositeEvent) -> bool:
    return composite.is_temporally_consistent()
