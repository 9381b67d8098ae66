"""Tests for the event composition algebra."""

import pytest

from event_composer.events import (
    CausalRelation,
    CausationType,
    CompositeEvent,
    CompositionType,
    RelationGraph,
    TemporalRelationType,
    compose_causation,
    compose_conjunction,
    compose_sequence,
    is_temporally_consistent,
)


class TestRelationGraph:
    """Tests for the adjacency-list graph."""

    def test_edges(self):
        """Test nodes and deduplicated edges."""
        graph = RelationGraph([(1, 2), (1, 2), (2, 3)])

        assert graph.nodes == [1, 2, 3]
        assert graph.neighbors(1) == [2]
        assert graph.neighbors(9) == []
        assert graph.edge_count() == 2

    def test_acyclic(self):
        """Test an acyclic graph has no cycle."""
        graph = RelationGraph([(1, 2), (1, 3), (3, 2)])

        assert graph.has_cycle() is False
        assert graph.find_cycle() is None

    def test_find_cycle(self):
        """Test the cycle path is reported closed."""
        graph = RelationGraph([(1, 2), (2, 3), (3, 1)])

        assert graph.find_cycle() == [1, 2, 3, 1]

    def test_self_loop(self):
        """Test a self edge is a cycle."""
        graph = RelationGraph([("a", "a")])

        assert graph.find_cycle() == ["a", "a"]

    def test_cycle_off_the_start(self):
        """Test cycles not reachable from the first node are found."""
        graph = RelationGraph([(0, 1), (2, 3), (3, 4), (4, 3)])

        assert graph.find_cycle() == [3, 4, 3]

    def test_topological_order(self):
        """Test every edge points forward in the order."""
        edges = [(1, 2), (1, 3), (3, 2), (4, 1)]
        order = RelationGraph(edges).topological_order()

        assert sorted(order) == [1, 2, 3, 4]
        for source, target in edges:
            assert order.index(source) < order.index(target)

    def test_topological_order_cycle(self):
        """Test ordering a cyclic graph raises."""
        graph = RelationGraph([(1, 2), (2, 1)])

        with pytest.raises(ValueError, match="Cycle detected"):
            graph.topological_order()

    def test_long_chain(self):
        """Test chains far deeper than the recursion limit are walked."""
        graph = RelationGraph((i, i + 1) for i in range(5000))

        assert graph.has_cycle() is False
        order = graph.topological_order()
        assert order[0] == 0
        assert order[-1] == 5000

    def test_cycle_at_end_of_long_chain(self):
        """Test a cycle closing the far end of a long chain is found."""
        graph = RelationGraph((i, i + 1) for i in range(5000))
        graph.add_edge(5000, 4998)

        assert graph.find_cycle() == [4998, 4999, 5000, 4998]


class TestCompositeEvent:
    """Tests for composite event relations."""

    def test_membership_checked(self):
        """Test relations between non-members are refused."""
        composite = CompositeEvent(id=1, composition_type=CompositionType.CONJUNCTION)
        composite.add_sub_event(10)

        assert composite.add_temporal_relation(10, 11, TemporalRelationType.BEFORE) is False
        assert composite.add_causal_relation(11, 10) is False
        assert composite.temporal_relations == []
        assert composite.causal_relations == []

    def test_sub_events_unique(self):
        """Test sub-events are added once."""
        composite = CompositeEvent(id=1, composition_type=CompositionType.SEQUENCE)
        composite.add_sub_event(5)
        composite.add_sub_event(5)

        assert composite.sub_events == [5]

    def test_predecessors_and_successors(self):
        """Test Before and Meets order events."""
        composite = compose_sequence([1, 2], result_id=9)
        composite.add_sub_event(3)
        composite.add_temporal_relation(2, 3, TemporalRelationType.MEETS)
        composite.add_temporal_relation(1, 3, TemporalRelationType.OVERLAPS)

        assert composite.predecessors(2) == {1}
        assert composite.successors(2) == {3}
        assert composite.predecessors(3) == {2}
        assert composite.successors(3) == set()

    def test_inconsistent_before_cycle(self):
        """Test a Before cycle is inconsistent."""
        composite = compose_sequence([1, 2, 3], result_id=10)
        assert composite.is_temporally_consistent()

        composite.add_temporal_relation(3, 1, TemporalRelationType.BEFORE)

        assert not composite.is_temporally_consistent()
        assert not is_temporally_consistent(composite)

    def test_long_sequence_consistency(self):
        """Test consistency of a long sequence returns a plain answer."""
        composite = compose_sequence(list(range(5000)), result_id=-1)

        assert composite.is_temporally_consistent()

        composite.add_temporal_relation(4999, 0, TemporalRelationType.BEFORE)

        assert not composite.is_temporally_consistent()

    def test_non_before_relations_ignored(self):
        """Test only Before edges affect consistency."""
        composite = compose_conjunction(1, 2, result_id=3)
        composite.add_temporal_relation(2, 1, TemporalRelationType.SIMULTANEOUS)
        composite.add_temporal_relation(1, 2, TemporalRelationType.BEFORE)

        assert composite.is_temporally_consistent()
        assert composite.precedence_graph().edge_count() == 1


class TestCompositionOperations:
    """Tests for conjunction, sequence and causation."""

    def test_conjunction(self):
        """Test conjunction relates two events as simultaneous."""
        composite = compose_conjunction(1, 2, result_id=3)

        assert composite.id == 3
        assert composite.composition_type == CompositionType.CONJUNCTION
        assert composite.sub_events == [1, 2]
        assert composite.temporal_relations[0].relation_type == TemporalRelationType.SIMULTANEOUS

    def test_sequence(self):
        """Test sequence chains Before relations in order."""
        composite = compose_sequence([1, 2, 2, 3], result_id=4)

        assert composite.composition_type == CompositionType.SEQUENCE
        assert composite.sub_events == [1, 2, 3]
        assert [(r.event1, r.event2) for r in composite.temporal_relations] == [(1, 2), (2, 3)]
        assert all(
            r.relation_type == TemporalRelationType.BEFORE
            for r in composite.temporal_relations
        )

    def test_empty_sequence(self):
        """Test an empty sequence is trivially consistent."""
        composite = compose_sequence([], result_id=1)

        assert composite.sub_events == []
        assert composite.is_temporally_consistent()

    def test_causation(self):
        """Test causation records a causal relation."""
        composite = compose_causation(1, 2, result_id=3)

        assert composite.composition_type == CompositionType.CAUSATION
        assert composite.causal_relations == [
            CausalRelation(1, 2, CausationType.DIRECT, 0.8)
        ]

    def test_causation_type(self):
        """Test the causation type is kept."""
        composite = compose_causation(1, 2, result_id=3, causation_type=CausationType.ENABLING)

        assert composite.causal_relations[0].causation_type == CausationType.ENABLING
