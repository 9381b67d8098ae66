"""Sentence-level event composition.

Orchestrates decomposition, theta-role binding and aspectual
classification for every predicate in a parsed sentence:

    SentenceAnalysis
        -> locate predicates (verbs; auxiliaries only without a main verb)
        -> per predicate: decompose -> bind -> classify -> ComposedEvent
        -> aggregate confidence, sources and unbound entities
    ComposedEvents

The composer holds no per-sentence state. All collaborators (verb-class
index, frame and sense resources) are injected at construction and only
read afterwards, so one composer can serve a whole thread pool.

Usage:
    composer = EventComposer(verb_index=VerbClassIndex.default())
    result = composer.compose_sentence(analysis)
    for event in result:
        print(event.predicate, dict(event.event.participants))
"""

from __future__ import annotations

import concurrent.futures
import dataclasses
import logging
import time
from collections import Counter
from typing import Sequence

from ..config import EventComposerConfig
from ..exceptions import (
    BatchCompositionError,
    EventComposerError,
    IndexNotInitializedError,
)
from ..lexicon.models import PredicateType, ThetaRole, VerbClass
from ..lexicon.resources import (
    FrameAnalysis,
    LexicalResource,
    SenseAnalysis,
    VerbClassResource,
)
from ..lexicon.verb_classes import VerbClassIndex
from .algebra import RelationGraph
from .aspect import AspectualClassifier
from .binding import BindingResult, ThetaRoleBinder
from .confidence import ConfidenceCalculator, mean_treebank_confidence
from .decomposition import DecomposedEvent, PredicateDecomposer
from .types import (
    ComposedEvent,
    ComposedEvents,
    Event,
    EventStructure,
    LittleVType,
    Participant,
    Predicate,
    PredicateSemanticType,
    SemanticFeature,
    SentenceAnalysis,
    StructureKind,
    TokenAnalysis,
    UnbindingReason,
    UnboundEntity,
    UPos,
    Voice,
)

logger = logging.getLogger(__name__)


PREDICATE_FEATURES: dict[PredicateType, SemanticFeature] = {
    PredicateType.MOTION: SemanticFeature.MOTION,
    PredicateType.PATH_REL: SemanticFeature.MOTION,
    PredicateType.TRANSFER: SemanticFeature.TRANSFER,
    PredicateType.HAS_POSSESSION: SemanticFeature.TRANSFER,
    PredicateType.TRANSFER_INFO: SemanticFeature.COMMUNICATION,
    PredicateType.SAY: SemanticFeature.COMMUNICATION,
    PredicateType.COMMUNICATE: SemanticFeature.COMMUNICATION,
    PredicateType.CONTACT: SemanticFeature.CONTACT,
    PredicateType.CHANGE: SemanticFeature.CHANGE_OF_STATE,
    PredicateType.BECOME: SemanticFeature.CHANGE_OF_STATE,
    PredicateType.DESTROYED: SemanticFeature.CHANGE_OF_STATE,
    PredicateType.DEGRADATION: SemanticFeature.CHANGE_OF_STATE,
    PredicateType.DEGRADATION_MATERIAL_INTEGRITY: SemanticFeature.CHANGE_OF_STATE,
    PredicateType.CREATED: SemanticFeature.CREATION,
    PredicateType.PERCEIVE: SemanticFeature.PERCEPTION,
}

SEMANTIC_TYPES: dict[LittleVType, PredicateSemanticType] = {
    LittleVType.CAUSE: PredicateSemanticType.CAUSATIVE,
    LittleVType.BECOME: PredicateSemanticType.INCHOATIVE,
    LittleVType.BE: PredicateSemanticType.STATE,
    LittleVType.HAVE: PredicateSemanticType.STATE,
    LittleVType.EXIST: PredicateSemanticType.STATE,
    LittleVType.EXPERIENCE: PredicateSemanticType.STATE,
    LittleVType.GO: PredicateSemanticType.ACTIVITY,
}

STATIVE_OPERATORS = frozenset({LittleVType.BE, LittleVType.HAVE, LittleVType.EXIST})


class EventComposer:
    """Composes Neo-Davidsonian events from parsed sentences.

    Args:
        config: Composition settings (defaults if omitted)
        verb_index: Shared verb-class index; loaded from
            ``config.verb_class_dir`` or the bundled inventory if omitted
        frame_resource: Optional frame lookup used when tokens carry none
        sense_resource: Optional sense lookup used for participant features
    """

    def __init__(
        self,
        config: EventComposerConfig | None = None,
        verb_index: VerbClassIndex | None = None,
        frame_resource: LexicalResource[FrameAnalysis] | None = None,
        sense_resource: LexicalResource[SenseAnalysis] | None = None,
    ):
        self.config = config or EventComposerConfig()
        self.config.validate()

        if verb_index is None:
            if self.config.verb_class_dir:
                verb_index = VerbClassIndex.load(self.config.verb_class_dir)
            else:
                verb_index = VerbClassIndex.default()
        self.verb_index = verb_index
        self.verb_resource = VerbClassResource(verb_index)
        self.frame_resource = frame_resource
        self.sense_resource = sense_resource

        self.decomposer = PredicateDecomposer(
            self.config.decomposer,
            use_framenet_fallback=self.config.use_framenet_fallback,
        )
        self.binder = ThetaRoleBinder(use_wordnet_animacy=self.config.use_wordnet_animacy)
        self.classifier = AspectualClassifier()
        self.calculator = ConfidenceCalculator(self.config.weights)

    # =========================================================================
    # Public API
    # =========================================================================

    def compose_sentence(self, analysis: SentenceAnalysis) -> ComposedEvents:
        """Compose all events in one sentence.

        Args:
            analysis: Parsed sentence

        Returns:
            ComposedEvents; empty for a sentence without tokens

        Raises:
            InvalidInputError: If an arc references a token outside the
                sentence or carries an invalid confidence
            IndexNotInitializedError: If the verb-class index was never loaded
        """
        start = time.perf_counter()

        analysis.validate()
        if not analysis.tokens:
            return ComposedEvents.empty()
        if not self.verb_index.is_initialized:
            raise IndexNotInitializedError("compose_sentence")

        self._warn_if_malformed(analysis)

        predicates = self._locate_predicates(analysis)
        if not predicates:
            logger.debug(f"No predicates in '{analysis.text}'")
            return ComposedEvents(
                unbound_entities=self._unbound_without_predicate(analysis),
                processing_time_us=self._elapsed_us(start),
            )

        analysis = self._enrich(analysis, predicates)

        events: list[ComposedEvent] = []
        unbound: list[UnboundEntity] = []
        sources: set[str] = set()

        for predicate_idx in predicates:
            decomposed, binding = self._decompose_and_bind(analysis, predicate_idx)
            sources.update(decomposed.sources)
            unbound.extend(binding.unbound)

            token = analysis.tokens[predicate_idx]
            if self._missing_required_agent(decomposed, binding):
                logger.debug(f"Dropping '{token.lemma}': transitive without agent")
                unbound.append(UnboundEntity(
                    token_idx=predicate_idx,
                    text=token.text,
                    reason=UnbindingReason.MISSING_DEPENDENCY,
                    suggested_role=ThetaRole.AGENT,
                ))
                continue

            composed = self._build_event(
                analysis, predicate_idx, len(events), decomposed, binding
            )
            score = self.calculator.event_score(
                verbnet=decomposed.verbnet_confidence,
                treebank=mean_treebank_confidence(
                    analysis.tokens[i].treebank_confidence for i in binding.touched
                ),
                decomposition=composed.decomposition_confidence,
                binding=composed.binding_confidence,
            )
            if score < self.config.confidence_threshold:
                logger.debug(
                    f"Filtered '{token.lemma}': confidence {score:.2f} below "
                    f"threshold {self.config.confidence_threshold:.2f}"
                )
                continue

            events.append(composed)
            if len(events) >= self.config.max_events_per_sentence:
                logger.debug(f"Reached event cap of {self.config.max_events_per_sentence}")
                break

        families = {s.split(":")[0].split("-")[0] for s in sources}
        result = ComposedEvents(
            events=events,
            unbound_entities=unbound,
            confidence=self.calculator.sentence_score(events, len(unbound), len(families)),
            processing_time_us=self._elapsed_us(start),
            sources=sorted(sources),
        )
        logger.debug(
            f"Composed {len(result.events)} events, {len(result.unbound_entities)} "
            f"unbound in {result.processing_time_us}us"
        )
        return result

    def compose_batch(self, sentences: Sequence[SentenceAnalysis]) -> list[ComposedEvents]:
        """Compose many sentences, in parallel when configured.

        Results come back in input order. Each worker writes into the slot
        of its sentence index.

        With ``batch.fail_fast`` off, a sentence that raises a hard error is
        logged and yields ``ComposedEvents.empty()``. With it on, the first
        hard error aborts the batch.

        ``batch.timeout`` is checked between sentences, never inside one.
        On the sequential path (one worker or one sentence) a sentence
        already started always finishes.

        Raises:
            BatchCompositionError: On a hard error under fail-fast, or when
                the batch timeout expires before every sentence finished
        """
        batch = self.config.batch
        results: list[ComposedEvents | None] = [None] * len(sentences)

        if batch.max_workers <= 1 or len(sentences) <= 1:
            start = time.monotonic()
            for i, sentence in enumerate(sentences):
                elapsed = time.monotonic() - start
                if batch.timeout is not None and elapsed > batch.timeout:
                    logger.warning(
                        f"Batch timed out after {batch.timeout}s; "
                        f"{len(sentences) - i} sentences unfinished"
                    )
                    raise BatchCompositionError(
                        i, TimeoutError(f"Batch exceeded {batch.timeout}s")
                    )
                results[i] = self._compose_isolated(i, sentence)
            return [r if r is not None else ComposedEvents.empty() for r in results]

        with concurrent.futures.ThreadPoolExecutor(max_workers=batch.max_workers) as executor:
            futures = {
                executor.submit(self.compose_sentence, sentence): i
                for i, sentence in enumerate(sentences)
            }
            try:
                for future in concurrent.futures.as_completed(futures, timeout=batch.timeout):
                    i = futures[future]
                    try:
                        results[i] = future.result()
                    except EventComposerError as e:
                        results[i] = self._handle_failure(i, e)
            except concurrent.futures.TimeoutError as e:
                # Sentences already running finish; queued ones never start
                for future in futures:
                    future.cancel()
                pending = min(i for i, r in enumerate(results) if r is None)
                logger.warning(
                    f"Batch timed out after {batch.timeout}s; "
                    f"{sum(r is None for r in results)} sentences unfinished"
                )
                raise BatchCompositionError(pending, e) from e
            except BatchCompositionError:
                for future in futures:
                    future.cancel()
                raise

        return [r if r is not None else ComposedEvents.empty() for r in results]

    # =========================================================================
    # Batch Helpers
    # =========================================================================

    def _compose_isolated(self, index: int, sentence: SentenceAnalysis) -> ComposedEvents:
        try:
            return self.compose_sentence(sentence)
        except EventComposerError as e:
            return self._handle_failure(index, e)

    def _handle_failure(self, index: int, error: EventComposerError) -> ComposedEvents:
        if self.config.batch.fail_fast:
            raise BatchCompositionError(index, error) from error
        logger.warning(f"Skipping sentence {index}: {error}")
        return ComposedEvents.empty()

    # =========================================================================
    # Sentence Steps
    # =========================================================================

    def _locate_predicates(self, analysis: SentenceAnalysis) -> list[int]:
        """Verb tokens; auxiliaries count only when no main verb exists."""
        has_main_verb = any(t.pos == UPos.VERB for t in analysis.tokens)
        return [
            idx for idx in analysis.find_predicates()
            if not (has_main_verb and analysis.tokens[idx].pos == UPos.AUX)
        ]

    def _unbound_without_predicate(self, analysis: SentenceAnalysis) -> list[UnboundEntity]:
        return [
            UnboundEntity(
                token_idx=idx,
                text=token.text,
                reason=UnbindingReason.NO_PREDICATE_FOUND,
            )
            for idx, token in enumerate(analysis.tokens)
            if token.is_nominal
        ]

    def _enrich(self, analysis: SentenceAnalysis, predicates: list[int]) -> SentenceAnalysis:
        """Attach resource lookups to tokens that arrived without them."""
        predicate_set = set(predicates)
        tokens: list[TokenAnalysis] = []
        changed = False

        for idx, token in enumerate(analysis.tokens):
            updates = {}
            if idx in predicate_set:
                if token.verb_classes is None:
                    found = self.verb_resource.lookup(token.lemma)
                    if found is not None:
                        updates["verb_classes"] = found
                if token.frames is None and self.frame_resource is not None:
                    frames = self.frame_resource.lookup(token.lemma)
                    if frames is not None:
                        updates["frames"] = frames
            elif token.is_nominal and token.senses is None and self.sense_resource is not None:
                senses = self.sense_resource.lookup(token.lemma)
                if senses is not None:
                    updates["senses"] = senses

            if updates:
                token = dataclasses.replace(token, **updates)
                changed = True
            tokens.append(token)

        if not changed:
            return analysis
        return dataclasses.replace(analysis, tokens=tuple(tokens))

    def _decompose_and_bind(
        self, analysis: SentenceAnalysis, predicate_idx: int
    ) -> tuple[DecomposedEvent, BindingResult]:
        token = analysis.tokens[predicate_idx]
        decomposed = self.decomposer.decompose(
            token.lemma,
            verb_classes=token.verb_classes,
            frames=token.frames,
            upstream_confidence=token.confidence,
            evidence_roles=self.binder.evidence_roles(analysis, predicate_idx),
        )
        binding = self.binder.bind(
            analysis,
            predicate_idx,
            decomposed.expected_roles,
            little_v=decomposed.primary_type,
            verb_class=self._verb_class(token, decomposed),
        )
        return decomposed, binding

    def _verb_class(self, token: TokenAnalysis, decomposed: DecomposedEvent) -> VerbClass | None:
        if decomposed.verb_class is None:
            return None
        if token.verb_classes is not None:
            for verb_class in token.verb_classes.verb_classes:
                if verb_class.id == decomposed.verb_class:
                    return verb_class
        return self.verb_index.get_class(decomposed.verb_class)

    def _missing_required_agent(self, decomposed: DecomposedEvent, binding: BindingResult) -> bool:
        return (
            self.config.require_agent_for_transitives
            and binding.voice == Voice.ACTIVE
            and binding.object_bound
            and ThetaRole.AGENT not in binding.participants
        )

    def _build_event(
        self,
        analysis: SentenceAnalysis,
        predicate_idx: int,
        event_id: int,
        decomposed: DecomposedEvent,
        binding: BindingResult,
    ) -> ComposedEvent:
        token = analysis.tokens[predicate_idx]
        little_v = decomposed.primary_type
        aspect, _ = self.classifier.classify(token.lemma, binding.object_bound, little_v)

        event = Event(
            id=event_id,
            predicate=Predicate(
                lemma=token.lemma,
                semantic_type=SEMANTIC_TYPES.get(little_v, PredicateSemanticType.ACTION),
                verb_class=decomposed.verb_class,
                features=self._features(token, decomposed),
            ),
            little_v=little_v,
            participants=binding.participants,
            aspect=aspect,
            voice=binding.voice,
            structure=self._structure(token.lemma, decomposed, binding),
            modifiers=binding.modifiers,
        )
        return ComposedEvent(
            id=event_id,
            event=event,
            token_span=(min(binding.touched), max(binding.touched)),
            verbnet_source=decomposed.verb_class,
            framenet_source=decomposed.frame,
            decomposition_confidence=decomposed.confidence,
            binding_confidence=binding.confidence,
        )

    def _features(
        self, token: TokenAnalysis, decomposed: DecomposedEvent
    ) -> tuple[SemanticFeature, ...]:
        verb_class = self._verb_class(token, decomposed)
        if verb_class is None:
            return ()
        features = (
            PREDICATE_FEATURES.get(p.predicate_type)
            for p in verb_class.semantic_predicates()
        )
        return tuple(dict.fromkeys(f for f in features if f is not None))

    def _structure(
        self, lemma: str, decomposed: DecomposedEvent, binding: BindingResult
    ) -> EventStructure:
        participants = binding.participants
        little_v = decomposed.primary_type
        theme = participants.get(ThetaRole.PATIENT) or participants.get(ThetaRole.THEME)

        if little_v == LittleVType.CAUSE:
            sub = decomposed.sub_event if self.config.include_sub_events else None
            return EventStructure(
                kind=StructureKind.CAUSATIVE,
                causer=participants.get(ThetaRole.AGENT) or Participant.placeholder(ThetaRole.AGENT),
                theme=theme or Participant.placeholder(ThetaRole.PATIENT),
                caused_type=sub.little_v if sub else None,
                caused_predicate=f"{sub.little_v.value}_{lemma}" if sub else None,
            )
        if little_v == LittleVType.BECOME:
            return EventStructure(
                kind=StructureKind.INCHOATIVE,
                theme=theme or Participant.placeholder(ThetaRole.THEME),
                result_state=binding.result_state or lemma,
            )
        if little_v in STATIVE_OPERATORS:
            return EventStructure(
                kind=StructureKind.STATIVE,
                theme=theme,
                result_state=binding.result_state,
            )
        return EventStructure()

    def _warn_if_malformed(self, analysis: SentenceAnalysis) -> None:
        """Log, but tolerate, arcs that break the tree shape."""
        heads = Counter(arc.dependent_idx for arc in analysis.dependencies)
        multiple = sorted(idx for idx, count in heads.items() if count > 1)
        if multiple:
            logger.warning(f"Tokens with multiple heads in '{analysis.text}': {multiple}")

        graph: RelationGraph[int] = RelationGraph(
            (arc.head_idx, arc.dependent_idx) for arc in analysis.dependencies
        )
        cycle = graph.find_cycle()
        if cycle is not None:
            logger.warning(f"Dependency cycle in '{analysis.text}': {cycle}")

    @staticmethod
    def _elapsed_us(start: float) -> int:
        return int((time.perf_counter() - start) * 1_000_000)
