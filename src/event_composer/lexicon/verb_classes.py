"""Indexed verb-class lookup.

VerbClassIndex answers lemma queries against a verb-class inventory:
which classes a verb belongs to, which thematic roles it takes, its frames
and semantic predicates. It is built once and never mutated afterwards, so
one instance can be shared by every composer and worker thread without
locking. Reloading means building a new index and swapping the reference.

Index Structure:
    verb_to_classes:     lemma -> class ids
    role_to_classes:     theta role -> class ids
    predicate_to_classes: predicate family -> class ids
    restriction_to_classes: selectional restriction -> class ids

Example:
    >>> index = VerbClassIndex.default()
    >>> [c.id for c in index.get_verb_classes("give")]
    ['give-13.1']
    >>> index.verb_allows_role("give", ThetaRole.RECIPIENT)
    True
"""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping

import yaml

from ..exceptions import (
    IndexDirectoryNotFoundError,
    IndexNotInitializedError,
    InvalidIndexFormatError,
)
from .models import (
    DYNAMIC_PREDICATES,
    TELIC_PREDICATES,
    AspectualInfo,
    PredicateType,
    RoleRestriction,
    SelectionalRestriction,
    SemanticPredicate,
    SyntacticFrame,
    ThematicRoleSpec,
    ThetaRole,
    VerbClass,
)

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).parent / "data"

YAML_SUFFIXES = (".yaml", ".yml")


def _freeze(multimap: dict[Any, list[str]]) -> Mapping[Any, tuple[str, ...]]:
    return MappingProxyType({k: tuple(v) for k, v in multimap.items()})


def _flatten(classes: Iterable[VerbClass]) -> list[VerbClass]:
    """Depth-first list of classes and all their subclasses."""
    flat = []
    for verb_class in classes:
        flat.append(verb_class)
        flat.extend(_flatten(verb_class.subclasses))
    return flat


def parse_class_file(path: Path) -> list[VerbClass]:
    """Parse one YAML file of class definitions.

    The file may hold a mapping with a ``classes`` list, a single class
    mapping, or a bare list of class mappings.

    Raises:
        InvalidIndexFormatError: If the file cannot be parsed.
    """
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidIndexFormatError(str(path), "not valid YAML", cause=e)

    if raw is None:
        return []
    if isinstance(raw, dict) and "classes" in raw:
        entries = raw["classes"] or []
    elif isinstance(raw, dict):
        entries = [raw]
    elif isinstance(raw, list):
        entries = raw
    else:
        raise InvalidIndexFormatError(str(path), "expected a mapping or list")

    classes = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise InvalidIndexFormatError(str(path), f"entry {position} is not a mapping")
        try:
            classes.append(VerbClass.from_dict(entry))
        except KeyError as e:
            raise InvalidIndexFormatError(str(path), f"entry {position} missing {e}", cause=e)
        except (ValueError, TypeError) as e:
            raise InvalidIndexFormatError(str(path), f"entry {position}: {e}", cause=e)
    return classes


class VerbClassIndex:
    """Read-only multimap index over a verb-class inventory.

    Create with one of the constructors:
        VerbClassIndex.default()            # bundled inventory
        VerbClassIndex.load("data/verbnet")  # YAML directory
        VerbClassIndex.from_classes([...])   # in-memory classes

    A bare VerbClassIndex() is uninitialized and every query on it raises
    IndexNotInitializedError. Unknown lemmas never raise; they return empty
    results.
    """

    def __init__(
        self,
        classes: Iterable[VerbClass] | None = None,
        load_errors: Iterable[str] = (),
    ):
        self._initialized = classes is not None
        self.load_errors: tuple[str, ...] = tuple(load_errors)

        by_id: dict[str, VerbClass] = {}
        verb_to_classes: dict[str, list[str]] = defaultdict(list)
        role_to_classes: dict[ThetaRole, list[str]] = defaultdict(list)
        predicate_to_classes: dict[PredicateType, list[str]] = defaultdict(list)
        restriction_to_classes: dict[SelectionalRestriction, list[str]] = defaultdict(list)

        for verb_class in _flatten(classes or []):
            if verb_class.id in by_id:
                logger.warning(f"Duplicate verb class {verb_class.id}, keeping first definition")
                continue
            by_id[verb_class.id] = verb_class

            for member in verb_class.members:
                verb_to_classes[member.name.lower()].append(verb_class.id)

            for spec in verb_class.theta_roles:
                if verb_class.id not in role_to_classes[spec.role]:
                    role_to_classes[spec.role].append(verb_class.id)
                for restriction in spec.restrictions:
                    ids = restriction_to_classes[restriction.restriction]
                    if verb_class.id not in ids:
                        ids.append(verb_class.id)

            for predicate in verb_class.semantic_predicates():
                ids = predicate_to_classes[predicate.predicate_type]
                if verb_class.id not in ids:
                    ids.append(verb_class.id)

        self._classes: Mapping[str, VerbClass] = MappingProxyType(by_id)
        self._verb_to_classes = _freeze(verb_to_classes)
        self._role_to_classes = _freeze(role_to_classes)
        self._predicate_to_classes = _freeze(predicate_to_classes)
        self._restriction_to_classes = _freeze(restriction_to_classes)

        if self._initialized:
            logger.debug(
                f"Built verb-class index: {len(by_id)} classes, "
                f"{len(verb_to_classes)} verbs"
            )

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_classes(cls, classes: Iterable[VerbClass]) -> VerbClassIndex:
        """Build an index from in-memory classes."""
        return cls(list(classes))

    @classmethod
    def load(cls, directory: str | Path, strict: bool = False) -> VerbClassIndex:
        """Load every YAML file in a directory.

        Args:
            directory: Directory containing ``*.yaml`` / ``*.yml`` files
            strict: If True, the first invalid file aborts loading.
                Otherwise invalid files are logged, listed in
                ``load_errors`` and skipped.

        Raises:
            IndexDirectoryNotFoundError: If the directory does not exist.
            InvalidIndexFormatError: If strict and a file is invalid.
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise IndexDirectoryNotFoundError(str(directory))

        classes: list[VerbClass] = []
        errors: list[str] = []
        for path in sorted(directory.iterdir()):
            if path.suffix not in YAML_SUFFIXES:
                continue
            try:
                classes.extend(parse_class_file(path))
            except InvalidIndexFormatError as e:
                if strict:
                    raise
                logger.error(f"Failed to load verb-class file {path}: {e}")
                errors.append(str(e))

        return cls(classes, load_errors=errors)

    @classmethod
    def default(cls) -> VerbClassIndex:
        """Load the inventory bundled with the package."""
        return cls.load(DEFAULT_DATA_DIR, strict=True)

    def with_classes(self, extra: Iterable[VerbClass]) -> VerbClassIndex:
        """Return a new index containing this index's classes plus ``extra``.

        Classes already present keep their existing definition.
        """
        self._check_initialized("with_classes")
        top_level = [c for c in self._classes.values() if not self._is_subclass(c.id)]
        return VerbClassIndex([*top_level, *extra], load_errors=self.load_errors)

    def _is_subclass(self, class_id: str) -> bool:
        return any(
            sub.id == class_id
            for parent in self._classes.values()
            for sub in parent.subclasses
        )

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _check_initialized(self, operation: str) -> None:
        if not self._initialized:
            raise IndexNotInitializedError(operation)

    def get_class(self, class_id: str) -> VerbClass | None:
        self._check_initialized("get_class")
        return self._classes.get(class_id)

    def get_verb_classes(self, lemma: str) -> list[VerbClass]:
        """Classes listing ``lemma`` as a member (empty if unknown)."""
        self._check_initialized("get_verb_classes")
        ids = self._verb_to_classes.get(lemma.strip().lower(), ())
        return [self._classes[class_id] for class_id in ids]

    def get_theta_roles(self, lemma: str) -> list[ThematicRoleSpec]:
        """Thematic roles over all of the verb's classes, first occurrence wins."""
        seen: set[ThetaRole] = set()
        roles = []
        for verb_class in self.get_verb_classes(lemma):
            for spec in verb_class.theta_roles:
                if spec.role not in seen:
                    seen.add(spec.role)
                    roles.append(spec)
        return roles

    def get_selectional_restrictions(
        self, lemma: str, role: ThetaRole
    ) -> list[RoleRestriction]:
        restrictions = []
        for spec in self.get_theta_roles(lemma):
            if spec.role == role:
                restrictions.extend(spec.restrictions)
        return restrictions

    def get_syntactic_frames(self, lemma: str) -> list[SyntacticFrame]:
        return [f for c in self.get_verb_classes(lemma) for f in c.frames]

    def get_semantic_predicates(self, lemma: str) -> list[SemanticPredicate]:
        return [p for c in self.get_verb_classes(lemma) for p in c.semantic_predicates()]

    def infer_aspectual_class(self, lemma: str) -> AspectualInfo:
        """Infer aspectual features from the verb's semantic predicates.

        dynamic: any Motion/Change family predicate
        telic: any Created/Destroyed/Transfer predicate
        durative: more than one predicate
        """
        predicates = self.get_semantic_predicates(lemma)
        types = {p.predicate_type for p in predicates}
        durative = len(predicates) > 1
        return AspectualInfo(
            durative=durative,
            dynamic=bool(types & DYNAMIC_PREDICATES),
            telic=bool(types & TELIC_PREDICATES),
            punctual=not durative,
        )

    def verb_allows_role(self, lemma: str, role: ThetaRole) -> bool:
        return any(spec.role == role for spec in self.get_theta_roles(lemma))

    def verbs_with_role(self, role: ThetaRole) -> list[str]:
        """Member verbs of every class that takes ``role``."""
        self._check_initialized("verbs_with_role")
        verbs = set()
        for class_id in self._role_to_classes.get(role, ()):
            verbs.update(m.lower() for m in self._classes[class_id].member_names)
        return sorted(verbs)

    def classes_with_predicate(self, predicate_type: PredicateType) -> list[VerbClass]:
        self._check_initialized("classes_with_predicate")
        return [self._classes[i] for i in self._predicate_to_classes.get(predicate_type, ())]

    def classes_with_restriction(
        self, restriction: SelectionalRestriction
    ) -> list[VerbClass]:
        self._check_initialized("classes_with_restriction")
        return [self._classes[i] for i in self._restriction_to_classes.get(restriction, ())]

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_statistics(self) -> dict[str, Any]:
        """Get index statistics."""
        self._check_initialized("get_statistics")
        return {
            "classes": len(self._classes),
            "verbs": len(self._verb_to_classes),
            "roles": len(self._role_to_classes),
            "predicate_types": len(self._predicate_to_classes),
            "restrictions": len(self._restriction_to_classes),
            "frames": sum(len(c.frames) for c in self._classes.values()),
            "load_errors": len(self.load_errors),
        }

    def __len__(self) -> int:
        return len(self._classes)

    def __contains__(self, lemma: object) -> bool:
        return isinstance(lemma, str) and lemma.strip().lower() in self._verb_to_classes
