"""Verb-class data model.

A VerbClass groups verbs that share argument structure: the thematic roles
they take (with selectional restrictions), the syntactic frames they occur
in, and the semantic predicates each frame denotes. Classes are immutable
once built so a loaded inventory can be shared between threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# =============================================================================
# Enumerations
# =============================================================================


class ThetaRole(str, Enum):
    """Thematic roles a participant can fill."""

    AGENT = "agent"
    PATIENT = "patient"
    THEME = "theme"
    EXPERIENCER = "experiencer"
    RECIPIENT = "recipient"
    BENEFACTIVE = "benefactive"
    INSTRUMENT = "instrument"
    COMITATIVE = "comitative"
    LOCATION = "location"
    SOURCE = "source"
    GOAL = "goal"
    DIRECTION = "direction"
    TEMPORAL = "temporal"
    FREQUENCY = "frequency"
    MEASURE = "measure"
    CAUSE = "cause"
    MANNER = "manner"
    CONTROLLED_SUBJECT = "controlled_subject"
    STIMULUS = "stimulus"

    @classmethod
    def parse(cls, name: str) -> ThetaRole:
        """Parse a role name, accepting VerbNet capitalization ("Agent", "Co-Agent")."""
        key = name.strip().lower().replace("-", "_")
        aliases = {
            "co_agent": "agent",
            "co_patient": "patient",
            "co_theme": "theme",
            "beneficiary": "benefactive",
            "destination": "goal",
            "initial_location": "source",
            "time": "temporal",
            "topic": "theme",
            "attribute": "theme",
            "asset": "measure",
            "extent": "measure",
            "value": "measure",
            "pivot": "theme",
            "material": "source",
            "product": "goal",
            "result": "goal",
        }
        return cls(aliases.get(key, key))


class SelectionalRestriction(str, Enum):
    """Semantic type constraints on a role filler."""

    ANIMATE = "animate"
    HUMAN = "human"
    ANIMAL = "animal"
    ORGANIZATION = "organization"
    CONCRETE = "concrete"
    ABSTRACT = "abstract"
    SOLID = "solid"
    FLUID = "fluid"
    SUBSTANCE = "substance"
    LOCATION = "location"
    REGION = "region"
    PLACE = "place"
    MACHINE = "machine"
    VEHICLE = "vehicle"
    COMMUNICATION = "communication"
    BODY_PART = "body_part"
    PLURAL = "plural"
    TIME = "time"
    FORCE = "force"
    CURRENCY = "currency"
    CONTAINER = "container"
    ELONGATED = "elongated"
    POINTY = "pointy"
    REFL = "refl"

    @classmethod
    def parse(cls, name: str) -> SelectionalRestriction:
        return cls(name.strip().lower().replace("-", "_"))


class PredicateType(str, Enum):
    """Semantic predicate families found in verb-class frames."""

    CAUSE = "cause"
    MOTION = "motion"
    PATH_REL = "path_rel"
    LOCATION = "location"
    TRANSFER = "transfer"
    TRANSFER_INFO = "transfer_info"
    HAS_POSSESSION = "has_possession"
    CONTACT = "contact"
    CHANGE = "change"
    BECOME = "become"
    CREATED = "created"
    DESTROYED = "destroyed"
    DEGRADATION = "degradation"
    DEGRADATION_MATERIAL_INTEGRITY = "degradation_material_integrity"
    EXIST = "exist"
    STATE = "state"
    HAS_STATE = "has_state"
    PROPERTY = "property"
    PROP = "prop"
    DO = "do"
    MANNER = "manner"
    FUNCTION = "function"
    UTILIZE = "utilize"
    EXPERIENCE = "experience"
    EMOTIONAL = "emotional"
    EMOTIONAL_STATE = "emotional_state"
    PERCEIVE = "perceive"
    SAY = "say"
    COMMUNICATE = "communicate"
    TOGETHER = "together"
    APART = "apart"
    ATTACHED = "attached"
    INVOLVED = "involved"
    FOCUS = "focus"
    VISIBLE = "visible"
    OPEN = "open"
    CLOSED = "closed"
    COVERED = "covered"
    CONTAINS = "contains"
    OTHER = "other"

    @classmethod
    def from_name(cls, name: str) -> PredicateType:
        """Map a frame predicate name to its family; unknown names map to OTHER."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return cls.OTHER


# Predicate families driving aspect inference. Transfer counts as telic only.
DYNAMIC_PREDICATES = frozenset({
    PredicateType.MOTION,
    PredicateType.PATH_REL,
    PredicateType.CHANGE,
    PredicateType.BECOME,
    PredicateType.DEGRADATION,
    PredicateType.DEGRADATION_MATERIAL_INTEGRITY,
})

TELIC_PREDICATES = frozenset({
    PredicateType.CREATED,
    PredicateType.DESTROYED,
    PredicateType.TRANSFER,
})


# =============================================================================
# Class Components
# =============================================================================


@dataclass(frozen=True)
class VerbMember:
    """A verb belonging to a class."""

    name: str
    wn_sense: str | None = None
    fn_mapping: str | None = None
    grouping: str | None = None


@dataclass(frozen=True)
class RoleRestriction:
    """A selectional restriction with polarity (+animate / -animate)."""

    restriction: SelectionalRestriction
    positive: bool = True

    @classmethod
    def parse(cls, text: str) -> RoleRestriction:
        text = text.strip()
        positive = not text.startswith("-")
        return cls(SelectionalRestriction.parse(text.lstrip("+-")), positive)

    def __str__(self) -> str:
        return f"{'+' if self.positive else '-'}{self.restriction.value}"


@dataclass(frozen=True)
class ThematicRoleSpec:
    """A thematic role slot of a verb class."""

    role: ThetaRole
    restrictions: tuple[RoleRestriction, ...] = ()

    def requires(self, restriction: SelectionalRestriction) -> bool:
        """True if the role demands a positive value of the restriction."""
        return any(r.restriction == restriction and r.positive for r in self.restrictions)


@dataclass(frozen=True)
class SemanticPredicate:
    """One predicate of a frame's semantics, e.g. cause(Agent, E)."""

    name: str
    event_time: str | None = None
    arguments: tuple[str, ...] = ()
    negated: bool = False

    @property
    def predicate_type(self) -> PredicateType:
        return PredicateType.from_name(self.name)


@dataclass(frozen=True)
class SyntacticFrame:
    """A syntactic realization pattern and its semantics."""

    description: str = ""
    primary: str = ""
    secondary: str = ""
    example: str = ""
    syntax: tuple[str, ...] = ()
    semantics: tuple[SemanticPredicate, ...] = ()


@dataclass(frozen=True)
class AspectualInfo:
    """Aspectual features inferred from a verb's semantic predicates."""

    durative: bool = False
    dynamic: bool = False
    telic: bool = False
    punctual: bool = True


@dataclass(frozen=True)
class VerbClass:
    """A verb class with its members, roles and frames."""

    id: str
    name: str = ""
    members: tuple[VerbMember, ...] = ()
    theta_roles: tuple[ThematicRoleSpec, ...] = ()
    frames: tuple[SyntacticFrame, ...] = ()
    subclasses: tuple[VerbClass, ...] = field(default=())

    @property
    def member_names(self) -> list[str]:
        return [m.name for m in self.members]

    @property
    def role_types(self) -> list[ThetaRole]:
        return [r.role for r in self.theta_roles]

    def semantic_predicates(self) -> list[SemanticPredicate]:
        """All semantic predicates across frames, in frame order."""
        return [p for frame in self.frames for p in frame.semantics]

    def role_spec(self, role: ThetaRole) -> ThematicRoleSpec | None:
        for spec in self.theta_roles:
            if spec.role == role:
                return spec
        return None

    # =========================================================================
    # Parsing
    # =========================================================================

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        inherited_roles: tuple[ThematicRoleSpec, ...] = (),
    ) -> VerbClass:
        """Build a class from its YAML mapping.

        Subclasses that declare no roles inherit the parent's roles.

        Raises:
            KeyError: If the class id is missing.
            ValueError: If a role or restriction name is unknown.
        """
        class_id = data["id"]

        members = []
        for raw in data.get("members", []):
            if isinstance(raw, str):
                members.append(VerbMember(name=raw))
            else:
                members.append(VerbMember(
                    name=raw["name"],
                    wn_sense=raw.get("wn"),
                    fn_mapping=raw.get("fn_mapping"),
                    grouping=raw.get("grouping"),
                ))

        roles = []
        for raw in data.get("roles", []):
            if isinstance(raw, str):
                roles.append(ThematicRoleSpec(role=ThetaRole.parse(raw)))
            else:
                roles.append(ThematicRoleSpec(
                    role=ThetaRole.parse(raw["type"]),
                    restrictions=tuple(
                        RoleRestriction.parse(r) for r in raw.get("restrictions", [])
                    ),
                ))
        theta_roles = tuple(roles) or inherited_roles

        frames = []
        for raw in data.get("frames", []):
            semantics = []
            for pred in raw.get("semantics", []):
                if isinstance(pred, str):
                    semantics.append(SemanticPredicate(name=pred.lower()))
                else:
                    semantics.append(SemanticPredicate(
                        name=str(pred["predicate"]).lower(),
                        event_time=pred.get("event"),
                        arguments=tuple(pred.get("args", [])),
                        negated=bool(pred.get("negated", False)),
                    ))
            syntax = raw.get("syntax", [])
            if isinstance(syntax, str):
                syntax = syntax.split()
            frames.append(SyntacticFrame(
                description=raw.get("description", ""),
                primary=raw.get("primary", ""),
                secondary=raw.get("secondary", ""),
                example=raw.get("example", ""),
                syntax=tuple(str(s) for s in syntax),
                semantics=tuple(semantics),
            ))

        subclasses = tuple(
            cls.from_dict(sub, inherited_roles=theta_roles)
            for sub in data.get("subclasses", [])
        )

        return cls(
            id=class_id,
            name=data.get("name", class_id.split("-")[0]),
            members=tuple(members),
            theta_roles=theta_roles,
            frames=tuple(frames),
            subclasses=subclasses,
        )
