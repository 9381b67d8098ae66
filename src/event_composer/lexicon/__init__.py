"""Lexical resources: verb-class inventory and lookup capabilities."""

from .models import (
    AspectualInfo,
    PredicateType,
    RoleRestriction,
    SelectionalRestriction,
    SemanticPredicate,
    SyntacticFrame,
    ThematicRoleSpec,
    ThetaRole,
    VerbClass,
    VerbMember,
)
from .resources import (
    FrameAnalysis,
    FrameInfo,
    LexicalResource,
    SenseAnalysis,
    StaticFrameResource,
    StaticSenseResource,
    VerbClassAnalysis,
    VerbClassResource,
)
from .verb_classes import VerbClassIndex

__all__ = [
    "AspectualInfo",
    "FrameAnalysis",
    "FrameInfo",
    "LexicalResource",
    "PredicateType",
    "RoleRestriction",
    "SelectionalRestriction",
    "SemanticPredicate",
    "SenseAnalysis",
    "StaticFrameResource",
    "StaticSenseResource",
    "SyntacticFrame",
    "ThematicRoleSpec",
    "ThetaRole",
    "VerbClass",
    "VerbClassAnalysis",
    "VerbClassIndex",
    "VerbClassResource",
    "VerbMember",
]
