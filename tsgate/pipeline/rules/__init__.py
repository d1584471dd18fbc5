"""Structural rules checked by the traversal engine."""

from .base import Rule, RuleContext
from .brackets import CurlyBracketsStructure
from .classes import ProhibitNonFinalClasses, ProtectedMethodInFinalClass
from .javadoc import JavadocParameterOrder
from .methods import NonStaticMethod, ProhibitUnusedPrivateConstructor
from .ordering import DeclarationOrder
from .records import RecordValidation
from .registry import DEFAULT_RULES, RULES, RuleRegistry, build_registry, registry_from_settings

__all__ = [
    "CurlyBracketsStructure",
    "DEFAULT_RULES",
    "DeclarationOrder",
    "JavadocParameterOrder",
    "NonStaticMethod",
    "ProhibitNonFinalClasses",
    "ProhibitUnusedPrivateConstructor",
    "ProtectedMethodInFinalClass",
    "RULES",
    "RecordValidation",
    "Rule",
    "RuleContext",
    "RuleRegistry",
    "build_registry",
    "registry_from_settings",
]
