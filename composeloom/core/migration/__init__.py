# composeloom migration core - Options API -> Composition API
# Collector (classification) -> Transformer (ten ordered passes)

from .collector import Collector
from .engine import iter_component_files, migrate_file, migrate_source, output_path_for
from .models import (
    Classification,
    ClassifiedMember,
    Diagnostic,
    DiagnosticKind,
    MemberRole,
    OutputMode,
    TransformOutput,
)
from .registry import ClassificationRegistry
from .resolver import ReferenceResolver
from .transformer import PASS_ORDER, Transformer

__all__ = [
    "Classification",
    "ClassificationRegistry",
    "ClassifiedMember",
    "Collector",
    "Diagnostic",
    "DiagnosticKind",
    "MemberRole",
    "OutputMode",
    "PASS_ORDER",
    "ReferenceResolver",
    "TransformOutput",
    "Transformer",
    "iter_component_files",
    "migrate_file",
    "migrate_source",
    "output_path_for",
]
