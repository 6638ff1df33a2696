"""Migration data models.

The collector produces a Classification; the transformer consumes it and
produces a TransformOutput. Classified members are views over tree-sitter
nodes, never copies of them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

import tree_sitter


class MemberRole(str, Enum):
    """Semantic role of a top-level component member."""

    STATE = "state"
    INPUT = "input"
    COMPUTED = "computed"
    AMBIENT_READ = "ambient_read"
    AMBIENT_PROVIDE = "ambient_provide"
    METHOD = "method"
    WATCHER = "watcher"
    LIFECYCLE = "lifecycle"
    COMPOSED_BEHAVIOR = "composed_behavior"
    IMPORT_DEPENDENCY = "import_dependency"


class OutputMode(str, Enum):
    """How the generated sections are assembled."""

    COMPOSABLE = "composable"
    """One exported ``useX()`` function returning every binding."""

    SFC = "sfc"
    """A ``<script setup>`` block paired with the original template."""


class DiagnosticKind(str, Enum):
    UNSUPPORTED_SHAPE = "unsupported_shape"
    UNRESOLVED_REFERENCE = "unresolved_reference"
    AMBIENT_DEREFERENCE = "ambient_dereference"
    MISSING_COMPONENT = "missing_component"


@dataclass(frozen=True)
class Diagnostic:
    """A structured record of something the engine could not fully migrate."""

    kind: DiagnosticKind
    name: str
    message: str
    line: int = 0  # 1-based line in the parsed script, 0 when unknown

    def __str__(self) -> str:
        where = f"line {self.line}: " if self.line else ""
        return f"{where}{self.kind.value} {self.name!r}: {self.message}"


@dataclass(frozen=True)
class ClassifiedMember:
    """A (name, role, node) triple plus normalised detail for some roles."""

    name: str
    role: MemberRole
    node: tree_sitter.Node
    value_node: Optional[tree_sitter.Node] = None  # Pair value, or the function node of a callable member
    source_key: Optional[str] = None  # Ambient reads: injection key as a JS expression
    default_node: Optional[tree_sitter.Node] = None  # Ambient reads: default

    @property
    def line(self) -> int:
        return self.node.start_point.row + 1


@dataclass
class Classification:
    """Collector output: one ordered bucket per role.

    Within a bucket a duplicate name replaces the earlier entry in place,
    mirroring object-literal overwrite semantics.
    """

    source: bytes
    component_name: Optional[str] = None
    buckets: Dict[MemberRole, List[ClassifiedMember]] = field(
        default_factory=lambda: {role: [] for role in MemberRole}
    )
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def add(self, member: ClassifiedMember) -> None:
        bucket = self.buckets[member.role]
        # Imports and composed behaviours are not keyed by a unique name
        if member.role not in (MemberRole.IMPORT_DEPENDENCY, MemberRole.COMPOSED_BEHAVIOR):
            for i, existing in enumerate(bucket):
                if existing.name == member.name:
                    bucket[i] = member
                    return
        bucket.append(member)

    def members(self, role: MemberRole) -> List[ClassifiedMember]:
        return self.buckets[role]

    def text(self, node: tree_sitter.Node) -> str:
        """Source text covered by a node."""
        return self.source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def report(self, kind: DiagnosticKind, name: str, message: str, node: Optional[tree_sitter.Node] = None) -> None:
        line = node.start_point.row + 1 if node is not None else 0
        self.diagnostics.append(Diagnostic(kind=kind, name=name, message=message, line=line))


@dataclass
class TransformOutput:
    """Generated text plus everything a caller needs to write it out."""

    code: str
    mode: OutputMode
    sections: Dict[str, str]  # Pass name -> emitted text, in pass order
    imports: List[str]  # Synthesized target-framework imports
    template: Optional[str] = None  # Verbatim template fragment, when present
    diagnostics: List[Diagnostic] = field(default_factory=list)
