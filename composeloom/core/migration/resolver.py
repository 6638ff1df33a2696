"""Reference resolver: rewrites `this.<name>` inside function bodies.

Every body is re-rendered from its tree-sitter node: unchanged subtrees are
copied byte-for-byte from the source and only the nodes below are replaced.

- `this.x`, x State or Computed  -> `x.value`
- `this.x`, x Input              -> `props.x`
- `this.x`, x AmbientRead        -> `x.value`
- `this.x`, x Method             -> `x`
- `this.$set` / `this.$delete`   -> `Reflect.set` / `Reflect.deleteProperty`
- `this.$nextTick`               -> `nextTick` (imported)
- anything else                  -> left as is, prefixed by one advisory comment

Nested non-arrow functions and classes rebind `this`, so nothing inside them
is resolved. Parameters without a type annotation get a placeholder type.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

import tree_sitter

from ..config import MigrationSettings
from ..constants import (
    BARE_SELF_TEMPLATE,
    DEFERRED_CALLS,
    DEREF_SUFFIX,
    NEXT_TICK,
    PROPS_BINDING,
    REFLECTIVE_CALLS,
    UNRESOLVED_TEMPLATE,
)
from .models import Diagnostic, DiagnosticKind, MemberRole
from .nodes import THIS_BINDING_TYPES, has_token, node_text
from .registry import ClassificationRegistry

logger = logging.getLogger(__name__)

_PATTERN_PARAMS = frozenset({"identifier", "object_pattern", "array_pattern"})
_TS_PARAMS = frozenset({"required_parameter", "optional_parameter"})


@dataclass
class RenderedCallable:
    """A function split into the parts the transformer re-assembles."""

    params: str  # Including parentheses
    body: str
    is_async: bool = False
    is_generator: bool = False

    @property
    def expression_body(self) -> bool:
        return not self.body.lstrip().startswith("{")

    def as_arrow(self) -> str:
        """`[async ](params) => body`, or a function expression for generators."""
        prefix = "async " if self.is_async else ""
        if self.is_generator:
            body = self.body if not self.expression_body else f"{{ return {self.body}; }}"
            return f"{prefix}function* {self.params} {body}"
        return f"{prefix}{self.params} => {self.body}"


class ReferenceResolver:
    """Renders function bodies with every self-reference made explicit.

    Args:
        source: Bytes addressed by the nodes being rendered
        registry: Names registered by the passes that ran so far
        settings: Advisory tag and parameter annotation settings
        diagnostics: List that unresolved references are appended to
        used_imports: Set that required target-framework names are added to
    """

    def __init__(
        self,
        source: bytes,
        registry: ClassificationRegistry,
        settings: MigrationSettings,
        diagnostics: List[Diagnostic],
        used_imports: Set[str],
    ):
        self._source = source
        self._registry = registry
        self._settings = settings
        self._diagnostics = diagnostics
        self._used_imports = used_imports

    # =========================================================================
    # Public API
    # =========================================================================

    def render(self, node: tree_sitter.Node) -> str:
        """Render any expression or statement with self-references resolved."""
        return self._render(node, True)

    def render_callable(self, fn: tree_sitter.Node) -> RenderedCallable:
        """Render a method shorthand, function expression or arrow function."""
        params_node = fn.child_by_field_name("parameters")
        single = fn.child_by_field_name("parameter")
        if params_node is not None:
            params = self._render(params_node, True)
        elif single is not None:
            params = f"({self._annotate(single, True)})"
        else:
            params = "()"

        body = fn.child_by_field_name("body")
        return RenderedCallable(
            params=params,
            body=self._render(body, True) if body is not None else "{}",
            is_async=has_token(fn, "async"),
            is_generator=has_token(fn, "*"),
        )

    def resolve_name(self, name: str) -> Optional[str]:
        """Explicit binding for a bare member name, or None if unknown."""
        role = self._registry.resolve(name)
        if role in (MemberRole.STATE, MemberRole.AMBIENT_READ):
            return f"{name}{DEREF_SUFFIX}"
        if role is MemberRole.INPUT:
            return f"{PROPS_BINDING}.{name}"
        if role is MemberRole.METHOD:
            return name
        return None

    # =========================================================================
    # Rendering
    # =========================================================================

    def _render(self, node: tree_sitter.Node, in_scope: bool) -> str:
        kind = node.type

        if in_scope:
            if kind == "member_expression":
                replaced = self._render_self_access(node)
                if replaced is not None:
                    return replaced
            elif kind == "this":
                self._report(DiagnosticKind.UNRESOLVED_REFERENCE, "this", "bare component instance reference", node)
                return f"{BARE_SELF_TEMPLATE.format(tag=self._settings.advisory_tag)} this"

        if self._settings.annotate_params:
            if kind == "formal_parameters":
                return self._render_parameters(node, in_scope)
            if kind == "arrow_function":
                single = node.child_by_field_name("parameter")
                if single is not None:
                    return self._splice(node, in_scope, {single.id: f"({self._annotate(single, in_scope)})"})

        return self._splice(node, in_scope and kind not in THIS_BINDING_TYPES)

    def _splice(self, node: tree_sitter.Node, in_scope: bool, overrides: Optional[Dict[int, str]] = None) -> str:
        """Copy a node's text, substituting each child with its rendering."""
        if not node.children:
            return node_text(node, self._source)
        parts = []
        prev = node.start_byte
        for child in node.children:
            parts.append(self._source[prev:child.start_byte].decode("utf-8", errors="replace"))
            if overrides and child.id in overrides:
                parts.append(overrides[child.id])
            else:
                parts.append(self._render(child, in_scope))
            prev = child.end_byte
        parts.append(self._source[prev:node.end_byte].decode("utf-8", errors="replace"))
        return "".join(parts)

    def _render_self_access(self, node: tree_sitter.Node) -> Optional[str]:
        receiver = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        if receiver is None or receiver.type != "this" or prop is None or prop.type != "property_identifier":
            return None

        name = node_text(prop, self._source)
        if name in DEFERRED_CALLS:
            self._used_imports.add(NEXT_TICK)
            return NEXT_TICK
        if name in REFLECTIVE_CALLS:
            return REFLECTIVE_CALLS[name]

        resolved = self.resolve_name(name)
        if resolved is not None:
            if self._registry.resolve(name) is MemberRole.AMBIENT_READ:
                self._report(DiagnosticKind.AMBIENT_DEREFERENCE, name,
                             f"assumes the injected value is a ref ({name}{DEREF_SUFFIX})", node)
            return resolved

        self._report(DiagnosticKind.UNRESOLVED_REFERENCE, name, "no declared member with this name", node)
        comment = UNRESOLVED_TEMPLATE.format(tag=self._settings.advisory_tag, name=name)
        return f"{comment} {node_text(node, self._source)}"

    # =========================================================================
    # Parameter annotations
    # =========================================================================

    def _render_parameters(self, node: tree_sitter.Node, in_scope: bool) -> str:
        overrides = {
            param.id: self._annotate(param, in_scope)
            for param in node.named_children
            if param.type != "comment"
        }
        return self._splice(node, in_scope, overrides)

    def _annotate(self, param: tree_sitter.Node, in_scope: bool) -> str:
        placeholder = self._settings.placeholder_type
        kind = param.type

        if kind in _PATTERN_PARAMS:
            return f"{self._render(param, in_scope)}: {placeholder}"
        if kind == "rest_pattern":
            return f"{self._render(param, in_scope)}: {placeholder}[]"
        if kind == "assignment_pattern":
            left = param.child_by_field_name("left")
            right = param.child_by_field_name("right")
            if left is not None and right is not None:
                return f"{self._render(left, in_scope)}: {placeholder} = {self._render(right, in_scope)}"
        if kind in _TS_PARAMS and param.child_by_field_name("type") is None:
            pattern = param.child_by_field_name("pattern")
            if pattern is not None:
                # Insert after the pattern, or after its `?` marker
                anchor = pattern
                for child in param.children:
                    if not child.is_named and child.type == "?":
                        anchor = child
                suffix = "[]" if pattern.type == "rest_pattern" else ""
                rendered = self._render(anchor, in_scope) + f": {placeholder}{suffix}"
                return self._splice(param, in_scope, {anchor.id: rendered})
        return self._render(param, in_scope)

    def _report(self, kind: DiagnosticKind, name: str, message: str, node: tree_sitter.Node) -> None:
        diagnostic = Diagnostic(kind=kind, name=name, message=message, line=node.start_point.row + 1)
        self._diagnostics.append(diagnostic)
        logger.debug(str(diagnostic))
