"""Collector: classifies the members of an Options-API component.

Walks the component-definition object literal once and routes each top-level
option to a bucket by key name. Shapes the collector does not recognise are
left out of every bucket and recorded as diagnostics; a syntactically valid
tree never makes it raise.
"""

import logging
from typing import Callable, Dict, Optional

import tree_sitter

from ..constants import (
    COMPUTED_KEY,
    INJECT_KEY,
    INPUTS_KEY,
    LIFECYCLE_HOOKS,
    METHODS_KEY,
    MIXINS_KEY,
    NAME_KEY,
    PROVIDE_KEY,
    STATE_KEY,
    WATCH_KEY,
)
from .models import Classification, ClassifiedMember, DiagnosticKind, MemberRole
from .nodes import (
    is_accessor,
    is_function,
    is_identifier,
    member_key,
    node_text,
    object_members,
    returned_object,
    string_value,
    unwrap,
)

logger = logging.getLogger(__name__)

# Calls that wrap a component definition: defineComponent({...}), Vue.extend({...})
_WRAPPER_CALLS = frozenset({"defineComponent", "Vue.extend", "Vue.component", "extend"})


class Collector:
    """Classifies one component definition into role buckets.

    A Collector holds no state between calls; ``collect`` can be invoked
    any number of times and yields identical buckets for identical input.
    """

    def collect(self, tree: tree_sitter.Tree, source: bytes) -> Classification:
        """Classify the component defined in a parsed script.

        Args:
            tree: tree-sitter tree of the whole script
            source: The bytes the tree's offsets address

        Returns:
            Classification with one ordered bucket per role
        """
        classification = Classification(source=source)
        root = tree.root_node

        for child in root.named_children:
            if child.type == "import_statement":
                module = child.child_by_field_name("source")
                name = string_value(module, source) if module is not None else None
                classification.add(ClassifiedMember(
                    name=name or node_text(child, source),
                    role=MemberRole.IMPORT_DEPENDENCY,
                    node=child,
                ))

        component = self._find_component(root, source)
        if component is None:
            classification.report(
                DiagnosticKind.MISSING_COMPONENT, "<component>",
                "no component definition object found",
            )
            logger.debug("No component definition object found")
            return classification

        handlers: Dict[str, Callable[[tree_sitter.Node, Classification], None]] = {
            STATE_KEY: self._collect_state,
            INPUTS_KEY: self._collect_inputs,
            COMPUTED_KEY: self._collect_computed,
            METHODS_KEY: self._collect_methods,
            WATCH_KEY: self._collect_watchers,
            INJECT_KEY: self._collect_injects,
            PROVIDE_KEY: self._collect_provides,
            MIXINS_KEY: self._collect_mixins,
        }

        for member in object_members(component):
            key = member_key(member, source)
            if key is None:
                continue
            if key in LIFECYCLE_HOOKS:
                self._collect_lifecycle(key, member, classification)
            elif key == NAME_KEY and member.type == "pair":
                classification.component_name = string_value(member.child_by_field_name("value"), source)
            elif key in handlers:
                handlers[key](member, classification)

        logger.debug(
            "Collected "
            + ", ".join(f"{role.value}={len(members)}" for role, members in classification.buckets.items())
        )
        return classification

    # =========================================================================
    # Component discovery
    # =========================================================================

    def _find_component(self, root: tree_sitter.Node, source: bytes) -> Optional[tree_sitter.Node]:
        """Locate the component-definition object literal.

        Order: `export default`, `module.exports =`, then the first
        top-level `const x = {...}`.
        """
        fallback = None
        for child in root.named_children:
            if child.type == "export_statement":
                value = child.child_by_field_name("value")
                if value is None:
                    declaration = child.child_by_field_name("declaration")
                    if declaration is not None and fallback is None:
                        fallback = self._declared_object(declaration, source)
                    continue
                found = self._component_object(value, source)
                if found is not None:
                    return found
            elif child.type == "expression_statement" and child.named_children:
                expr = child.named_children[0]
                if expr.type == "assignment_expression":
                    left = expr.child_by_field_name("left")
                    if left is not None and node_text(left, source) in ("module.exports", "exports.default"):
                        found = self._component_object(expr.child_by_field_name("right"), source)
                        if found is not None:
                            return found
            elif child.type in ("lexical_declaration", "variable_declaration") and fallback is None:
                fallback = self._declared_object(child, source)
        return fallback

    def _declared_object(self, declaration: tree_sitter.Node, source: bytes) -> Optional[tree_sitter.Node]:
        for declarator in declaration.named_children:
            if declarator.type == "variable_declarator":
                found = self._component_object(declarator.child_by_field_name("value"), source)
                if found is not None:
                    return found
        return None

    @staticmethod
    def _component_object(node: Optional[tree_sitter.Node], source: bytes) -> Optional[tree_sitter.Node]:
        node = unwrap(node)
        if node is None:
            return None
        if node.type == "object":
            return node
        if node.type == "call_expression":
            callee = node.child_by_field_name("function")
            args = node.child_by_field_name("arguments")
            if callee is not None and args is not None and node_text(callee, source) in _WRAPPER_CALLS:
                for arg in args.named_children:
                    arg = unwrap(arg)
                    if arg is not None and arg.type == "object":
                        return arg
        return None

    # =========================================================================
    # Option handlers
    # =========================================================================

    @staticmethod
    def _option_value(member: tree_sitter.Node) -> Optional[tree_sitter.Node]:
        """Value of `key: value`, or the method itself for `key() {}`."""
        if member.type == "method_definition":
            return member
        if member.type == "pair":
            return unwrap(member.child_by_field_name("value"))
        return None

    def _object_or_factory(self, member: tree_sitter.Node) -> Optional[tree_sitter.Node]:
        """Object literal given directly or returned by a factory function."""
        value = self._option_value(member)
        if value is None:
            return None
        if value.type == "object":
            return value
        if is_function(value):
            return returned_object(value)
        return None

    @staticmethod
    def _bindable(name: str, node: tree_sitter.Node, out: Classification) -> bool:
        """Names become `const` declarations, so they must be identifiers."""
        if is_identifier(name):
            return True
        out.report(DiagnosticKind.UNSUPPORTED_SHAPE, name, "name is not a valid identifier", node)
        return False

    def _collect_state(self, member: tree_sitter.Node, out: Classification) -> None:
        returned = self._object_or_factory(member)
        if returned is None:
            out.report(DiagnosticKind.UNSUPPORTED_SHAPE, STATE_KEY,
                       "state block does not return an object literal", member)
            return
        for prop in object_members(returned):
            name = member_key(prop, out.source)
            if prop.type != "pair" or name is None:
                out.report(DiagnosticKind.UNSUPPORTED_SHAPE, name or node_text(prop, out.source),
                           "only simple key: value state fields are migrated", prop)
                continue
            if not self._bindable(name, prop, out):
                continue
            out.add(ClassifiedMember(
                name=name, role=MemberRole.STATE, node=prop,
                value_node=prop.child_by_field_name("value"),
            ))

    def _collect_inputs(self, member: tree_sitter.Node, out: Classification) -> None:
        value = self._option_value(member)
        if value is not None and value.type == "array":
            for element in value.named_children:
                name = string_value(element, out.source)
                if name is not None and self._bindable(name, element, out):
                    out.add(ClassifiedMember(name=name, role=MemberRole.INPUT, node=element))
            return
        if value is None or value.type != "object":
            out.report(DiagnosticKind.UNSUPPORTED_SHAPE, INPUTS_KEY, "props is not an object or array literal", member)
            return
        for prop in object_members(value):
            name = member_key(prop, out.source)
            if prop.type != "pair" or name is None or not self._bindable(name, prop, out):
                continue
            out.add(ClassifiedMember(
                name=name, role=MemberRole.INPUT, node=prop,
                value_node=prop.child_by_field_name("value"),
            ))

    def _collect_callables(self, member: tree_sitter.Node, out: Classification, role: MemberRole) -> None:
        """Shared by computed and methods: function pairs and method shorthand."""
        for prop in object_members(self._option_value(member)):
            name = member_key(prop, out.source)
            if name is None:
                continue
            if prop.type == "method_definition":
                if is_accessor(prop):
                    out.report(DiagnosticKind.UNSUPPORTED_SHAPE, name, "getter/setter members are not migrated", prop)
                    continue
                fn = prop
            elif prop.type == "pair":
                fn = unwrap(prop.child_by_field_name("value"))
                if not is_function(fn):
                    shape = "getter/setter pairs" if fn is not None and fn.type == "object" else "non-function values"
                    out.report(DiagnosticKind.UNSUPPORTED_SHAPE, name, f"{shape} are not migrated", prop)
                    continue
            else:
                continue
            if self._bindable(name, prop, out):
                out.add(ClassifiedMember(name=name, role=role, node=prop, value_node=fn))

    def _collect_computed(self, member: tree_sitter.Node, out: Classification) -> None:
        self._collect_callables(member, out, MemberRole.COMPUTED)

    def _collect_methods(self, member: tree_sitter.Node, out: Classification) -> None:
        self._collect_callables(member, out, MemberRole.METHOD)

    def _collect_lifecycle(self, name: str, member: tree_sitter.Node, out: Classification) -> None:
        fn = self._option_value(member)
        if not is_function(fn):
            out.report(DiagnosticKind.UNSUPPORTED_SHAPE, name, "lifecycle hook is not a function", member)
            return
        out.add(ClassifiedMember(name=name, role=MemberRole.LIFECYCLE, node=member, value_node=fn))

    def _collect_watchers(self, member: tree_sitter.Node, out: Classification) -> None:
        for prop in object_members(self._option_value(member)):
            name = member_key(prop, out.source)
            if name is None:
                continue
            handler = self._option_value(prop)
            if handler is None or not (is_function(handler) or handler.type in ("object", "string")):
                out.report(DiagnosticKind.UNSUPPORTED_SHAPE, name, "watcher handler shape is not supported", prop)
                continue
            out.add(ClassifiedMember(name=name, role=MemberRole.WATCHER, node=prop, value_node=handler))

    def _collect_injects(self, member: tree_sitter.Node, out: Classification) -> None:
        value = self._option_value(member)
        if value is not None and value.type == "array":
            for element in value.named_children:
                name = string_value(element, out.source)
                if name is not None and self._bindable(name, element, out):
                    out.add(ClassifiedMember(
                        name=name, role=MemberRole.AMBIENT_READ, node=element,
                        source_key=node_text(element, out.source),
                    ))
            return

        for prop in object_members(value):
            name = member_key(prop, out.source)
            if prop.type != "pair" or name is None or not self._bindable(name, prop, out):
                continue
            entry = unwrap(prop.child_by_field_name("value"))
            source_key = f"'{name}'"
            default = None
            if entry is not None and entry.type == "object":
                for option in object_members(entry):
                    option_name = member_key(option, out.source)
                    if option.type != "pair":
                        continue
                    if option_name == "from":
                        source_key = node_text(option.child_by_field_name("value"), out.source)
                    elif option_name == "default":
                        default = option.child_by_field_name("value")
            elif entry is not None:
                # Aliased form: local: 'sourceName' (or a symbol)
                source_key = node_text(entry, out.source)
            out.add(ClassifiedMember(
                name=name, role=MemberRole.AMBIENT_READ, node=prop,
                value_node=entry, source_key=source_key, default_node=default,
            ))

    def _collect_provides(self, member: tree_sitter.Node, out: Classification) -> None:
        provided = self._object_or_factory(member)
        if provided is None:
            out.report(DiagnosticKind.UNSUPPORTED_SHAPE, PROVIDE_KEY,
                       "provide is not an object literal", member)
            return
        for prop in object_members(provided):
            name = member_key(prop, out.source)
            if name is None:
                out.report(DiagnosticKind.UNSUPPORTED_SHAPE, node_text(prop, out.source),
                           "dynamic provide keys are not migrated", prop)
                continue
            value = prop.child_by_field_name("value") if prop.type == "pair" else prop
            out.add(ClassifiedMember(name=name, role=MemberRole.AMBIENT_PROVIDE, node=prop, value_node=value))

    def _collect_mixins(self, member: tree_sitter.Node, out: Classification) -> None:
        value = self._option_value(member)
        if value is None or value.type != "array":
            out.report(DiagnosticKind.UNSUPPORTED_SHAPE, MIXINS_KEY, "mixins is not an array", member)
            return
        for element in value.named_children:
            if element.type == "comment":
                continue
            if element.type != "identifier":
                out.report(DiagnosticKind.UNSUPPORTED_SHAPE, node_text(element, out.source),
                           "only named mixins are migrated", element)
                continue
            out.add(ClassifiedMember(
                name=node_text(element, out.source), role=MemberRole.COMPOSED_BEHAVIOR, node=element,
            ))
