"""Transformer: regenerates a classified component in the Composition API.

Ten passes run in a fixed order. Each pass emits one text section and may
register names that strictly later passes resolve against:

     1. deps                 pass-through imports (+ synthesized 'vue' import)
     2. composed_behaviors   const { } = mixin();
     3. inputs               const props = defineProps({...})      -> Input
     4. state                const x = ref(...)                    -> State
     5. ambient_reads        const x = inject('x')                 -> AmbientRead
     6. derived_values       const x = computed(() => ...)         -> Computed
     7. methods              const x = (...) => {...}              -> Method
     8. watchers             watch(() => ..., handler, options)
     9. ambient_provides     provide('k', x)
    10. lifecycle            (() => {...})(); onMounted(() => {...})

The synthesized import list depends on what passes 2-10 used, so it is
built after them and prepended to the deps section.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Set, Tuple

import tree_sitter

from ..config import MigrationSettings
from ..constants import (
    AMBIENT_TEMPLATE,
    COMPOSED_TEMPLATE,
    CREATION_HOOKS,
    DEREF_HELPER,
    LIFECYCLE_MAP,
    PROPS_BINDING,
    PROPS_PARAMETER,
    VUE_MODULE,
    WATCH_OPTION_KEYS,
    WATCH_TARGET_TEMPLATE,
)
from .models import (
    Classification,
    ClassifiedMember,
    Diagnostic,
    DiagnosticKind,
    MemberRole,
    OutputMode,
    TransformOutput,
)
from .nodes import is_function, member_key, node_text, object_members, string_value, unwrap
from .registry import ClassificationRegistry
from .resolver import ReferenceResolver

logger = logging.getLogger(__name__)

PASS_ORDER = (
    "deps",
    "composed_behaviors",
    "inputs",
    "state",
    "ambient_reads",
    "derived_values",
    "methods",
    "watchers",
    "ambient_provides",
    "lifecycle",
)

_INDENT = "  "
_WORD_RE = re.compile(r"[A-Za-z0-9]+")


def upper_case_first(text: str) -> str:
    if not text:
        return text
    return text[0].upper() + text[1:]


def hook_name(raw: Optional[str], prefix: str = "use") -> str:
    """Composable function name: "bound-date" -> "useBoundDate".

    Names that already carry the prefix ("useForm") are kept.
    """
    words = _WORD_RE.findall(raw or "")
    if not words:
        return f"{prefix}Component"
    joined = words[0] + "".join(upper_case_first(w) for w in words[1:])
    if joined.startswith(prefix) and joined[len(prefix):len(prefix) + 1].isupper():
        return joined
    if joined[0].isdigit():
        joined = f"_{joined}"
    return prefix + upper_case_first(joined)


class Transformer:
    """Runs the ten generation passes over one Classification.

    Registries, the used-import set and the diagnostics list are created
    fresh by every ``transform`` call, so an instance never leaks names
    from one component into the next.
    """

    def __init__(self, settings: Optional[MigrationSettings] = None, mode: Optional[OutputMode] = None):
        self._settings = settings or MigrationSettings()
        self._mode = mode or OutputMode(self._settings.mode)
        self._indent = _INDENT if self._mode is OutputMode.COMPOSABLE else ""

    @property
    def mode(self) -> OutputMode:
        return self._mode

    def transform(
        self,
        classification: Classification,
        template: Optional[str] = None,
        styles: Tuple[str, ...] = (),
        name: Optional[str] = None,
    ) -> TransformOutput:
        """Generate Composition-API code for a classified component.

        Args:
            classification: Collector output
            template: Verbatim template fragment to pair with (SFC mode)
            styles: Verbatim style blocks to append (SFC mode)
            name: Name for the composable; defaults to the component's
                ``name`` option

        Returns:
            TransformOutput with the assembled code and per-pass sections
        """
        self._classification = classification
        self._registry = ClassificationRegistry()
        self._used: Set[str] = set()
        self._exposed: List[str] = []
        self._declared: Set[str] = set()
        self._diagnostics: List[Diagnostic] = list(classification.diagnostics)
        self._resolver = ReferenceResolver(
            classification.source, self._registry, self._settings, self._diagnostics, self._used,
        )

        passes: Dict[str, Callable[[], List[str]]] = {
            "deps": self._pass_dependencies,
            "composed_behaviors": self._pass_composed_behaviors,
            "inputs": self._pass_inputs,
            "state": self._pass_state,
            "ambient_reads": self._pass_ambient_reads,
            "derived_values": self._pass_derived_values,
            "methods": self._pass_methods,
            "watchers": self._pass_watchers,
            "ambient_provides": self._pass_ambient_provides,
            "lifecycle": self._pass_lifecycle,
        }

        chunks: Dict[str, List[str]] = {}
        for pass_name in PASS_ORDER:
            chunks[pass_name] = passes[pass_name]()
            logger.debug(f"Pass {pass_name}: {len(chunks[pass_name])} statement(s)")

        imports = sorted(self._used)
        if imports:
            chunks["deps"].insert(0, f"import {{ {', '.join(imports)} }} from '{VUE_MODULE}';")

        sections = {pass_name: "\n".join(chunks[pass_name]) for pass_name in PASS_ORDER}
        if self._mode is OutputMode.COMPOSABLE:
            code = self._assemble_composable(sections, name or classification.component_name)
        else:
            code = self._assemble_sfc(sections, template, styles)

        return TransformOutput(
            code=code,
            mode=self._mode,
            sections=sections,
            imports=imports,
            template=template,
            diagnostics=self._diagnostics,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _text(self, node: tree_sitter.Node) -> str:
        return node_text(node, self._classification.source)

    def _line(self, text: str) -> str:
        return f"{self._indent}{text}"

    def _members(self, role: MemberRole) -> List[ClassifiedMember]:
        return self._classification.members(role)

    def _use(self, *names: str) -> None:
        self._used.update(names)

    def _report(self, kind: DiagnosticKind, name: str, message: str, node: Optional[tree_sitter.Node] = None) -> None:
        line = node.start_point.row + 1 if node is not None else 0
        self._diagnostics.append(Diagnostic(kind=kind, name=name, message=message, line=line))

    def _register(self, role: MemberRole, name: str, exposed: bool = True) -> None:
        self._registry.register(role, name)
        if exposed and name not in self._exposed:
            self._exposed.append(name)

    def _claim(self, member: ClassifiedMember) -> bool:
        """Reserve a top-level binding; names bound by an earlier pass are skipped."""
        if member.name in self._declared:
            self._report(DiagnosticKind.UNSUPPORTED_SHAPE, member.name,
                         f"{member.role.value} redeclares a name already bound", member.node)
            return False
        self._declared.add(member.name)
        return True

    # =========================================================================
    # Passes
    # =========================================================================

    def _pass_dependencies(self) -> List[str]:
        return [self._text(m.node) for m in self._members(MemberRole.IMPORT_DEPENDENCY)]

    def _pass_composed_behaviors(self) -> List[str]:
        out = []
        for member in self._members(MemberRole.COMPOSED_BEHAVIOR):
            placeholder = COMPOSED_TEMPLATE.format(tag=self._settings.advisory_tag, name=member.name)
            out.append(self._line(f"const {{ {placeholder} }} = {member.name}();"))
        return out

    def _pass_inputs(self) -> List[str]:
        members = self._members(MemberRole.INPUT)
        if not members:
            return []

        if self._mode is OutputMode.SFC:
            entries = [
                self._text(m.node) if m.value_node is not None else f"{m.name}: null"
                for m in members
            ]
            lines = [self._line(f"const {PROPS_BINDING} = defineProps({{")]
            lines += [self._line(f"{_INDENT}{entry},") for entry in entries]
            lines.append(self._line("});"))
        else:
            placeholder = self._settings.placeholder_type
            lines = [self._line(f"const {PROPS_BINDING} = {PROPS_PARAMETER} as {{")]
            lines += [self._line(f"{_INDENT}{m.name}?: {placeholder};") for m in members]
            lines.append(self._line("};"))

        for member in members:
            self._register(MemberRole.INPUT, member.name, exposed=False)
        self._declared.add(PROPS_BINDING)
        return ["\n".join(lines)]

    def _pass_state(self) -> List[str]:
        out = []
        for member in filter(self._claim, self._members(MemberRole.STATE)):
            initial = self._resolver.render(member.value_node) if member.value_node is not None else "undefined"
            out.append(self._line(f"const {member.name} = ref({initial});"))
            self._use("ref")
            self._register(MemberRole.STATE, member.name)
        return out

    def _pass_ambient_reads(self) -> List[str]:
        out = []
        for member in filter(self._claim, self._members(MemberRole.AMBIENT_READ)):
            args = [member.source_key or f"'{member.name}'"]
            default = unwrap(member.default_node)
            if default is not None:
                args.append(self._text(member.default_node))
                if is_function(default):
                    # Vue 3 only calls a default factory when told to
                    args.append("true")
            advisory = AMBIENT_TEMPLATE.format(tag=self._settings.advisory_tag, name=member.name)
            out.append(self._line(advisory) + "\n" + self._line(f"const {member.name} = inject({', '.join(args)});"))
            self._use("inject")
            self._register(MemberRole.AMBIENT_READ, member.name)
        return out

    def _pass_derived_values(self) -> List[str]:
        members = [m for m in self._members(MemberRole.COMPUTED) if self._claim(m)]
        # Derived values may read each other regardless of declaration order
        for member in members:
            self._register(MemberRole.COMPUTED, member.name)
        out = []
        for member in members:
            rendered = self._resolver.render_callable(member.value_node)
            out.append(self._line(f"const {member.name} = computed({rendered.as_arrow()});"))
            self._use("computed")
        return out

    def _pass_methods(self) -> List[str]:
        members = [m for m in self._members(MemberRole.METHOD) if self._claim(m)]
        # Methods may call each other regardless of declaration order
        for member in members:
            self._register(MemberRole.METHOD, member.name)
        out = []
        for member in members:
            rendered = self._resolver.render_callable(member.value_node)
            out.append(self._line(f"const {member.name} = {rendered.as_arrow()};"))
        return out

    def _pass_watchers(self) -> List[str]:
        out = []
        for member in self._members(MemberRole.WATCHER):
            handler_node, options = self._watch_parts(member)
            if handler_node is None:
                continue
            handler = self._watch_handler(member, handler_node)
            if handler is None:
                continue
            args = [self._watch_source(member), handler]
            if options:
                args.append("{ " + ", ".join(options) + " }")
            out.append(self._line(f"watch({', '.join(args)});"))
            self._use("watch")
        return out

    def _pass_ambient_provides(self) -> List[str]:
        out = []
        for member in self._members(MemberRole.AMBIENT_PROVIDE):
            source_name = self._provided_name(member.value_node)
            role = self._registry.resolve(source_name) if source_name else None
            if role is MemberRole.STATE:
                value = source_name
            elif role is MemberRole.INPUT:
                value = f"{PROPS_BINDING}.{source_name}"
            else:
                self._report(DiagnosticKind.UNSUPPORTED_SHAPE, member.name,
                             "provided value is not this.<state field or input>", member.node)
                continue
            out.append(self._line(f"provide('{member.name}', {value});"))
            self._use("provide")
        return out

    def _pass_lifecycle(self) -> List[str]:
        creation, registered = [], []
        for member in self._members(MemberRole.LIFECYCLE):
            rendered = self._resolver.render_callable(member.value_node)
            if member.name in CREATION_HOOKS:
                creation.append(self._line(f"({rendered.as_arrow()})();"))
            else:
                hook = LIFECYCLE_MAP[member.name]
                registered.append(self._line(f"{hook}({rendered.as_arrow()});"))
                self._use(hook)
        return creation + registered

    # =========================================================================
    # Watcher / provide helpers
    # =========================================================================

    def _watch_parts(self, member: ClassifiedMember) -> Tuple[Optional[tree_sitter.Node], List[str]]:
        """Split a watcher into its handler node and pass-through options."""
        value = member.value_node
        if value.type != "object":
            return value, []

        handler, options = None, []
        for option in object_members(value):
            key = member_key(option, self._classification.source)
            if key == "handler":
                handler = option if option.type == "method_definition" else unwrap(option.child_by_field_name("value"))
            elif key in WATCH_OPTION_KEYS and option.type == "pair":
                options.append(f"{key}: {self._text(option.child_by_field_name('value'))}")
        if handler is None:
            self._report(DiagnosticKind.UNSUPPORTED_SHAPE, member.name, "watcher has no handler", member.node)
        return handler, options

    def _watch_handler(self, member: ClassifiedMember, handler: tree_sitter.Node) -> Optional[str]:
        if is_function(handler):
            return self._resolver.render_callable(handler).as_arrow()
        method = string_value(handler, self._classification.source)
        if method and self._registry.resolve(method) is MemberRole.METHOD:
            return method
        self._report(DiagnosticKind.UNSUPPORTED_SHAPE, member.name,
                     "watcher handler is neither a function nor a known method", member.node)
        return None

    def _watch_source(self, member: ClassifiedMember) -> str:
        """Observed expression: read inputs directly, dereference the rest."""
        root, _, rest = member.name.partition(".")
        path = f".{rest}" if rest else ""
        role = self._registry.resolve(root)
        if role is MemberRole.INPUT:
            return f"() => {PROPS_BINDING}.{root}{path}"
        if role in (MemberRole.STATE, MemberRole.AMBIENT_READ):
            self._use(DEREF_HELPER)
            return f"() => {DEREF_HELPER}({root}){path}"
        self._report(DiagnosticKind.UNRESOLVED_REFERENCE, member.name, "watch source is not declared", member.node)
        comment = WATCH_TARGET_TEMPLATE.format(tag=self._settings.advisory_tag, name=member.name)
        return f"{comment} () => this.{member.name}"

    def _provided_name(self, value: Optional[tree_sitter.Node]) -> Optional[str]:
        """Source name of `key: this.x`.

        Bare identifiers and shorthand entries name lexical variables, not
        component members, so they are not resolved.
        """
        value = unwrap(value)
        if value is not None and value.type == "member_expression":
            receiver = value.child_by_field_name("object")
            prop = value.child_by_field_name("property")
            if receiver is not None and receiver.type == "this" and prop is not None:
                return self._text(prop)
        return None

    # =========================================================================
    # Output assembly
    # =========================================================================

    @staticmethod
    def _join(sections: Dict[str, str], names) -> str:
        return "\n\n".join(sections[n] for n in names if sections[n])

    def _assemble_composable(self, sections: Dict[str, str], name: Optional[str]) -> str:
        function_name = hook_name(name, self._settings.hook_prefix)
        params = f"{PROPS_PARAMETER}: {self._settings.placeholder_type}" if sections["inputs"] else ""
        body = self._join(sections, PASS_ORDER[1:])

        parts = []
        if sections["deps"]:
            parts.append(sections["deps"] + "\n\n")
        parts.append(f"export default function {function_name}({params}) {{\n")
        if body:
            parts.append(body + "\n\n")
        parts.append(f"{_INDENT}return {{\n")
        parts.extend(f"{_INDENT * 2}{exposed},\n" for exposed in self._exposed)
        parts.append(f"{_INDENT}}};\n}}\n")
        return "".join(parts)

    def _assemble_sfc(self, sections: Dict[str, str], template: Optional[str], styles: Tuple[str, ...]) -> str:
        script = self._join(sections, PASS_ORDER)
        blocks = []
        if template:
            blocks.append(template)
        blocks.append(f'<script setup lang="ts">\n{script}\n</script>' if script else '<script setup lang="ts">\n</script>')
        blocks.extend(styles)
        return "\n\n".join(blocks) + "\n"
