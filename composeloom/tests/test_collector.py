"""Unit tests for Collector: member classification.

Tests cover:
- Component discovery (export default, defineComponent, module.exports)
- State, input, computed, method, watcher and lifecycle buckets
- The three ambient-read shapes
- Composed-behaviour acceptance
- Unsupported shapes recorded as diagnostics, never raised
- Last-write-wins duplicates and determinism
"""

import pytest

from composeloom.core.ast_parser import parse_source
from composeloom.core.migration import Collector, DiagnosticKind, MemberRole


# ── Fixtures ──────────────────────────────────────────────────────────────


FORM_ITEM = '''
import validate from "../../table-item/validate-rules";
import { formEvent } from "../../table-item/index";

export default {
  name: "form-item",
  mixins: [validate, formEvent],
  components: {},
  data() {
    return { rowData: {}, loading: false };
  },
  inject: {
    formTable: {
      type: Object,
      default: () => ({})
    }
  },
  props: {
    item: { type: Object, default: () => ({}) },
    isDetail: { type: Boolean, default: false },
    handleFormTableValue: Function
  },
  mounted() {
    this.defaultInit();
  },
  computed: {
    hasErr() {
      return this.item.err;
    },
    label: function () {
      return this.item.label;
    }
  },
  methods: {
    async load(id) {
      await this.fetch(id);
    },
    defaultInit() {}
  },
  watch: {
    isDetail(value) {},
    rowData: {
      handler(value) {},
      deep: true
    },
    loading: "defaultInit"
  }
};
'''


def _collect(source: str, file_path: str = "component.js"):
    parsed = parse_source(source, file_path)
    return Collector().collect(parsed.tree, parsed.source)


def _names(classification, role):
    return [m.name for m in classification.members(role)]


# ── Tests: Discovery ──────────────────────────────────────────────────────


class TestComponentDiscovery:
    def test_export_default_object(self):
        result = _collect(FORM_ITEM)
        assert result.component_name == "form-item"
        assert _names(result, MemberRole.STATE) == ["rowData", "loading"]

    def test_define_component_wrapper(self):
        result = _collect("export default defineComponent({ data() { return { a: 1 }; } });")
        assert _names(result, MemberRole.STATE) == ["a"]

    def test_module_exports(self):
        result = _collect("module.exports = { methods: { go() {} } };")
        assert _names(result, MemberRole.METHOD) == ["go"]

    def test_named_mixin_constant(self):
        result = _collect("export const counter = { data() { return { n: 0 }; } };")
        assert _names(result, MemberRole.STATE) == ["n"]

    def test_missing_component_is_diagnostic(self):
        result = _collect("import a from 'a';\nconst x = 1;\n")
        assert _names(result, MemberRole.IMPORT_DEPENDENCY) == ["a"]
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.MISSING_COMPONENT]


# ── Tests: Buckets ────────────────────────────────────────────────────────


class TestBuckets:
    def test_imports_verbatim(self):
        result = _collect(FORM_ITEM)
        imports = result.members(MemberRole.IMPORT_DEPENDENCY)
        assert [m.name for m in imports] == ["../../table-item/validate-rules", "../../table-item/index"]
        assert result.text(imports[1].node) == 'import { formEvent } from "../../table-item/index";'

    def test_inputs_object_form(self):
        result = _collect(FORM_ITEM)
        assert _names(result, MemberRole.INPUT) == ["item", "isDetail", "handleFormTableValue"]

    def test_inputs_array_form(self):
        result = _collect("export default { props: ['size', 'color'] };")
        inputs = result.members(MemberRole.INPUT)
        assert [m.name for m in inputs] == ["size", "color"]
        assert all(m.value_node is None for m in inputs)

    def test_computed_accepts_shorthand_and_function_values(self):
        result = _collect(FORM_ITEM)
        assert _names(result, MemberRole.COMPUTED) == ["hasErr", "label"]

    def test_methods(self):
        result = _collect(FORM_ITEM)
        assert _names(result, MemberRole.METHOD) == ["load", "defaultInit"]

    def test_lifecycle(self):
        result = _collect(FORM_ITEM)
        assert _names(result, MemberRole.LIFECYCLE) == ["mounted"]

    def test_watchers(self):
        result = _collect(FORM_ITEM)
        watchers = result.members(MemberRole.WATCHER)
        assert [w.name for w in watchers] == ["isDetail", "rowData", "loading"]
        assert [w.value_node.type for w in watchers] == ["method_definition", "object", "string"]

    def test_composed_behaviors(self):
        result = _collect(FORM_ITEM)
        assert _names(result, MemberRole.COMPOSED_BEHAVIOR) == ["validate", "formEvent"]

    def test_unknown_options_ignored(self):
        result = _collect(FORM_ITEM)
        assert not [d for d in result.diagnostics if d.name == "components"]


# ── Tests: State block ────────────────────────────────────────────────────


class TestStateBlock:
    def test_arrow_returning_object(self):
        result = _collect("export default { data: () => ({ a: 1, b: [] }) };")
        assert _names(result, MemberRole.STATE) == ["a", "b"]

    def test_function_value(self):
        result = _collect("export default { data: function () { const x = 1; return { a: x }; } };")
        state = result.members(MemberRole.STATE)
        assert [m.name for m in state] == ["a"]
        assert result.text(state[0].value_node) == "x"

    def test_non_literal_return_ignored(self):
        result = _collect("export default { data() { return makeState(); } };")
        assert result.members(MemberRole.STATE) == []
        assert result.diagnostics[0].kind == DiagnosticKind.UNSUPPORTED_SHAPE

    def test_shorthand_fields_skipped(self):
        result = _collect("export default { data() { const a = 1; return { a, b: 2 }; } };")
        assert _names(result, MemberRole.STATE) == ["b"]
        assert [d.name for d in result.diagnostics] == ["a"]


# ── Tests: Ambient reads ──────────────────────────────────────────────────


class TestAmbientReads:
    def test_bare_names(self):
        result = _collect("export default { inject: ['theme', 'locale'] };")
        reads = result.members(MemberRole.AMBIENT_READ)
        assert [m.name for m in reads] == ["theme", "locale"]
        assert reads[0].source_key == "'theme'"
        assert reads[0].default_node is None

    def test_aliased_and_object_forms(self):
        source = '''
export default {
  inject: {
    theme: 'appTheme',
    size: { from: 'sizeKey', default: 10 },
    form: { default: () => ({}) }
  }
};
'''
        result = _collect(source)
        reads = {m.name: m for m in result.members(MemberRole.AMBIENT_READ)}
        assert list(reads) == ["theme", "size", "form"]
        assert reads["theme"].source_key == "'appTheme'"
        assert reads["size"].source_key == "'sizeKey'"
        assert result.text(reads["size"].default_node) == "10"
        assert reads["form"].source_key == "'form'"
        assert result.text(reads["form"].default_node) == "() => ({})"


# ── Tests: Unsupported shapes ─────────────────────────────────────────────


class TestUnsupportedShapes:
    def test_getter_setter_pair_skipped(self):
        source = '''
export default {
  computed: {
    full: {
      get() { return 1; },
      set(v) {}
    },
    half() { return 0.5; }
  }
};
'''
        result = _collect(source)
        assert _names(result, MemberRole.COMPUTED) == ["half"]
        assert [(d.kind, d.name) for d in result.diagnostics] == [(DiagnosticKind.UNSUPPORTED_SHAPE, "full")]

    def test_accessor_methods_skipped(self):
        result = _collect("export default { computed: { get total() { return 1; } } };")
        assert result.members(MemberRole.COMPUTED) == []

    def test_non_identifier_mixins_skipped(self):
        source = "export default { mixins: [mix, { data() { return {}; } }, factory()] };"
        result = _collect(source)
        assert _names(result, MemberRole.COMPOSED_BEHAVIOR) == ["mix"]
        assert len(result.diagnostics) == 2

    def test_dynamic_provide_key_skipped(self):
        result = _collect("export default { provide() { return { [key]: this.a, b: this.b }; } };")
        assert _names(result, MemberRole.AMBIENT_PROVIDE) == ["b"]
        assert result.diagnostics[0].kind == DiagnosticKind.UNSUPPORTED_SHAPE

    def test_non_identifier_names_skipped(self):
        source = '''
export default {
  props: ['my-prop', 'size'],
  data() {
    return { 'foo-bar': 1, 1: 2, 'quoted': 3 };
  },
  computed: { 'full-name'() { return 1; } },
  methods: { 'on-click'() {}, go() {} },
  inject: ['app-theme']
};
'''
        result = _collect(source)
        assert _names(result, MemberRole.INPUT) == ["size"]
        assert _names(result, MemberRole.STATE) == ["quoted"]
        assert result.members(MemberRole.COMPUTED) == []
        assert _names(result, MemberRole.METHOD) == ["go"]
        assert result.members(MemberRole.AMBIENT_READ) == []
        assert sorted(d.name for d in result.diagnostics) == sorted(
            ["my-prop", "foo-bar", "1", "full-name", "on-click", "app-theme"]
        )
        assert all(d.kind == DiagnosticKind.UNSUPPORTED_SHAPE for d in result.diagnostics)

    def test_never_raises_on_odd_shapes(self):
        source = "export default { data: 5, props: null, computed: [], methods: 'x', watch: { a: [f, g] } };"
        result = _collect(source)
        assert all(not members for role, members in result.buckets.items())
        assert result.diagnostics


# ── Tests: Duplicates & determinism ───────────────────────────────────────


class TestDuplicatesAndDeterminism:
    def test_last_write_wins_keeps_position(self):
        source = "export default { methods: { a() { return 1; }, b() {}, a() { return 2; } } };"
        result = _collect(source)
        methods = result.members(MemberRole.METHOD)
        assert [m.name for m in methods] == ["a", "b"]
        assert "return 2" in result.text(methods[0].node)

    def test_collect_is_deterministic(self):
        parsed = parse_source(FORM_ITEM, "form.js")
        collector = Collector()
        first = collector.collect(parsed.tree, parsed.source)
        second = collector.collect(parsed.tree, parsed.source)

        def snapshot(c):
            return {
                role: [(m.name, m.node.start_byte, m.node.end_byte, m.source_key) for m in members]
                for role, members in c.buckets.items()
            }

        assert snapshot(first) == snapshot(second)

    @pytest.mark.parametrize("file_path", ["mixin.ts", "Component.vue"])
    def test_typescript_sources(self, file_path):
        script = "export default { props: ['a'], methods: { go(x: number) { return x; } } };"
        source = f'<script lang="ts">\n{script}\n</script>\n' if file_path.endswith(".vue") else script
        result = _collect(source, file_path)
        assert _names(result, MemberRole.INPUT) == ["a"]
        assert _names(result, MemberRole.METHOD) == ["go"]
