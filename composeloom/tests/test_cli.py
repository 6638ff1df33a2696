"""Tests for the composeloom command line."""

import pytest

from composeloom.__main__ import build_parser, main


COMPONENT = '''
export default {
  props: ['step'],
  data() {
    return { count: 0 };
  },
  methods: {
    inc() {
      this.count += this.step;
    }
  }
};
'''

VUE_COMPONENT = f'''<template>
  <button @click="inc">{{{{ count }}}}</button>
</template>

<script>
{COMPONENT}
</script>
'''


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in ("COMPOSELOOM_CONFIG", "COMPOSELOOM_MODE", "COMPOSELOOM_ADVISORY_TAG", "COMPOSELOOM_HOOK_PREFIX"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def component_file(tmp_path):
    path = tmp_path / "src" / "counter.js"
    path.parent.mkdir()
    path.write_text(COMPONENT, encoding="utf-8")
    return path


# =========================================================================
# Tests: Argument parsing
# =========================================================================

class TestParser:
    def test_start_arguments(self):
        args = build_parser().parse_args(["start", "useCounter", "-i", "a.js", "-o", "b.ts", "-f", "--mode", "sfc"])
        assert args.hook_name == "useCounter"
        assert args.input == "a.js"
        assert args.output == "b.ts"
        assert args.force is True
        assert args.mode == "sfc"

    def test_rejects_unknown_mode(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["start", "useX", "--mode", "class"])


# =========================================================================
# Tests: Single file
# =========================================================================

class TestSingleFile:
    def test_writes_composable(self, tmp_path, component_file):
        out = tmp_path / "out" / "useCounter.ts"
        assert main(["start", "useCounter", "-i", str(component_file), "-o", str(out)]) == 0
        code = out.read_text(encoding="utf-8")
        assert "export default function useCounter(__props: any) {" in code
        assert "count.value += props.step;" in code

    def test_requires_input_and_output(self, component_file):
        assert main(["start", "useCounter", "-i", str(component_file)]) == 1

    def test_missing_input(self, tmp_path):
        assert main(["start", "useX", "-i", str(tmp_path / "nope.js"), "-o", str(tmp_path / "x.ts")]) == 1

    def test_existing_output_needs_force(self, tmp_path, component_file):
        out = tmp_path / "useCounter.ts"
        out.write_text("keep", encoding="utf-8")
        assert main(["start", "useCounter", "-i", str(component_file), "-o", str(out)]) == 1
        assert out.read_text(encoding="utf-8") == "keep"
        assert main(["start", "useCounter", "-i", str(component_file), "-o", str(out), "-f"]) == 0
        assert "useCounter" in out.read_text(encoding="utf-8")

    def test_syntax_error_fails(self, tmp_path):
        broken = tmp_path / "broken.js"
        broken.write_text("export default { methods: { go() { this.x += } };", encoding="utf-8")
        assert main(["start", "useX", "-i", str(broken), "-o", str(tmp_path / "x.ts")]) == 1
        assert not (tmp_path / "x.ts").exists()

    def test_sfc_mode(self, tmp_path):
        source = tmp_path / "Counter.vue"
        source.write_text(VUE_COMPONENT, encoding="utf-8")
        out = tmp_path / "Counter.setup.vue"
        assert main(["start", "useCounter", "-i", str(source), "-o", str(out), "--mode", "sfc"]) == 0
        code = out.read_text(encoding="utf-8")
        assert code.startswith("<template>")
        assert '<script setup lang="ts">' in code
        assert "defineProps" in code


# =========================================================================
# Tests: Directory batch
# =========================================================================

class TestBatch:
    def test_mirrors_tree(self, tmp_path, component_file):
        nested = component_file.parent / "mixins" / "form.js"
        nested.parent.mkdir()
        nested.write_text("export default { data() { return { a: 1 }; } };", encoding="utf-8")
        (component_file.parent / "node_modules").mkdir()
        (component_file.parent / "node_modules" / "dep.js").write_text("export default {};", encoding="utf-8")

        out = tmp_path / "out"
        assert main(["start", "unused", "-i", str(component_file.parent), "-o", str(out)]) == 0
        assert (out / "counter.ts").exists()
        assert "export default function useForm() {" in (out / "mixins" / "form.ts").read_text(encoding="utf-8")
        assert not (out / "node_modules").exists()

    def test_one_bad_file_fails_batch(self, tmp_path, component_file):
        (component_file.parent / "bad.js").write_text("export default {", encoding="utf-8")
        out = tmp_path / "out"
        assert main(["start", "unused", "-i", str(component_file.parent), "-o", str(out)]) == 1
        assert (out / "counter.ts").exists()
