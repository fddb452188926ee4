import json
import re

from pulse_vue.component import Component
from pulse_vue.definition import ComponentDefinition, MethodDefinition
from pulse_vue.render import encode_js_string, render_script
from pulse_vue.viewmodel import Local, Prop, ViewModel, computed, script, watch


class Todo(ViewModel):
	title: str = ""
	items: list[str] = []
	max_items: Prop[int] = 10
	editing: Local[bool] = False

	remaining = computed("return this.maxItems - this.items.length")

	@script(pre="if (!this.title) return;", post="this.title = '';")
	def add_item(self, title: str):
		self.items.append(title)

	@watch("max_items")
	def trim(self, value: int, old: int):
		del self.items[value:]

	def on_created(self):
		pass


def test_encode_js_string_escapes_quotes_and_markup():
	assert encode_js_string("it's \"x\"\n") == "it\\'s \\\"x\\\"\\n"
	assert encode_js_string("</script>") == "\\u003c/script\\u003e"
	assert encode_js_string("a\\b") == "a\\\\b"
	assert encode_js_string("\u2028") == "\\u2028"


def test_render_script_emits_component_options(counter_vue: str):
	js = Component(Todo, counter_vue, "todo/list").render_script()

	assert js.startswith('//\n// Component: "todo/list"\n//\n')
	assert "Vue.$addStyle('.counter { color: red; }');" in js
	assert "  props: ['maxItems'],\n" in js
	assert "    this.onCreated();\n" in js
	assert "  local: ['editing'],\n" in js
	assert js.rstrip().endswith("vpath: 'todo/list'\n}")

	data = re.search(r"data: function\(\) \{\n    return (.*);\n", js)
	assert data is not None
	assert json.loads(data.group(1)) == {"title": "", "items": [], "editing": False}


def test_methods_call_update_with_positional_arguments(counter_vue: str):
	js = Component(Todo, counter_vue, "todo").render_script()
	assert (
		"    addItem: function(title) {\n"
		+ "      if (!this.title) return;\n"
		+ "      return this.$update(this, 'add_item', [title])\n"
		+ "          .then(function(vm) { (function() {this.title = '';\n"
		+ "          }).call(vm); });\n"
		+ "    },\n"
	) in js
	assert "      return this.$update(this, 'on_created', []);\n" in js


def test_computed_watch_and_mixins(counter_vue: str):
	js = Component(Todo, counter_vue, "todo").render_script()
	assert "    remaining: function() {\n      return this.maxItems - this.items.length;\n" in js
	assert "    maxItems: {\n      handler: function(v, o) {\n" in js
	assert "        if (this.$updating) return false;\n" in js
	assert "        this.trim(v, o);\n" in js
	assert "  mixins: [\n(function() {\n" in js


def test_template_is_a_single_js_string(counter_vue: str):
	js = Component(Todo, counter_vue, "todo").render_script()
	line = next(l for l in js.splitlines() if l.startswith("  template: "))
	assert "\\n" in line
	assert "\\u003ctemplate v-if" in line


def test_minimal_definition_has_no_optional_sections():
	js = render_script(ComponentDefinition(template="<p>hi</p>"), "bare")
	for section in ("props:", "created:", "methods:", "computed:", "watch:", "mixins:"):
		assert section not in js
	assert "Vue.$addStyle" not in js
	assert "  template: '\\u003cp\\u003ehi\\u003c/p\\u003e',\n" in js
	assert "  local: [],\n" in js


def test_last_method_has_no_trailing_comma():
	definition = ComponentDefinition(
		template="<p/>",
		methods={"a": MethodDefinition(), "b": MethodDefinition(parameters=("x",))},
	)
	js = render_script(definition, "c")
	assert "    },\n    b: function(x) {" in js
	assert "      return this.$update(this, 'b', [x]);\n    }\n  },\n" in js
