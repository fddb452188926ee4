import json
from collections.abc import Iterable

from pulse_vue.config import DEFAULT_CONFIG, SerializationConfig
from pulse_vue.definition import ComponentDefinition

_JS_ESCAPES = {
	"\\": "\\\\",
	"'": "\\'",
	'"': '\\"',
	"\n": "\\n",
	"\r": "\\r",
	"\t": "\\t",
	"<": "\\u003c",
	">": "\\u003e",
	"&": "\\u0026",
	"\u2028": "\\u2028",
	"\u2029": "\\u2029",
}
_JS_ESCAPE_TABLE = str.maketrans(_JS_ESCAPES)


def encode_js_string(value: str) -> str:
	"""Escape `value` for use inside a single or double quoted JS string."""
	return value.translate(_JS_ESCAPE_TABLE)


def _quoted_names(names: Iterable[str], config: SerializationConfig) -> str:
	return ", ".join(f"'{config.json_name(name)}'" for name in names)


def render_script(
	definition: ComponentDefinition,
	vpath: str,
	config: SerializationConfig = DEFAULT_CONFIG,
) -> str:
	"""Emit the body of the component factory: `return { ...options }`.

	Methods call `this.$update(this, '<name>', [args])` on the client runtime,
	which posts to the update endpoint and applies the returned patch.
	"""
	out: list[str] = []
	write = out.append

	write("//\n")
	write(f'// Component: "{vpath}"\n')
	write("//\n")

	if definition.styles:
		write(f"Vue.$addStyle('{encode_js_string(''.join(definition.styles))}');\n")

	write("return {\n")

	if definition.props:
		write(f"  props: [{_quoted_names(definition.props, config)}],\n")

	# Only call the created hook when the view-model overrides it
	if definition.created_hook:
		write("  created: function() {\n")
		write(f"    this.{config.json_name('on_created')}();\n")
		write("  },\n")

	write(f"  template: '{encode_js_string(definition.template)}',\n")
	write(
		"  data: function() {\n"
		+ f"    return {json.dumps(definition.data, separators=(',', ':'))};\n"
		+ "  },\n"
	)

	if definition.methods:
		write("  methods: {\n")
		items = list(definition.methods.items())
		for index, (name, method) in enumerate(items):
			params = ", ".join(method.parameters)
			then = ""
			if method.post:
				then = (
					"\n          .then(function(vm) { (function() {"
					+ method.post
					+ "\n          }).call(vm); })"
				)
			pre = f"\n      {method.pre}" if method.pre else ""
			comma = "" if index == len(items) - 1 else ","
			write(
				f"    {config.json_name(name)}: function({params}) {{{pre}\n"
				+ f"      return this.$update(this, '{name}', [{params}]){then};\n"
				+ f"    }}{comma}\n"
			)
		write("  },\n")

	if definition.computed:
		write("  computed: {\n")
		items_c = list(definition.computed.items())
		for index, (name, expression) in enumerate(items_c):
			comma = "" if index == len(items_c) - 1 else ","
			write(
				f"    {config.json_name(name)}: function() {{\n"
				+ f"      {expression};\n"
				+ f"    }}{comma}\n"
			)
		write("  },\n")

	if definition.watch:
		write("  watch: {\n")
		items_w = list(definition.watch.items())
		for index, (watched, handler) in enumerate(items_w):
			comma = "" if index == len(items_w) - 1 else ","
			write(
				f"    {config.json_name(watched)}: {{\n"
				+ "      handler: function(v, o) {\n"
				+ "        if (this.$updating) return false;\n"
				+ f"        this.{config.json_name(handler)}(v, o);\n"
				+ "      },\n"
				+ "      deep: true\n"
				+ f"    }}{comma}\n"
			)
		write("  },\n")

	if definition.scripts:
		write("  mixins: [\n")
		for index, source in enumerate(definition.scripts):
			comma = "" if index == len(definition.scripts) - 1 else ","
			write(f"(function() {{\n{source}\n}})() || {{}}{comma}\n")
		write("  ],\n")

	write(f"  local: [{_quoted_names(definition.locals, config)}],\n")
	write(f"  vpath: '{encode_js_string(vpath)}'\n")
	write("}")
	return "".join(out)


__all__ = ["encode_js_string", "render_script"]
