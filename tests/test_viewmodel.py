import datetime as dt
import warnings
from typing import ClassVar

import pytest
from pulse_vue.config import SerializationConfig
from pulse_vue.errors import MalformedRequest
from pulse_vue.viewmodel import Local, Prop, ViewModel, computed, mixin


class Profile(ViewModel):
	first_name: str = ""
	tags: list[str] = []
	step: Prop[int] = 1
	draft: Local[str] = ""
	updated_at: dt.datetime | None = None
	title = "Profile"

	full: ClassVar[str] = "ignored"
	upper = computed("return this.firstName.toUpperCase()")
	_secret: str = "hidden"

	def greet(self):
		pass


def test_fields_in_declaration_order():
	fields = Profile.fields()
	assert [f.name for f in fields] == [
		"first_name",
		"tags",
		"step",
		"draft",
		"updated_at",
		"title",
	]
	by_name = {f.name: f for f in fields}
	assert by_name["step"].prop and not by_name["step"].local
	assert by_name["draft"].local and not by_name["draft"].prop
	assert by_name["step"].annotation is int


def test_fields_are_inherited():
	class Extended(Profile):
		age: int = 0
		first_name: str = "Ada"

	fields = {f.name: f for f in Extended.fields()}
	assert list(fields)[-1] == "age"
	assert fields["first_name"].default == "Ada"
	assert Profile.fields()[0].default == ""


def test_defaults_are_copied_per_instance():
	a, b = Profile(), Profile()
	a.tags.append("x")
	assert b.tags == []
	assert Profile.tags == []


def test_unknown_constructor_values_are_rejected():
	with pytest.raises(TypeError):
		Profile(nope=1)


def test_from_json_binds_by_json_or_python_name():
	vm = Profile.from_json({"firstName": "Ada", "tags": ["a"], "updated_at": "2024-01-02T00:00:00"})
	assert vm.first_name == "Ada"
	assert vm.tags == ["a"]
	assert vm.updated_at == dt.datetime(2024, 1, 2)
	# missing fields keep their defaults, unknown keys are ignored
	assert vm.step == 1
	assert not hasattr(vm, "bogus")


def test_from_json_rejects_values_of_the_wrong_shape():
	with pytest.raises(MalformedRequest) as info:
		Profile.from_json({"tags": "not a list"})
	assert info.value.details["field"] == "tags"

	with pytest.raises(MalformedRequest):
		Profile.from_json(["not", "an", "object"])  # pyright: ignore[reportArgumentType]


def test_to_json_uses_camel_case_and_skips_local_fields():
	vm = Profile(first_name="Ada", updated_at=dt.datetime(2024, 1, 2, 3, 4))
	assert vm.to_json() == {
		"firstName": "Ada",
		"tags": [],
		"step": 1,
		"updatedAt": "2024-01-02T03:04:00",
		"title": "Profile",
	}
	assert vm.to_json(include_local=True)["draft"] == ""
	assert "first_name" in vm.to_json(SerializationConfig(camel_case=False))


def test_absorb_copies_raw_request_values_for_declared_fields():
	current: dict[str, object] = {}
	Profile().absorb(current, {"firstName": "Ada", "draft": "x", "other": 1})
	assert current == {"firstName": "Ada"}


def test_client_script_joins_queued_code_in_order():
	vm = Profile()
	assert vm.client_script() == ""
	vm.run_js("a()")
	vm.run_js("b()")
	assert vm.client_script() == "a()\nb()"


def test_dispose_runs_hook_once():
	calls: list[str] = []

	class Tracked(ViewModel):
		def on_dispose(self):
			calls.append("dispose")

	with Tracked() as vm:
		assert not vm.disposed
	assert vm.disposed
	vm.dispose()
	assert calls == ["dispose"]


def test_dispose_runs_when_the_block_raises():
	class Tracked(ViewModel):
		closed = False

		def on_dispose(self):
			self.closed = True

	vm = Tracked()
	with pytest.raises(RuntimeError):
		with vm:
			raise RuntimeError("boom")
	assert vm.closed


def test_mixins_accumulate():
	@mixin("return { a: 1 }")
	class First(ViewModel):
		pass

	@mixin("return { b: 2 }")
	class Second(First):
		pass

	assert Second.__vue_mixins__ == ("return { a: 1 }", "return { b: 2 }")
	assert First.__vue_mixins__ == ("return { a: 1 }",)


def test_prop_and_local_are_exclusive():
	class Broken(ViewModel):
		value: Prop[Local[int]] = 0

	with pytest.raises(TypeError):
		Broken.fields()


def test_fields_without_default_serialize_as_null_without_warnings():
	class Unset(ViewModel):
		count: int
		when: dt.date

	with warnings.catch_warnings():
		warnings.simplefilter("error")
		assert Unset().to_json() == {"count": None, "when": None}
