import logging

import pytest
from pulse_vue.config import DEFAULT_CONFIG, SerializationConfig
from pulse_vue.errors import (
	AmbiguousMethod,
	ArityMismatch,
	MethodExecutionFailed,
	MethodNotFound,
)
from pulse_vue.files import FileLookup
from pulse_vue.methods import MethodRegistry, RemoteMethod, resolve
from pulse_vue.viewmodel import ViewModel


class Base(ViewModel):
	count: int = 0

	def increment(self):
		self.count += 1

	def _protected_reset(self):
		self.count = 0

	def __secret(self):
		self.count = -1

	@staticmethod
	def helper():
		return 1

	@property
	def doubled(self):
		return self.count * 2

	async def fetch(self):
		self.count = 100

	def on_dispose(self):
		pass


class Child(Base):
	def set_count(self, value: int):
		self.count = value

	def increment(self):
		self.count += 2

	def explode(self):
		raise RuntimeError("boom")

	def on_created(self):
		self.count = 10


def test_registry_lists_public_and_protected_methods_in_declaration_order():
	registry = MethodRegistry(Child)
	assert [m.name for m in registry.methods] == [
		"increment",
		"_protected_reset",
		"set_count",
		"explode",
		"on_created",
	]


def test_private_static_async_and_framework_methods_are_not_callable():
	registry = MethodRegistry(Child)
	for name in (
		"_Base__secret",
		"__secret",
		"helper",
		"doubled",
		"fetch",
		"on_dispose",
		"dispose",
		"to_json",
		"run_js",
		"absorb",
	):
		assert name not in registry


def test_async_methods_are_skipped_with_a_warning(caplog: pytest.LogCaptureFixture):
	with caplog.at_level(logging.WARNING, logger="pulse_vue.methods"):
		MethodRegistry(Base)
	assert "Base.fetch is async" in caplog.text


def test_methods_are_reachable_by_camel_case_alias():
	registry = MethodRegistry.for_type(Child)
	assert registry.resolve("setCount") is registry.resolve("set_count")
	assert registry.resolve("_protectedReset").name == "_protected_reset"
	assert registry.resolve("onCreated").name == "on_created"


def test_camel_case_aliases_can_be_disabled():
	registry = MethodRegistry(Child, SerializationConfig(camel_case=False))
	assert "set_count" in registry
	assert "setCount" not in registry


def test_overrides_resolve_to_most_derived_method():
	method = resolve(Child, "increment")
	assert method.fn is Child.increment
	vm = Child()
	method.invoke(vm, [])
	assert vm.count == 2


def test_registry_is_cached_per_type_and_config():
	assert MethodRegistry.for_type(Child) is MethodRegistry.for_type(Child, DEFAULT_CONFIG)
	other = MethodRegistry.for_type(Child, SerializationConfig(camel_case=False))
	assert other is not MethodRegistry.for_type(Child)


def test_unknown_method_carries_its_name():
	with pytest.raises(MethodNotFound) as info:
		resolve(Child, "nope")
	assert info.value.name == "nope"
	assert "nope" in str(info.value)


def test_ambiguous_client_names_fail_when_the_registry_is_built():
	class Ambiguous(ViewModel):
		def set_status(self):
			pass

		def setStatus(self):
			pass

	with pytest.raises(AmbiguousMethod):
		MethodRegistry(Ambiguous)
	# Without aliases the names no longer collide
	registry = MethodRegistry(Ambiguous, SerializationConfig(camel_case=False))
	assert set(registry) == {"set_status", "setStatus"}


def test_required_keyword_only_parameters_are_rejected():
	class KeywordOnly(ViewModel):
		def save(self, *, force: bool):
			pass

	with pytest.raises(TypeError):
		MethodRegistry(KeywordOnly)


def test_parameter_specs_follow_the_signature():
	class Form(ViewModel):
		def submit(self, name: str, age: int, *extra, notify: bool = False):
			pass

	method = RemoteMethod.from_function("submit", Form.submit)
	assert method.parameter_names == ["name", "age"]
	assert [p.target for p in method.parameters] == [str, int]


def test_fewer_tokens_than_parameters_is_an_arity_mismatch():
	method = resolve(Child, "set_count")
	with pytest.raises(ArityMismatch) as info:
		method.invoke(Child(), [])
	assert info.value.details == {"method": "set_count", "expected": 1, "received": 0}


def test_extra_tokens_are_ignored():
	vm = Child()
	resolve(Child, "set_count").invoke(vm, [7, "ignored"], FileLookup.empty())
	assert vm.count == 7


def test_method_errors_are_wrapped():
	with pytest.raises(MethodExecutionFailed) as info:
		resolve(Child, "explode").invoke(Child(), [])
	assert isinstance(info.value.__cause__, RuntimeError)
	assert info.value.details["cause"] == "RuntimeError"
