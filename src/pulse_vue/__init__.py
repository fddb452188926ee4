from .app import App
from .coerce import ParameterSpec, coerce_argument
from .component import Component
from .config import DEFAULT_CONFIG, SerializationConfig
from .definition import (
	ComponentDefinition,
	DefinitionProvider,
	MethodDefinition,
	parse_definition,
)
from .errors import (
	AmbiguousMethod,
	ArityMismatch,
	DefinitionError,
	InvalidArgument,
	MalformedRequest,
	MethodExecutionFailed,
	MethodNotFound,
	UpdateError,
)
from .files import FileLookup, UploadFile
from .json_compare import compare, json_equal, json_sort_key
from .merge import merge_json
from .methods import MethodRegistry, RemoteMethod, resolve
from .render import encode_js_string, render_script
from .update import UpdateRequest, UpdateResponse, diff, update_model
from .viewmodel import (
	Local,
	Prop,
	ViewModel,
	computed,
	mixin,
	script,
	watch,
)

__all__ = [
	"DEFAULT_CONFIG",
	"AmbiguousMethod",
	"App",
	"ArityMismatch",
	"Component",
	"ComponentDefinition",
	"DefinitionError",
	"DefinitionProvider",
	"FileLookup",
	"InvalidArgument",
	"Local",
	"MalformedRequest",
	"MethodDefinition",
	"MethodExecutionFailed",
	"MethodNotFound",
	"MethodRegistry",
	"ParameterSpec",
	"Prop",
	"RemoteMethod",
	"SerializationConfig",
	"UpdateError",
	"UpdateRequest",
	"UpdateResponse",
	"UploadFile",
	"ViewModel",
	"coerce_argument",
	"compare",
	"computed",
	"diff",
	"encode_js_string",
	"json_equal",
	"json_sort_key",
	"merge_json",
	"mixin",
	"parse_definition",
	"render_script",
	"resolve",
	"script",
	"update_model",
	"watch",
]
