"""
HTTP transport for pulse-vue components.

`App` owns a FastAPI application exposing each registered component under its
virtual path:

- `GET  {prefix}/component/{vpath}` returns the JavaScript descriptor
- `POST {prefix}/update/{vpath}` runs one update cycle

Example:
    ```python
    import pulse_vue as pv

    app = pv.App()

    @app.component("counter", content=COUNTER_VUE)
    class Counter(pv.ViewModel):
        count: int = 0

        def increment(self):
            self.count += 1

    app.run()
    ```
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData
from starlette.datastructures import UploadFile as StarletteUploadFile

from pulse_vue.component import Component
from pulse_vue.config import DEFAULT_CONFIG, SerializationConfig
from pulse_vue.env import env as envvars
from pulse_vue.errors import (
	ArityMismatch,
	InvalidArgument,
	MalformedRequest,
	MethodExecutionFailed,
	MethodNotFound,
	UpdateError,
	report,
)
from pulse_vue.files import FileLookup
from pulse_vue.update import load_json
from pulse_vue.viewmodel import ViewModel

logger = logging.getLogger(__name__)

TViewModel = TypeVar("TViewModel", bound=type[ViewModel])

UPDATE_FIELDS = ("data", "props", "method", "parameters")

_STATUS_BY_ERROR: dict[type[UpdateError], int] = {
	MalformedRequest: 400,
	ArityMismatch: 400,
	InvalidArgument: 400,
	MethodNotFound: 404,
	MethodExecutionFailed: 500,
}


def _status_for(exc: UpdateError) -> int:
	for error_type, status in _STATUS_BY_ERROR.items():
		if isinstance(exc, error_type):
			return status
	return 500


def _error_body(code: str, message: str, details: dict[str, Any]) -> dict[str, Any]:
	return {"error": {"code": code, "message": message, "details": details}}


class App:
	"""Registry of components served over HTTP."""

	config: SerializationConfig
	api_prefix: str
	components: dict[str, Component]
	fastapi: FastAPI

	def __init__(
		self,
		components: Sequence[Component] | None = None,
		*,
		config: SerializationConfig = DEFAULT_CONFIG,
		api_prefix: str = "/_vue",
		fastapi: dict[str, Any] | None = None,
	) -> None:
		self.config = config
		self.api_prefix = api_prefix.rstrip("/")
		self.components = {}
		self.fastapi = FastAPI(**(fastapi or {}))
		for component in components or ():
			self.add(component)
		self._register_routes()

	def add(self, component: Component) -> Component:
		vpath = component.vpath.strip("/")
		if vpath in self.components:
			raise ValueError(f"A component is already registered at '{vpath}'")
		self.components[vpath] = component
		logger.debug("Registered %r", component)
		return component

	def component(
		self, vpath: str, content: str
	) -> Callable[[TViewModel], TViewModel]:
		"""Class decorator registering a view-model at `vpath`."""

		def decorator(view_model: TViewModel) -> TViewModel:
			self.add(Component(view_model, content, vpath, config=self.config))
			return view_model

		return decorator

	def get(self, vpath: str) -> Component | None:
		return self.components.get(vpath.strip("/"))

	def _register_routes(self) -> None:
		prefix = self.api_prefix

		@self.fastapi.exception_handler(UpdateError)
		async def update_error_handler(  # pyright: ignore[reportUnusedFunction]
			request: Request, exc: UpdateError
		) -> JSONResponse:
			report(exc, details={"path": request.url.path})
			return JSONResponse(
				_error_body(exc.code, str(exc), _jsonable(exc.details)),
				status_code=_status_for(exc),
			)

		@self.fastapi.get(f"{prefix}/health")
		def healthcheck():  # pyright: ignore[reportUnusedFunction]
			return {"health": "ok", "components": len(self.components)}

		@self.fastapi.get(f"{prefix}/component/{{vpath:path}}")
		def component_script(vpath: str):  # pyright: ignore[reportUnusedFunction]
			component = self.get(vpath)
			if component is None:
				return self._not_found(vpath)
			return Response(
				component.render_script(), media_type="application/javascript"
			)

		@self.fastapi.post(f"{prefix}/update/{{vpath:path}}")
		async def update(vpath: str, request: Request):  # pyright: ignore[reportUnusedFunction]
			"""
			POST /update/{vpath}
			Body (form or JSON): { data, props, method, parameters } plus file fields
			Returns: { update: {...}, script: string }
			"""
			component = self.get(vpath)
			if component is None:
				return self._not_found(vpath)

			content_type = request.headers.get("content-type", "")
			if content_type.startswith("application/json"):
				fields = await self._read_json(request)
				return JSONResponse(
					await run_in_threadpool(
						component.update_model,
						fields["data"],
						fields["props"],
						fields["method"] or "",
						_parameters(fields),
					)
				)

			form = await request.form()
			try:
				fields = self._read_form(form)
				files = FileLookup.from_form(form, exclude=UPDATE_FIELDS)
				result = await run_in_threadpool(
					component.update_model,
					fields["data"],
					fields["props"],
					fields["method"] or "",
					_parameters(fields),
					files,
				)
			finally:
				await form.close()
			return JSONResponse(result)

	async def _read_json(self, request: Request) -> dict[str, Any]:
		body = load_json(await request.body(), "body")
		if not isinstance(body, dict):
			raise MalformedRequest("Request body must be a JSON object")
		method = body.get("method")
		if method is not None and not isinstance(method, str):
			raise MalformedRequest("'method' must be a string")
		return {key: body.get(key) for key in UPDATE_FIELDS}

	def _read_form(self, form: FormData) -> dict[str, Any]:
		fields: dict[str, Any] = {}
		for key in UPDATE_FIELDS:
			value = form.get(key)
			if isinstance(value, StarletteUploadFile):
				raise MalformedRequest(f"'{key}' must be a form field, not a file")
			fields[key] = value
		return fields

	def _not_found(self, vpath: str) -> JSONResponse:
		logger.warning("No component registered at '%s'", vpath)
		return JSONResponse(
			_error_body(
				"component.not_found",
				f"No component registered at '{vpath}'",
				{"vpath": vpath},
			),
			status_code=404,
		)

	def run(self, host: str | None = None, port: int | None = None, **kwargs: Any):
		uvicorn.run(
			self.fastapi,
			host=host or envvars.host,
			port=port or envvars.port,
			**kwargs,
		)


def _parameters(fields: dict[str, Any]) -> Any:
	# Only an absent value defaults to no arguments; anything else is validated
	parameters = fields["parameters"]
	return () if parameters is None else parameters


def _jsonable(details: dict[str, Any]) -> dict[str, Any]:
	return {
		key: value
		if isinstance(value, (str, int, float, bool, type(None)))
		else repr(value)
		for key, value in details.items()
	}


__all__ = ["App"]
