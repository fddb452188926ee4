import os

ENV_PULSE_VUE_HOST = "PULSE_VUE_HOST"
ENV_PULSE_VUE_PORT = "PULSE_VUE_PORT"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8000


class EnvVars:
	"""Typed access to the environment variables read by pulse-vue."""

	def _get(self, key: str) -> str | None:
		return os.environ.get(key)

	@property
	def host(self) -> str:
		return self._get(ENV_PULSE_VUE_HOST) or DEFAULT_HOST

	@property
	def port(self) -> int:
		raw = self._get(ENV_PULSE_VUE_PORT)
		if not raw:
			return DEFAULT_PORT
		try:
			return int(raw)
		except ValueError as exc:
			raise ValueError(
				f"{ENV_PULSE_VUE_PORT} must be an integer, got {raw!r}"
			) from exc


env = EnvVars()


__all__ = ["ENV_PULSE_VUE_HOST", "ENV_PULSE_VUE_PORT", "EnvVars", "env"]
