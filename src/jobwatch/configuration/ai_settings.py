from typing import Any, Dict

from jobwatch.configuration.errors import ConfigurationError

DEFAULT_MODEL_ID = "meta-llama/Llama-3.2-3B-Instruct"
DEFAULT_API_KEY_ENV = "OPENAI_API_KEY"


class AISettings:
    """Helper exposing typed accessors for the ``ai_settings`` config section.

    Missing keys fall back to the compiled-in defaults, so an empty mapping is
    a valid configuration that talks to ``DEFAULT_MODEL_ID`` on the OpenAI
    default endpoint.
    """

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for `key` or `default` if missing."""
        return self.data.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        return self.data

    @property
    def model_id(self) -> str:
        val = self.data.get("model_id")
        return str(val) if val else DEFAULT_MODEL_ID

    @property
    def base_url(self) -> str | None:
        val = self.data.get("base_url")
        return str(val) if val else None

    @property
    def api_key_env(self) -> str:
        """Name of the environment variable holding the model-provider key."""
        val = self.data.get("api_key_env")
        return str(val) if val else DEFAULT_API_KEY_ENV

    @property
    def request_timeout_seconds(self) -> float | None:
        """Positive per-request bound, or None when unset.

        Raises:
            ConfigurationError: If the value is not a positive number.
        """
        val = self.data.get("request_timeout_seconds")
        if val is None or val == "":
            return None
        if isinstance(val, bool) or not isinstance(val, (int, float)) or val <= 0:
            raise ConfigurationError(f"'request_timeout_seconds' must be a positive number, got {val!r}")
        return float(val)

    @property
    def serialize_requests(self) -> bool:
        """Whether classification calls must reach the backend one at a time."""
        val = self.data.get("serialize_requests", False)
        if not isinstance(val, bool):
            raise ConfigurationError(f"'serialize_requests' must be true or false, got {val!r}")
        return val
