from typing import Mapping

from estimate_dashboard.config.serializable import Serializable

URL_ENV_VARS = ("SUPABASE_URL", "VITE_SUPABASE_URL")
TOKEN_ENV_VARS = ("SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY")


def _first_env(environ: Mapping[str, str], names: tuple[str, ...]) -> str:
    for name in names:
        value = environ.get(name, "").strip()
        if value:
            return value
    return ""


class Remote(Serializable):
    url: str = ""
    token: str = ""
    table: str = "estimates"
    timeout: float = 10.0
    seed_empty_remote: bool = False

    _env_url: str = ""
    _env_token: str = ""

    def apply_environment(self, environ: Mapping[str, str]) -> None:
        # Kept outside the serialized fields so credentials never land in config.toml.
        self._env_url = _first_env(environ, URL_ENV_VARS)
        self._env_token = _first_env(environ, TOKEN_ENV_VARS)

    @property
    def endpoint_url(self) -> str:
        return (self._env_url or self.url or "").rstrip("/")

    @property
    def access_token(self) -> str:
        return self._env_token or self.token or ""

    @property
    def configured(self) -> bool:
        return bool(self.endpoint_url and self.access_token)
