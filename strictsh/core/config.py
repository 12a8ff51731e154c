from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class RuntimeConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STRICTSH_", case_sensitive=False)

    log_level: str = "info"
    log_format: str = "json"
    log_to_file: bool = False
    bash: str = "bash"
    export_shellopts: bool = True
    start_method: str | None = None
    arg_limit: int = 255


@lru_cache
def get_runtime_config() -> RuntimeConfig:
    return RuntimeConfig()
