from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    supabase_url: str
    supabase_key: str
    cache_ttl_seconds: float = 300.0
    http_timeout_seconds: float = 10.0
    log_level: str = "INFO"
