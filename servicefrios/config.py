from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///data/servicefrios.db"
    generation_horizon_days: int = 30
    scan_concurrency: int = 1
    auto_generate: bool = False
    generate_hour: int = 2
    generate_minute: int = 0
    log_level: str = "INFO"

    class Config:
        env_prefix = "SERVICEFRIOS_"


settings = Settings()
