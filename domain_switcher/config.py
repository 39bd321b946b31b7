from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    config_file: str = "config.yaml"
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
