from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    PROJECT_NAME: str = "API aquafarm"
    DATABASE_URL: str = "sqlite:///./aquafarm.db"

    # Logs
    LOG_DIR: str = "/logs"
    LOG_JSON: bool = False
    LOG_FILE: bool = True

    # Nº de hilos para el recálculo masivo de métricas
    METRICS_MAX_WORKERS: int = 4


settings = Settings()
