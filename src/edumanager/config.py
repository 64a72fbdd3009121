from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # mongodb://host:27017/edumanager, database name is taken from the path
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000
    debug: bool = False
    cors_origins: list[str] = []
    static_path: str | None = None  # Directory with the prebuilt single-page UI (optional)
    database_timeout_ms: int = 5000  # Upper bound for every MongoDB round trip
    student_id_max_retries: int = 5
    reset_counter_on_empty: bool = True  # Reset the student id counter when the last student is deleted
    stale_student_indexes: list[str] = ["email_1"]  # Dropped on startup if present
    # Build metadata injected during Docker build via environment variables
    git_commit_hash: str = "unknown"
    build_time: str = "unknown"

    model_config = {
        "env_file": [".env"],
        "env_prefix": "EDUMANAGER_",
        "extra": "ignore",
    }
