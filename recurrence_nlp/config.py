from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Recurrence parser configuration."""

    # Ambiguous bare hours ("at 3") are biased into this daytime window.
    preferred_start_hour: int = 8
    preferred_end_hour: int = 19

    # Occurrences examined per exception specifier while reconciling EXDATEs.
    exception_scan_limit: int = 1000

    fallback_languages: list[str] = ["en"]

    log_level: str = "WARNING"

    model_config = {
        "env_prefix": "RECURRENCE_NLP_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


settings = Settings()
