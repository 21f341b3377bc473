"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables prefixed with OL_."""

    # Name matching
    fuzzy_match_threshold: float = 0.85
    pattern_match_threshold: float = 0.75
    transliteration_confidence: float = 0.9
    pattern_confidence_factor: float = 0.9

    # Inference
    sibling_confidence_discount: float = 0.9
    max_inference_depth: int | None = None

    # Resolution / batching
    max_candidates: int | None = None
    parallel_match_threshold: int = 500
    max_workers: int = 4

    model_config = {"env_file": ".env", "env_prefix": "OL_"}


def get_settings() -> Settings:
    """Return a fresh Settings instance."""
    return Settings()
