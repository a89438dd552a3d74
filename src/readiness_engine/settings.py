"""Engine settings loaded from the environment.

Every value has a default so the engine runs with no configuration at all.
Overrides use the READINESS_ENGINE_ env prefix, for example
``READINESS_ENGINE_TOP_TOPIC_LIMIT=15``.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for readiness-engine.

    Limits and defaults applied by ReadinessEngine when it runs the full
    pipeline. The individual core functions take these as plain arguments
    and do not read settings themselves.

    Environment variable prefix: READINESS_ENGINE_
    """

    service_name: str = "readiness-engine"

    # Result shaping
    top_gap_limit: int = 5
    top_topic_limit: int = 10
    bubble_limit: int = 12

    # Recommendation metrics
    default_dimension_weight: float = 0.5
    default_dimension_color: str = "#64748b"

    # Narrative templating: raise on unknown placeholders instead of dropping them
    strict_templates: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(env_prefix="READINESS_ENGINE_")
