"""Application configuration via Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class KinematicsSettings(BaseSettings):
    """Landmark gating and joint-angle extraction settings."""

    model_config = SettingsConfigDict(env_prefix="KINEMATICS_")

    min_visibility: float = 0.5
    primary_side: Literal["right", "left"] = "right"


class PoseSettings(BaseSettings):
    """MediaPipe pose estimation settings."""

    model_config = SettingsConfigDict(env_prefix="POSE_", protected_namespaces=())

    model_complexity: Literal[0, 1, 2] = 1  # lite, full, heavy
    model_dir: str = "data/models"
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


class FusionSettings(BaseSettings):
    """IMU sensor fusion and live force estimation parameters."""

    model_config = SettingsConfigDict(env_prefix="FUSION_")

    complementary_alpha: float = 0.98
    force_smoothing_alpha: float = 0.8
    staleness_timeout_ms: float = 500.0
    live_window_capacity: int = 150
    gravity: float = 9.81
    # Readings further than this from 1 g carry body acceleration, not tilt
    tilt_gate_g: float = 0.3


class AnalysisSettings(BaseSettings):
    """Flight/contact phase detection and derivation parameters."""

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_")

    flight_force_fraction: float = 0.1
    min_flight_force_n: float = 20.0
    foot_lift_threshold: float = 0.02
    min_flight_ms: float = 50.0
    baseline_window_s: float = 0.5
    min_force_samples: int = 10


class AdviceSettings(BaseSettings):
    """Thresholds for the advice rule table."""

    model_config = SettingsConfigDict(env_prefix="ADVICE_")

    shallow_flexion_deg: float = 60.0
    deep_flexion_deg: float = 110.0
    low_rsi: float = 1.5
    high_rsi: float = 2.5
    asymmetry_risk_percent: float = 10.0


class StorageSettings(BaseSettings):
    """Result history storage."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    history_path: str = "data/history.json"
    history_key: str = "KINEMOTION_HISTORY_V1"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"
    file: str | None = None


class Settings(BaseSettings):
    """Root settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    kinematics: KinematicsSettings = Field(default_factory=KinematicsSettings)
    pose: PoseSettings = Field(default_factory=PoseSettings)
    fusion: FusionSettings = Field(default_factory=FusionSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    advice: AdviceSettings = Field(default_factory=AdviceSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings instance."""
    return Settings()
