"""Configuration models passed explicitly into the engine."""

from pydantic import Field

from suite_runner.models.base import Model

DEFAULT_SUCCESS_THRESHOLD = 90.0
DEFAULT_ORACLE_TIMEOUT = 120.0


class SessionContext(Model):
    """Identity of the acting user and the designated administrator."""

    acting_user_id: str = Field(..., description="Account driving the run")
    admin_id: str = Field(
        ..., description="Account receiving the administrative run alert"
    )


class FanOutPolicy(Model):
    """Policy applied when a completed run is turned into notifications."""

    success_threshold: float = Field(
        default=DEFAULT_SUCCESS_THRESHOLD,
        ge=0.0,
        le=100.0,
        description="Minimum pass rate (percent, inclusive) for a PASSED verdict",
    )
    notify_admin: bool = Field(
        default=True,
        description="Send an extra copy to the administrator, member or not",
    )


class EngineConfig(Model):
    """Engine-wide settings."""

    oracle_timeout: float = Field(
        default=DEFAULT_ORACLE_TIMEOUT,
        gt=0,
        description="Seconds before an oracle call is treated as failed",
    )
    fan_out: FanOutPolicy = Field(default_factory=FanOutPolicy)
