"""
Appliance Energy Configuration.

Settings are read from the environment; a local .env file is loaded
first when present.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

from appliance_energy.exceptions import ConfigurationError
from appliance_energy.models import AggregationPolicy


DEFAULT_BASE_URL = "https://data.energystar.gov/resource"


@dataclass
class EstimatorConfig:
    """Runtime configuration for partition retrieval."""

    base_url: str = DEFAULT_BASE_URL
    """Root of the partition resources; requests go to <base_url>/<id>.json."""

    app_token: Optional[str] = None
    """Optional Socrata application token, sent as X-App-Token."""

    timeout_seconds: float = 30.0
    """Total timeout for one partition request."""

    max_attempts: int = 1
    """Attempts per partition; 1 issues exactly one request."""

    retry_backoff_base: float = 2.0
    """Base of the exponential backoff between attempts."""

    failure_policy: AggregationPolicy = AggregationPolicy.BEST_EFFORT
    """Whether a failed partition is dropped or fails the whole fetch."""

    log_level: str = "INFO"
    """Logging level used by scripts."""

    @classmethod
    def from_env(cls) -> "EstimatorConfig":
        """Load configuration from environment variables."""
        load_dotenv()

        policy_name = os.getenv("ENERGY_STAR_FAILURE_POLICY", "best_effort").lower()
        try:
            policy = AggregationPolicy(policy_name)
        except ValueError as e:
            raise ConfigurationError(
                message=f"Unknown failure policy: {policy_name!r}",
                config_key="ENERGY_STAR_FAILURE_POLICY",
                original_error=e,
            )

        try:
            return cls(
                base_url=os.getenv("ENERGY_STAR_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
                app_token=os.getenv("ENERGY_STAR_APP_TOKEN") or None,
                timeout_seconds=float(os.getenv("ENERGY_STAR_TIMEOUT_SECONDS", "30")),
                max_attempts=int(os.getenv("ENERGY_STAR_MAX_ATTEMPTS", "1")),
                retry_backoff_base=float(os.getenv("ENERGY_STAR_RETRY_BACKOFF_BASE", "2.0")),
                failure_policy=policy,
                log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            )
        except ValueError as e:
            raise ConfigurationError(
                message=f"Invalid numeric setting: {e}",
                original_error=e,
            )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not self.base_url.startswith(("http://", "https://")):
            errors.append("base_url must be an http(s) URL")

        if self.timeout_seconds <= 0:
            errors.append("timeout_seconds must be positive")

        if self.max_attempts < 1:
            errors.append("max_attempts must be at least 1")

        if self.retry_backoff_base < 0:
            errors.append("retry_backoff_base must not be negative")

        return errors
