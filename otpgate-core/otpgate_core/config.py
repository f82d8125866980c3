"""
OTPGate Configuration
=====================
Settings read from environment variables.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError
from .federation import FederationConfig
from .otp import OTPConfig
from .rate_limit import DEFAULT_RATE, DEFAULT_WINDOW_SECONDS
from .sweeper import DEFAULT_SWEEP_INTERVAL

TRUE_VALUES = {"1", "true", "yes", "on"}


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _str(env: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    value = env.get(name)
    return value if value else default


@dataclass
class GateConfig:
    """Configuration for an otpgate deployment."""
    service_name: str = "otpgate"
    log_level: str = "INFO"
    log_json: bool = True

    # State store; in-memory when unset
    redis_url: Optional[str] = None

    # Codes and admission control
    otp_expiry_seconds: int = 600
    otp_max_attempts: int = 3
    rate_limit_requests: int = DEFAULT_RATE
    rate_limit_window_seconds: int = DEFAULT_WINDOW_SECONDS
    sweep_interval_seconds: int = DEFAULT_SWEEP_INTERVAL

    # Delivery
    app_name: str = "OTPGate"
    email_from: Optional[str] = None
    resend_api_key: Optional[str] = None
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_phone_number: Optional[str] = None

    # Identity directory
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    supabase_anon_key: Optional[str] = None

    # Federated login
    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    backend_url: str = "http://localhost:3001"
    frontend_url: str = "http://localhost:3000"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GateConfig":
        """
        Build a config from environment variables.

        Raises:
            ConfigurationError: If a numeric setting is not an integer
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            service_name=_str(env, "SERVICE_NAME", defaults.service_name),
            log_level=_str(env, "LOG_LEVEL", defaults.log_level),
            log_json=env.get("LOG_JSON", "true").strip().lower() in TRUE_VALUES,
            redis_url=_str(env, "REDIS_URL"),
            otp_expiry_seconds=_int(env, "OTP_EXPIRY_SECONDS", defaults.otp_expiry_seconds),
            otp_max_attempts=_int(env, "OTP_MAX_ATTEMPTS", defaults.otp_max_attempts),
            rate_limit_requests=_int(env, "RATE_LIMIT_REQUESTS", defaults.rate_limit_requests),
            rate_limit_window_seconds=_int(
                env, "RATE_LIMIT_WINDOW_SECONDS", defaults.rate_limit_window_seconds,
            ),
            sweep_interval_seconds=_int(env, "SWEEP_INTERVAL_SECONDS", defaults.sweep_interval_seconds),
            app_name=_str(env, "APP_NAME", defaults.app_name),
            email_from=_str(env, "EMAIL_FROM"),
            resend_api_key=_str(env, "RESEND_API_KEY"),
            twilio_account_sid=_str(env, "TWILIO_ACCOUNT_SID"),
            twilio_auth_token=_str(env, "TWILIO_AUTH_TOKEN"),
            twilio_phone_number=_str(env, "TWILIO_PHONE_NUMBER"),
            supabase_url=_str(env, "SUPABASE_URL"),
            supabase_service_role_key=_str(env, "SUPABASE_SERVICE_ROLE_KEY"),
            supabase_anon_key=_str(env, "SUPABASE_ANON_KEY"),
            google_client_id=_str(env, "GOOGLE_CLIENT_ID"),
            google_client_secret=_str(env, "GOOGLE_CLIENT_SECRET"),
            backend_url=_str(env, "BACKEND_URL", defaults.backend_url),
            frontend_url=_str(env, "FRONTEND_URL", defaults.frontend_url),
        )

    def otp_config(self) -> OTPConfig:
        return OTPConfig(
            expiry_seconds=self.otp_expiry_seconds,
            max_attempts=self.otp_max_attempts,
        )

    def federation_config(self) -> FederationConfig:
        return FederationConfig(
            client_id=self.google_client_id,
            client_secret=self.google_client_secret,
            backend_url=self.backend_url,
            frontend_url=self.frontend_url,
            app_name=self.app_name,
        )

    @property
    def services(self) -> dict:
        """Which external collaborators are configured."""
        return {
            "supabase": bool(self.supabase_url),
            "resend": bool(self.resend_api_key),
            "twilio": bool(self.twilio_account_sid),
            "google": bool(self.google_client_id),
        }
