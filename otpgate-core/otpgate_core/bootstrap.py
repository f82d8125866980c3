"""
Service Wiring
==============
Builds the full set of otpgate components from a ``GateConfig``.

Usage:
    config = GateConfig.from_env()
    setup_logging(config.service_name, config.log_level, config.log_json)
    services = build_services(config)

    app.include_router(services.health_router(version="1.0.0"))
    services.sweeper.start()
    ...
    await services.close()
"""

import time
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional

from fastapi import APIRouter
import structlog

from .config import GateConfig
from .directory import IdentityDirectory, SupabaseDirectory
from .dispatch import BaseDeliveryDispatcher, MessageComposer, ResendEmailDispatcher, TwilioSMSDispatcher
from .engine import OTPLifecycleEngine
from .errors import ConfigurationError
from .federation import FederationHandshakeManager, GoogleIdentityProvider
from .flows import PasscodeSignIn, PasswordResetFlow
from .health import create_health_router
from .identifiers import IdentifierKind
from .otp import OTPLedger
from .rate_limit import SlidingWindowLimiter
from .storage import InMemoryStateStore, RedisStateStore, StateStore
from .sweeper import ExpirySweeper

logger = structlog.get_logger(__name__)


def _require(config: GateConfig, fields: Mapping[str, str]) -> None:
    """Raise naming the first unset environment variable among ``fields``."""
    for attribute, env_name in fields.items():
        if not getattr(config, attribute):
            raise ConfigurationError(f"Missing required configuration: {env_name}")


@dataclass
class OTPGateServices:
    """Every component of a running deployment."""
    config: GateConfig
    store: StateStore
    ledger: OTPLedger
    limiter: SlidingWindowLimiter
    engine: OTPLifecycleEngine
    signin: PasscodeSignIn
    password_reset: PasswordResetFlow
    federation: FederationHandshakeManager
    sweeper: ExpirySweeper
    email_dispatcher: BaseDeliveryDispatcher
    sms_dispatcher: BaseDeliveryDispatcher
    directory: IdentityDirectory
    identity_provider: GoogleIdentityProvider

    def health_router(self, version: str = "1.0.0") -> APIRouter:
        return create_health_router(
            service_name=self.config.service_name,
            version=version,
            store=self.store,
            services=self.config.services,
        )

    async def close(self) -> None:
        """Stop the sweeper and release every client."""
        await self.sweeper.stop()
        await self.email_dispatcher.close()
        await self.sms_dispatcher.close()
        await self.directory.close()
        await self.identity_provider.aclose()
        await self.store.close()
        logger.info("otpgate services closed", service=self.config.service_name)


def build_store(config: GateConfig, clock: Callable[[], float] = time.time) -> StateStore:
    """Redis when ``REDIS_URL`` is set, otherwise process memory."""
    if config.redis_url:
        return RedisStateStore.from_url(config.redis_url, prefix=config.service_name, clock=clock)
    logger.warning("REDIS_URL not set, using in-memory state store")
    return InMemoryStateStore(clock=clock)


def build_services(
    config: GateConfig,
    *,
    store: Optional[StateStore] = None,
    email_dispatcher: Optional[BaseDeliveryDispatcher] = None,
    sms_dispatcher: Optional[BaseDeliveryDispatcher] = None,
    directory: Optional[IdentityDirectory] = None,
    identity_provider: Optional[GoogleIdentityProvider] = None,
    clock: Callable[[], float] = time.time,
) -> OTPGateServices:
    """
    Wire all components. Injected collaborators take precedence over config.

    Raises:
        ConfigurationError: If a collaborator is neither injected nor configured
    """
    if email_dispatcher is None:
        _require(config, {"resend_api_key": "RESEND_API_KEY", "email_from": "EMAIL_FROM"})
        email_dispatcher = ResendEmailDispatcher(config.resend_api_key, config.email_from)

    if sms_dispatcher is None:
        _require(config, {
            "twilio_account_sid": "TWILIO_ACCOUNT_SID",
            "twilio_auth_token": "TWILIO_AUTH_TOKEN",
            "twilio_phone_number": "TWILIO_PHONE_NUMBER",
        })
        sms_dispatcher = TwilioSMSDispatcher(
            config.twilio_account_sid,
            config.twilio_auth_token,
            from_number=config.twilio_phone_number,
        )

    if directory is None:
        _require(config, {
            "supabase_url": "SUPABASE_URL",
            "supabase_service_role_key": "SUPABASE_SERVICE_ROLE_KEY",
        })
        directory = SupabaseDirectory(
            config.supabase_url,
            config.supabase_service_role_key,
            anon_key=config.supabase_anon_key,
        )

    federation_config = config.federation_config()
    if identity_provider is None:
        identity_provider = GoogleIdentityProvider(federation_config)
    if not federation_config.is_configured:
        logger.warning("GOOGLE_CLIENT_ID not set, federated login disabled")

    if store is None:
        store = build_store(config, clock)
    otp_config = config.otp_config()

    ledger = OTPLedger(store, otp_config, clock=clock)
    limiter = SlidingWindowLimiter(
        store,
        rate=config.rate_limit_requests,
        window=config.rate_limit_window_seconds,
        clock=clock,
    )
    composer = MessageComposer(
        app_name=config.app_name,
        expiry_minutes=max(1, otp_config.expiry_seconds // 60),
    )
    engine = OTPLifecycleEngine(
        ledger,
        limiter,
        {IdentifierKind.EMAIL: email_dispatcher, IdentifierKind.PHONE: sms_dispatcher},
        composer,
    )
    federation = FederationHandshakeManager(
        store, federation_config, identity_provider, directory, clock=clock,
    )
    namespaces: Iterable[str] = (ledger.namespace, limiter.namespace, federation.namespace)
    sweeper = ExpirySweeper(store, namespaces, interval_seconds=config.sweep_interval_seconds)

    logger.info(
        "otpgate services built",
        service=config.service_name,
        store=store.name,
        **config.services,
    )
    return OTPGateServices(
        config=config,
        store=store,
        ledger=ledger,
        limiter=limiter,
        engine=engine,
        signin=PasscodeSignIn(engine, directory, clock=clock),
        password_reset=PasswordResetFlow(engine, directory),
        federation=federation,
        sweeper=sweeper,
        email_dispatcher=email_dispatcher,
        sms_dispatcher=sms_dispatcher,
        directory=directory,
        identity_provider=identity_provider,
    )
