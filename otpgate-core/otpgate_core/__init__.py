"""
OTPGate Core Library
====================
Passcode issuance and verification, per-identifier rate limiting, and the
federated login handshake for an authentication backend.
"""

__version__ = "0.1.0"

# Errors
from otpgate_core.errors import (
    OTPGateError,
    ValidationError,
    InvalidIdentifierError,
    InvalidCodeFormatError,
    WeakPasswordError,
    RateLimitExceeded,
    CollaboratorError,
    DeliveryError,
    DirectoryError,
    HandshakeError,
    FederationNotConfiguredError,
    ConfigurationError,
)

# Storage
from otpgate_core.storage import (
    StateStore,
    WindowDecision,
    InMemoryStateStore,
    RedisStateStore,
)

# Identifiers
from otpgate_core.identifiers import (
    Identifier,
    IdentifierKind,
    NumberingPlan,
    HAITI,
    parse_identifier,
    normalize_email,
    normalize_phone,
    format_phone,
    fingerprint,
)

# Rate Limiting
from otpgate_core.rate_limit import (
    SlidingWindowLimiter,
    RateLimitInfo,
    AdmissionVerdict,
)

# OTP
from otpgate_core.otp import (
    OTPLedger,
    OTPConfig,
    OTPPurpose,
    OTPRecord,
    VerificationStatus,
    VerificationResult,
    generate_otp,
    validate_code_format,
)

# Delivery
from otpgate_core.dispatch import (
    BaseDeliveryDispatcher,
    DeliveryResult,
    MessageComposer,
    OutboundMessage,
    ResendEmailDispatcher,
    TwilioSMSDispatcher,
)

# Identity Directory
from otpgate_core.directory import (
    IdentityDirectory,
    SupabaseDirectory,
    DirectoryUser,
    DirectorySession,
)

# Federation
from otpgate_core.federation import (
    FederationConfig,
    FederationHandshakeManager,
    GoogleIdentityProvider,
    HandshakeStart,
    HandshakeOutcome,
)

# Engine and Flows
from otpgate_core.engine import OTPLifecycleEngine, IssueOutcome
from otpgate_core.flows import (
    PasscodeSignIn,
    PasswordResetFlow,
    SendResult,
    SignInResult,
    ResetResult,
)

# Operations
from otpgate_core.sweeper import ExpirySweeper
from otpgate_core.config import GateConfig
from otpgate_core.log_setup import setup_logging, bind_request_context
from otpgate_core.health import create_health_router
from otpgate_core.bootstrap import build_services, OTPGateServices

__all__ = [
    "__version__",
    # Errors
    "OTPGateError",
    "ValidationError",
    "InvalidIdentifierError",
    "InvalidCodeFormatError",
    "WeakPasswordError",
    "RateLimitExceeded",
    "CollaboratorError",
    "DeliveryError",
    "DirectoryError",
    "HandshakeError",
    "FederationNotConfiguredError",
    "ConfigurationError",
    # Storage
    "StateStore",
    "WindowDecision",
    "InMemoryStateStore",
    "RedisStateStore",
    # Identifiers
    "Identifier",
    "IdentifierKind",
    "NumberingPlan",
    "HAITI",
    "parse_identifier",
    "normalize_email",
    "normalize_phone",
    "format_phone",
    "fingerprint",
    # Rate Limiting
    "SlidingWindowLimiter",
    "RateLimitInfo",
    "AdmissionVerdict",
    # OTP
    "OTPLedger",
    "OTPConfig",
    "OTPPurpose",
    "OTPRecord",
    "VerificationStatus",
    "VerificationResult",
    "generate_otp",
    "validate_code_format",
    # Delivery
    "BaseDeliveryDispatcher",
    "DeliveryResult",
    "MessageComposer",
    "OutboundMessage",
    "ResendEmailDispatcher",
    "TwilioSMSDispatcher",
    # Identity Directory
    "IdentityDirectory",
    "SupabaseDirectory",
    "DirectoryUser",
    "DirectorySession",
    # Federation
    "FederationConfig",
    "FederationHandshakeManager",
    "GoogleIdentityProvider",
    "HandshakeStart",
    "HandshakeOutcome",
    # Engine and Flows
    "OTPLifecycleEngine",
    "IssueOutcome",
    "PasscodeSignIn",
    "PasswordResetFlow",
    "SendResult",
    "SignInResult",
    "ResetResult",
    # Operations
    "ExpirySweeper",
    "GateConfig",
    "setup_logging",
    "bind_request_context",
    "create_health_router",
    "build_services",
    "OTPGateServices",
]
