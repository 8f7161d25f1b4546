from .session import (
    SessionUser,
    SessionVerificationError,
    SupabaseSessionVerifier,
    bearer_token,
    session_verifier_from_env,
)

__all__ = [
    "SessionUser",
    "SessionVerificationError",
    "SupabaseSessionVerifier",
    "bearer_token",
    "session_verifier_from_env",
]
