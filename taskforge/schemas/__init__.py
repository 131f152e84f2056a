"""Request and payload schemas."""

from .auth import AuthInfo, AuthPayload, RegistrationRequest, SignInRequest

__all__ = ["AuthInfo", "AuthPayload", "RegistrationRequest", "SignInRequest"]
