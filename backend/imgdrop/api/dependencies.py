"""
FastAPI dependencies.
"""
from fastapi import Request

from imgdrop.config import Settings
from imgdrop.storage.presign import CredentialIssuer


def get_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


def get_issuer(request: Request) -> CredentialIssuer:
    """
    Credential issuer built at startup.

    The lifespan refuses to start without one, so a missing issuer here
    means the app is being served without its lifespan having run.
    """
    issuer = getattr(request.app.state, "issuer", None)
    if issuer is None:
        raise RuntimeError("Credential issuer not initialized")
    return issuer
