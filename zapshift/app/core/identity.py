"""
Identity verification.

Turns an opaque bearer token into a verified identity. Production uses the
Firebase Admin SDK; local development and tests use HS256 tokens signed
with the application secret.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import firebase_admin
from fastapi import Request
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from starlette.concurrency import run_in_threadpool

from zapshift.app.core.config import Settings
from zapshift.app.core.exceptions import AuthenticationError
from zapshift.app.core.jwt import decode_identity_token

logger = logging.getLogger("zapshift.identity")


@dataclass(frozen=True)
class VerifiedIdentity:
    """Identity asserted by the provider for a single token."""
    uid: str
    email: str


class IdentityVerifier:
    """Interface for bearer token verification."""

    async def verify(self, token: str) -> VerifiedIdentity:
        raise NotImplementedError

    def close(self) -> None:
        pass


class FirebaseIdentityVerifier(IdentityVerifier):
    """Verifies Firebase ID tokens with the Admin SDK."""

    def __init__(
        self,
        credentials_path: Optional[str] = None,
        project_id: Optional[str] = None,
        check_revoked: bool = False,
    ):
        self.check_revoked = check_revoked
        if credentials_path:
            cred = credentials.Certificate(credentials_path)
        else:
            cred = credentials.ApplicationDefault()
        options = {"projectId": project_id} if project_id else None
        self._app = firebase_admin.initialize_app(cred, options, name="zapshift-auth")
        logger.info("Firebase Admin SDK initialized")

    async def verify(self, token: str) -> VerifiedIdentity:
        try:
            # verify_id_token fetches signing certificates over HTTP
            decoded = await run_in_threadpool(
                firebase_auth.verify_id_token,
                token,
                app=self._app,
                check_revoked=self.check_revoked,
            )
        except firebase_auth.RevokedIdTokenError:
            raise AuthenticationError("Token has been revoked")
        except firebase_auth.ExpiredIdTokenError:
            raise AuthenticationError("Token has expired")
        except firebase_auth.UserDisabledError:
            raise AuthenticationError("User account is disabled")
        except (firebase_auth.InvalidIdTokenError, firebase_auth.CertificateFetchError, ValueError) as e:
            logger.warning("Firebase token rejected: %s", type(e).__name__)
            raise AuthenticationError("Could not validate credentials")

        email = decoded.get("email")
        if not email:
            raise AuthenticationError("Token carries no email")
        return VerifiedIdentity(uid=decoded.get("uid") or decoded.get("sub", ""), email=email.lower())

    def close(self) -> None:
        firebase_admin.delete_app(self._app)


class JWTIdentityVerifier(IdentityVerifier):
    """Verifies locally signed HS256 tokens."""

    async def verify(self, token: str) -> VerifiedIdentity:
        payload = decode_identity_token(token)
        if payload is None:
            raise AuthenticationError("Could not validate credentials")

        email = payload.get("email")
        if not email:
            raise AuthenticationError("Token carries no email")
        return VerifiedIdentity(uid=str(payload.get("sub", "")), email=email.lower())


def build_identity_verifier(settings: Settings) -> IdentityVerifier:
    if settings.auth_provider == "firebase":
        return FirebaseIdentityVerifier(
            credentials_path=settings.firebase_credentials_path,
            project_id=settings.firebase_project_id,
            check_revoked=settings.firebase_check_revoked,
        )
    if settings.auth_provider == "jwt":
        logger.warning("Using local JWT identity tokens; do not enable in production")
        return JWTIdentityVerifier()
    raise ValueError(f"Unknown auth_provider: {settings.auth_provider!r}")


async def get_identity_verifier(request: Request) -> IdentityVerifier:
    """FastAPI dependency returning the application's identity verifier."""
    return request.app.state.identity_verifier
