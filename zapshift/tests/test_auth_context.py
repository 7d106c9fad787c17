"""
Unit tests for identity verification and the access predicates.
"""

import pytest
from firebase_admin import auth as firebase_auth

from zapshift.app.core.config import Settings
from zapshift.app.core.dependencies import AuthContext
from zapshift.app.core.exceptions import AuthenticationError
from zapshift.app.core.guards import can_access_owned, can_handle_parcel, has_role, is_admin
from zapshift.app.core.identity import (
    FirebaseIdentityVerifier,
    JWTIdentityVerifier,
    VerifiedIdentity,
    build_identity_verifier,
)
from zapshift.app.models.enums import UserRole


@pytest.fixture
def firebase_verifier(mocker):
    mocker.patch("zapshift.app.core.identity.credentials.ApplicationDefault")
    mocker.patch(
        "zapshift.app.core.identity.firebase_admin.initialize_app",
        return_value=mocker.sentinel.firebase_app,
    )
    return FirebaseIdentityVerifier(project_id="zapshift-test")


@pytest.mark.asyncio
async def test_firebase_token_is_verified(firebase_verifier, mocker):
    verify = mocker.patch(
        "zapshift.app.core.identity.firebase_auth.verify_id_token",
        return_value={"uid": "fb-123", "email": "Rider@ZapShift.test"},
    )

    identity = await firebase_verifier.verify("id-token")

    assert identity == VerifiedIdentity(uid="fb-123", email="rider@zapshift.test")
    verify.assert_called_once_with("id-token", app=mocker.sentinel.firebase_app, check_revoked=False)


@pytest.mark.asyncio
@pytest.mark.parametrize("error, message", [
    (firebase_auth.ExpiredIdTokenError("expired", None), "Token has expired"),
    (firebase_auth.InvalidIdTokenError("malformed"), "Could not validate credentials"),
    (ValueError("empty token"), "Could not validate credentials"),
])
async def test_firebase_rejections(firebase_verifier, mocker, error, message):
    mocker.patch("zapshift.app.core.identity.firebase_auth.verify_id_token", side_effect=error)

    with pytest.raises(AuthenticationError) as exc_info:
        await firebase_verifier.verify("id-token")

    assert exc_info.value.message == message
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_firebase_token_without_email(firebase_verifier, mocker):
    mocker.patch(
        "zapshift.app.core.identity.firebase_auth.verify_id_token",
        return_value={"uid": "phone-only-user"},
    )

    with pytest.raises(AuthenticationError):
        await firebase_verifier.verify("id-token")


def test_firebase_app_is_released_on_close(firebase_verifier, mocker):
    delete_app = mocker.patch("zapshift.app.core.identity.firebase_admin.delete_app")

    firebase_verifier.close()

    delete_app.assert_called_once_with(mocker.sentinel.firebase_app)


def test_build_identity_verifier():
    assert isinstance(build_identity_verifier(Settings(auth_provider="jwt")), JWTIdentityVerifier)

    with pytest.raises(ValueError):
        build_identity_verifier(Settings(auth_provider="ldap"))


# Predicates

ADMIN = AuthContext(uid="1", email="admin@zapshift.test", role=UserRole.ADMIN)
RIDER = AuthContext(uid="2", email="rider@zapshift.test", role=UserRole.RIDER)
GUEST = AuthContext(uid="3", email="guest@zapshift.test", role=None)


def test_has_role():
    assert has_role(RIDER, UserRole.RIDER)
    assert has_role(RIDER, UserRole.ADMIN, UserRole.RIDER)
    assert not has_role(RIDER, UserRole.ADMIN)
    assert not has_role(GUEST, UserRole.USER)
    assert is_admin(ADMIN) and not is_admin(RIDER)


def test_can_access_owned():
    assert can_access_owned(RIDER, "rider@zapshift.test")
    assert not can_access_owned(RIDER, "Rider@ZapShift.test")
    assert not can_access_owned(RIDER, "someone@zapshift.test")
    assert not can_access_owned(RIDER, None)
    assert can_access_owned(ADMIN, "someone@zapshift.test")
    assert can_access_owned(ADMIN, None)


def test_can_handle_parcel():
    assert can_handle_parcel(RIDER, "rider@zapshift.test")
    assert not can_handle_parcel(RIDER, "other.rider@zapshift.test")
    assert not can_handle_parcel(RIDER, None)
    assert not can_handle_parcel(GUEST, "rider@zapshift.test")
    assert can_handle_parcel(ADMIN, None)


def test_auth_context_is_immutable():
    with pytest.raises(AttributeError):
        RIDER.role = UserRole.ADMIN
