"""Basic and digest authentication material for RPC requests.

Digest hashes follow RFC 2617 with ``qop=auth`` and must match the device
firmware byte for byte:

    HA1      = H(username:realm:password)
    HA2      = H(method:uri)
    response = H(HA1:nonce:00000001:cnonce:auth:HA2)

``H`` is SHA-256 when the algorithm is ``"SHA-256"``. Empty, ``"MD5"`` and
unrecognized algorithms fall back to MD5, which older firmware expects.
"""

from __future__ import annotations

import hashlib
import secrets
from enum import Enum

from shellyrpc.errors import AuthValidationError
from shellyrpc.rpc.protocol import AuthData

ALGORITHM_MD5 = "MD5"
ALGORITHM_SHA256 = "SHA-256"

# Every digest is computed as a fresh challenge response, so nc is always 1.
DIGEST_NONCE_COUNT = 1
DIGEST_QOP = "auth"


class AuthMethod(Enum):
    """How a request is authenticated."""
    NONE = "none"
    BASIC = "basic"  # handled by the transport
    DIGEST = "digest"  # handled by the transport
    RPC = "rpc"  # carried in the request's auth block

    def __str__(self) -> str:
        return self.value


def _hash(data: str, algorithm: str) -> str:
    if algorithm == ALGORITHM_SHA256:
        return hashlib.sha256(data.encode("utf-8")).hexdigest()
    return hashlib.md5(data.encode("utf-8"), usedforsecurity=False).hexdigest()


def generate_cnonce() -> str:
    """Return a fresh 128-bit client nonce as 32 hex characters."""
    return secrets.token_hex(16)


def basic_auth(username: str, password: str) -> AuthData:
    return AuthData(username=username, password=password)


def calculate_ha1(username: str, password: str, realm: str, algorithm: str = "") -> str:
    """HA1 can be stored instead of the plaintext password."""
    return _hash(f"{username}:{realm}:{password}", algorithm)


def calculate_digest_response_from_ha1(
    ha1: str, nonce: str, cnonce: str, method: str, uri: str, algorithm: str = ""
) -> str:
    ha2 = _hash(f"{method}:{uri}", algorithm)
    return _hash(f"{ha1}:{nonce}:{DIGEST_NONCE_COUNT:08x}:{cnonce}:{DIGEST_QOP}:{ha2}", algorithm)


def calculate_digest_response(
    username: str,
    password: str,
    realm: str,
    nonce: str,
    cnonce: str,
    method: str,
    uri: str,
    algorithm: str = "",
) -> str:
    ha1 = calculate_ha1(username, password, realm, algorithm)
    return calculate_digest_response_from_ha1(ha1, nonce, cnonce, method, uri, algorithm)


def digest_auth(
    username: str,
    password: str,
    realm: str,
    nonce: str,
    method: str,
    uri: str,
    algorithm: str = "",
) -> AuthData:
    """Answer a server challenge (realm, nonce) with a fresh client nonce.

    The returned AuthData is single use: build a new one for every call.
    """
    cnonce = generate_cnonce()
    return AuthData(
        username=username,
        realm=realm,
        nonce=nonce,
        cnonce=cnonce,
        nc=DIGEST_NONCE_COUNT,
        algorithm=algorithm,
        response=calculate_digest_response(username, password, realm, nonce, cnonce, method, uri, algorithm),
    )


def digest_auth_from_ha1(
    username: str,
    ha1: str,
    realm: str,
    nonce: str,
    method: str,
    uri: str,
    algorithm: str = "",
) -> AuthData:
    """Same as :func:`digest_auth` but from a pre-computed HA1."""
    cnonce = generate_cnonce()
    return AuthData(
        username=username,
        realm=realm,
        nonce=nonce,
        cnonce=cnonce,
        nc=DIGEST_NONCE_COUNT,
        algorithm=algorithm,
        response=calculate_digest_response_from_ha1(ha1, nonce, cnonce, method, uri, algorithm),
    )


def auth_method_of(auth: AuthData | None) -> AuthMethod:
    if auth is None:
        return AuthMethod.NONE
    if auth.response:
        return AuthMethod.DIGEST
    return AuthMethod.BASIC


def validate_auth_data(auth: AuthData | None) -> None:
    """Raise AuthValidationError unless auth has every field its shape needs."""
    if auth is None:
        raise AuthValidationError("auth data is required")
    if not auth.username:
        raise AuthValidationError("username is required", field="username")
    if auth.response:
        if not auth.realm:
            raise AuthValidationError("realm is required for digest auth", field="realm")
        if not auth.nonce:
            raise AuthValidationError("nonce is required for digest auth", field="nonce")
        if not auth.cnonce:
            raise AuthValidationError("cnonce is required for digest auth", field="cnonce")
        if auth.nc <= 0:
            raise AuthValidationError("nc must be positive for digest auth", field="nc")
    elif not auth.password:
        raise AuthValidationError("password is required for basic auth", field="password")
