"""Configuration of a DTLS client or server and its validation."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from .certificate import Certificate, CertificateRequestInfo, ClientHelloInfo
from .cipher_suite import CipherSuite, parse_cipher_suites

KEY_LOG_LABEL_TLS12 = "CLIENT_RANDOM"
DEFAULT_MTU = 1200
DEFAULT_CONNECT_TIMEOUT = 30.0

CURVE_X25519 = 0x001D
CURVE_P256 = 0x0017
CURVE_P384 = 0x0018
DEFAULT_CURVES: tuple[int, ...] = (CURVE_X25519, CURVE_P256, CURVE_P384)

PSKCallback = Callable[[bytes | None], bytes]


class ClientAuthType(enum.IntEnum):
    """The server's policy for client authentication."""

    NO_CLIENT_CERT = 0
    REQUEST_CLIENT_CERT = 1
    REQUIRE_ANY_CLIENT_CERT = 2
    VERIFY_CLIENT_CERT_IF_GIVEN = 3
    REQUIRE_AND_VERIFY_CLIENT_CERT = 4


class ExtendedMasterSecretType(enum.IntEnum):
    """The policy for the Extended Master Secret extension."""

    REQUEST = 0
    REQUIRE = 1
    DISABLE = 2


class ConfigError(ValueError):
    """Base class of configuration errors."""


class NoConfigProvidedError(ConfigError):
    """No configuration was given."""

    def __init__(self) -> None:
        super().__init__("no config provided")


class IdentityNoPSKError(ConfigError):
    """A PSK identity hint was given without a PSK."""

    def __init__(self) -> None:
        super().__init__("PSK Identity Hint provided but PSK is nil")


class InvalidCertificateError(ConfigError):
    """A configured certificate has no chain."""

    def __init__(self) -> None:
        super().__init__("no certificate provided")


class InvalidPrivateKeyError(ConfigError):
    """A configured private key is of an unsupported type."""

    def __init__(self) -> None:
        super().__init__("invalid private key type")


class PSKAndIdentityMustBeSetForClientError(ConfigError):
    """A client with a PSK must also give its identity."""

    def __init__(self) -> None:
        super().__init__("PSK and PSK Identity Hint must both be set for client")


@dataclass
class Config:
    """Settings of a DTLS client or server; not to be changed once in use."""

    certificates: list[Certificate] = field(default_factory=list)
    cipher_suites: list[int] | None = None
    custom_cipher_suites: Sequence[CipherSuite] | None = None
    signature_schemes: list[int] = field(default_factory=list)
    srtp_protection_profiles: list[int] = field(default_factory=list)
    client_auth: ClientAuthType = ClientAuthType.NO_CLIENT_CERT
    extended_master_secret: ExtendedMasterSecretType = ExtendedMasterSecretType.REQUEST
    flight_interval: float = 0.0
    psk: PSKCallback | None = None
    psk_identity_hint: bytes | None = None
    insecure_skip_verify: bool = False
    insecure_hashes: bool = False
    verify_peer_certificate: Callable[[list[bytes], list[list[Any]]], None] | None = None
    verify_connection: Callable[[Any], None] | None = None
    root_cas: Sequence[Any] | None = None
    client_cas: Sequence[Any] | None = None
    server_name: str = ""
    logger: logging.Logger | None = None
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    mtu: int = 0
    replay_protection_window: int = 0
    key_log_writer: BinaryIO | None = None
    session_store: Any = None
    supported_protocols: list[str] = field(default_factory=list)
    elliptic_curves: list[int] = field(default_factory=list)
    get_certificate: Callable[[ClientHelloInfo], Certificate | None] | None = None
    get_client_certificate: Callable[[CertificateRequestInfo], Certificate] | None = None

    def include_certificate_suites(self) -> bool:
        """Whether certificate based suites are to be offered."""
        return (
            self.psk is None
            or bool(self.certificates)
            or self.get_certificate is not None
            or self.get_client_certificate is not None
        )


_SUPPORTED_KEYS = (ed25519.Ed25519PrivateKey, ec.EllipticCurvePrivateKey, rsa.RSAPrivateKey)


def validate_config(config: Config | None) -> list[CipherSuite]:
    """Check a configuration and return the cipher suites it allows."""
    if config is None:
        raise NoConfigProvidedError()
    if config.psk_identity_hint is not None and config.psk is None:
        raise IdentityNoPSKError()

    for cert in config.certificates:
        if not cert.chain:
            raise InvalidCertificateError()
        if cert.private_key is not None and not isinstance(cert.private_key, _SUPPORTED_KEYS):
            raise InvalidPrivateKeyError()

    return parse_cipher_suites(
        config.cipher_suites,
        config.custom_cipher_suites,
        config.include_certificate_suites(),
        config.psk is not None,
    )


def validate_client_config(config: Config | None) -> list[CipherSuite]:
    """Check a client configuration and return the cipher suites it allows."""
    if config is None:
        raise NoConfigProvidedError()
    if config.psk is not None and config.psk_identity_hint is None:
        raise PSKAndIdentityMustBeSetForClientError()
    return validate_config(config)