"""Cipher suite registry, selection and filtering for DTLS 1.2."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

VERSION_DTLS12 = 0xFEFD


class CipherSuiteID(enum.IntEnum):
    """IANA identifiers of the cipher suites known to this package."""

    TLS_ECDHE_ECDSA_WITH_AES_128_CCM = 0xC0AC
    TLS_ECDHE_ECDSA_WITH_AES_128_CCM_8 = 0xC0AE
    TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256 = 0xC02B
    TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256 = 0xC02F
    TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384 = 0xC02C
    TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384 = 0xC030
    TLS_ECDHE_ECDSA_WITH_AES_256_CBC_SHA = 0xC00A
    TLS_ECDHE_RSA_WITH_AES_256_CBC_SHA = 0xC014
    TLS_PSK_WITH_AES_128_CCM = 0xC0A4
    TLS_PSK_WITH_AES_128_CCM_8 = 0xC0A8
    TLS_PSK_WITH_AES_256_CCM_8 = 0xC0A9
    TLS_PSK_WITH_AES_128_GCM_SHA256 = 0x00A8
    TLS_PSK_WITH_AES_128_CBC_SHA256 = 0x00AE
    TLS_ECDHE_PSK_WITH_AES_128_CBC_SHA256 = 0xC037


class AuthenticationType(enum.Enum):
    """How the peers authenticate during the handshake."""

    CERTIFICATE = enum.auto()
    PRE_SHARED_KEY = enum.auto()
    ANONYMOUS = enum.auto()


class KeyExchangeAlgorithm(enum.IntFlag):
    """Key exchange algorithms, combinable as a bit mask."""

    NONE = 0
    PSK = 1
    ECDHE = 2


class CertificateType(enum.IntEnum):
    """Client certificate types from the TLS registry."""

    RSA_SIGN = 1
    ECDSA_SIGN = 64


@dataclass(frozen=True)
class CipherSuite:
    """Description of one cipher suite."""

    id: int
    name: str
    authentication_type: AuthenticationType
    key_exchange_algorithm: KeyExchangeAlgorithm
    certificate_type: CertificateType | None = None
    hash_name: str = "sha256"
    ecc: bool = True

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TLSCipherSuite:
    """Summary of a cipher suite in the style of a TLS library listing."""

    id: int
    name: str
    supported_versions: tuple[int, ...] = (VERSION_DTLS12,)
    insecure: bool = False


@dataclass(frozen=True)
class CompressionMethod:
    """A compression method; 0 is the null method."""

    id: int = 0


class CipherSuiteError(ValueError):
    """Base class of cipher suite configuration errors."""


class InvalidCipherSuiteError(CipherSuiteError):
    """An unknown cipher suite identifier was requested."""

    def __init__(self, suite_id: int) -> None:
        self.suite_id = suite_id
        super().__init__(f"cipher suite with id 0x{suite_id & 0xFFFF:04X} is not valid")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, InvalidCipherSuiteError) and other.suite_id == self.suite_id

    def __hash__(self) -> int:
        return hash((InvalidCipherSuiteError, self.suite_id))


class NoAvailableCipherSuitesError(CipherSuiteError):
    """No cipher suite satisfies the configuration."""

    def __init__(self) -> None:
        super().__init__("connection can not be created, no cipher suites satisfy this config")


class NoAvailableCertificateCipherSuiteError(CipherSuiteError):
    """Certificates are configured but no certificate suite is available."""

    def __init__(self) -> None:
        super().__init__(
            "connection can not be created, no certificate based cipher suite is available"
        )


class NoAvailablePSKCipherSuiteError(CipherSuiteError):
    """A PSK is configured but no PSK suite is available."""

    def __init__(self) -> None:
        super().__init__("connection can not be created, no PSK cipher suite is available")


def _ecdhe(suite_id: CipherSuiteID, cert_type: CertificateType, hash_name: str = "sha256") -> CipherSuite:
    return CipherSuite(
        id=suite_id,
        name=suite_id.name,
        authentication_type=AuthenticationType.CERTIFICATE,
        key_exchange_algorithm=KeyExchangeAlgorithm.ECDHE,
        certificate_type=cert_type,
        hash_name=hash_name,
        ecc=True,
    )


def _psk(suite_id: CipherSuiteID) -> CipherSuite:
    return CipherSuite(
        id=suite_id,
        name=suite_id.name,
        authentication_type=AuthenticationType.PRE_SHARED_KEY,
        key_exchange_algorithm=KeyExchangeAlgorithm.PSK,
        ecc=False,
    )


_ID = CipherSuiteID
_ECDSA = CertificateType.ECDSA_SIGN
_RSA = CertificateType.RSA_SIGN

_SUITES: dict[CipherSuiteID, CipherSuite] = {
    _ID.TLS_ECDHE_ECDSA_WITH_AES_128_CCM: _ecdhe(_ID.TLS_ECDHE_ECDSA_WITH_AES_128_CCM, _ECDSA),
    _ID.TLS_ECDHE_ECDSA_WITH_AES_128_CCM_8: _ecdhe(_ID.TLS_ECDHE_ECDSA_WITH_AES_128_CCM_8, _ECDSA),
    _ID.TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256: _ecdhe(
        _ID.TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256, _ECDSA
    ),
    _ID.TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256: _ecdhe(_ID.TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256, _RSA),
    _ID.TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384: _ecdhe(
        _ID.TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384, _ECDSA, "sha384"
    ),
    _ID.TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384: _ecdhe(
        _ID.TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384, _RSA, "sha384"
    ),
    _ID.TLS_ECDHE_ECDSA_WITH_AES_256_CBC_SHA: _ecdhe(_ID.TLS_ECDHE_ECDSA_WITH_AES_256_CBC_SHA, _ECDSA),
    _ID.TLS_ECDHE_RSA_WITH_AES_256_CBC_SHA: _ecdhe(_ID.TLS_ECDHE_RSA_WITH_AES_256_CBC_SHA, _RSA),
    _ID.TLS_PSK_WITH_AES_128_CCM: _psk(_ID.TLS_PSK_WITH_AES_128_CCM),
    _ID.TLS_PSK_WITH_AES_128_CCM_8: _psk(_ID.TLS_PSK_WITH_AES_128_CCM_8),
    _ID.TLS_PSK_WITH_AES_256_CCM_8: _psk(_ID.TLS_PSK_WITH_AES_256_CCM_8),
    _ID.TLS_PSK_WITH_AES_128_GCM_SHA256: _psk(_ID.TLS_PSK_WITH_AES_128_GCM_SHA256),
    _ID.TLS_PSK_WITH_AES_128_CBC_SHA256: _psk(_ID.TLS_PSK_WITH_AES_128_CBC_SHA256),
    _ID.TLS_ECDHE_PSK_WITH_AES_128_CBC_SHA256: CipherSuite(
        id=_ID.TLS_ECDHE_PSK_WITH_AES_128_CBC_SHA256,
        name=_ID.TLS_ECDHE_PSK_WITH_AES_128_CBC_SHA256.name,
        authentication_type=AuthenticationType.PRE_SHARED_KEY,
        key_exchange_algorithm=KeyExchangeAlgorithm.PSK | KeyExchangeAlgorithm.ECDHE,
        ecc=True,
    ),
}

_DEFAULT_ORDER = (
    _ID.TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256,
    _ID.TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256,
    _ID.TLS_ECDHE_ECDSA_WITH_AES_256_CBC_SHA,
    _ID.TLS_ECDHE_RSA_WITH_AES_256_CBC_SHA,
    _ID.TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384,
    _ID.TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384,
)

_ALL_ORDER = (
    _ID.TLS_ECDHE_ECDSA_WITH_AES_128_CCM,
    _ID.TLS_ECDHE_ECDSA_WITH_AES_128_CCM_8,
    _ID.TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256,
    _ID.TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256,
    _ID.TLS_ECDHE_ECDSA_WITH_AES_256_CBC_SHA,
    _ID.TLS_ECDHE_RSA_WITH_AES_256_CBC_SHA,
    _ID.TLS_PSK_WITH_AES_128_CCM,
    _ID.TLS_PSK_WITH_AES_128_CCM_8,
    _ID.TLS_PSK_WITH_AES_256_CCM_8,
    _ID.TLS_PSK_WITH_AES_128_GCM_SHA256,
    _ID.TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384,
    _ID.TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384,
)


def cipher_suite_for_id(
    suite_id: int, custom_cipher_suites: Iterable[CipherSuite] | None = None
) -> CipherSuite | None:
    """Return the suite with this id, looking in the custom suites last."""
    try:
        return _SUITES[CipherSuiteID(suite_id)]
    except ValueError:
        pass
    for suite in custom_cipher_suites or ():
        if suite.id == suite_id:
            return suite
    return None


def cipher_suite_name(suite_id: int) -> str:
    """Return the standard name of a suite, or its id in hex if unknown."""
    suite = cipher_suite_for_id(suite_id)
    if suite is not None:
        return suite.name
    return f"0x{suite_id & 0xFFFF:04X}"


def default_cipher_suites() -> list[CipherSuite]:
    """Suites used when none are configured, in order of preference."""
    return [_SUITES[i] for i in _DEFAULT_ORDER]


def all_cipher_suites() -> list[CipherSuite]:
    """Every suite listed as implemented."""
    return [_SUITES[i] for i in _ALL_ORDER]


def cipher_suite_ids(suites: Iterable[CipherSuite]) -> list[int]:
    """The numeric ids of the given suites."""
    return [int(s.id) for s in suites]


def parse_cipher_suites(
    user_selected: Sequence[int] | None,
    custom_cipher_suites: Iterable[CipherSuite] | None,
    include_certificate_suites: bool,
    include_psk_suites: bool,
) -> list[CipherSuite]:
    """Resolve the configured suites and keep those usable with the credentials."""
    if user_selected is not None:
        suites: list[CipherSuite] = []
        for suite_id in user_selected:
            suite = cipher_suite_for_id(suite_id)
            if suite is None:
                raise InvalidCipherSuiteError(suite_id)
            suites.append(suite)
    else:
        suites = default_cipher_suites()

    if custom_cipher_suites is not None:
        suites = list(custom_cipher_suites) + suites

    found_certificate = found_psk = found_anonymous = False
    selected: list[CipherSuite] = []
    for suite in suites:
        auth = suite.authentication_type
        if include_certificate_suites and auth is AuthenticationType.CERTIFICATE:
            found_certificate = True
        elif include_psk_suites and auth is AuthenticationType.PRE_SHARED_KEY:
            found_psk = True
        elif auth is AuthenticationType.ANONYMOUS:
            found_anonymous = True
        else:
            continue
        selected.append(suite)

    if include_certificate_suites and not found_certificate and not found_anonymous:
        raise NoAvailableCertificateCipherSuiteError()
    if include_psk_suites and not found_psk:
        raise NoAvailablePSKCipherSuiteError()
    if not selected:
        raise NoAvailableCipherSuitesError()
    return selected


def _certificate_type_for_key(signing_key: Any) -> CertificateType | None:
    if isinstance(signing_key, (ed25519.Ed25519PrivateKey, ec.EllipticCurvePrivateKey)):
        return CertificateType.ECDSA_SIGN
    if isinstance(signing_key, rsa.RSAPrivateKey):
        return CertificateType.RSA_SIGN
    return None


def filter_cipher_suites_for_certificate(certificate: Any, suites: Sequence[CipherSuite]) -> list[CipherSuite]:
    """Drop certificate suites whose signature type does not fit the certificate's key."""
    if certificate is None:
        return list(suites)
    try:
        signing_key = certificate.private_key
    except AttributeError:
        return list(suites)
    if signing_key is None:
        return list(suites)
    cert_type = _certificate_type_for_key(signing_key)
    return [
        s
        for s in suites
        if s.authentication_type is not AuthenticationType.CERTIFICATE or s.certificate_type == cert_type
    ]


def cipher_suites() -> list[TLSCipherSuite]:
    """Implemented suites without known security issues."""
    return [TLSCipherSuite(id=int(s.id), name=s.name) for s in all_cipher_suites()]


def insecure_cipher_suites() -> list[TLSCipherSuite]:
    """Implemented suites with known security issues; there are none."""
    return []


def default_compression_methods() -> list[CompressionMethod]:
    """Only the null compression method."""
    return [CompressionMethod()]