"""Preparation of the settings a DTLS connection negotiates with."""

from __future__ import annotations

import ipaddress
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from .certificate import CertificateRequestInfo, CertificateSelector, ClientHelloInfo, NoCertificatesError
from .cipher_suite import CipherSuite, filter_cipher_suites_for_certificate
from .config import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_CURVES,
    DEFAULT_MTU,
    ClientAuthType,
    Config,
    ExtendedMasterSecretType,
    validate_client_config,
    validate_config,
)

INITIAL_TICKER_INTERVAL = 1.0
COOKIE_LENGTH = 20
SESSION_LENGTH = 32
INBOUND_BUFFER_SIZE = 8192
DEFAULT_REPLAY_PROTECTION_WINDOW = 64

_RESERVED_KEYING_LABELS = frozenset(
    {"client finished", "server finished", "master secret", "key expansion"}
)


@dataclass
class HandshakeSettings:
    """Everything the handshake of one connection needs from its configuration."""

    is_client: bool
    cipher_suites: list[CipherSuite]
    certificate_selector: CertificateSelector
    psk: Callable[[bytes | None], bytes] | None = None
    psk_identity_hint: bytes | None = None
    signature_schemes: list[int] = field(default_factory=list)
    extended_master_secret: ExtendedMasterSecretType = ExtendedMasterSecretType.REQUEST
    srtp_protection_profiles: list[int] = field(default_factory=list)
    server_name: str = ""
    supported_protocols: list[str] = field(default_factory=list)
    client_auth: ClientAuthType = ClientAuthType.NO_CLIENT_CERT
    insecure_skip_verify: bool = False
    verify_peer_certificate: Callable[..., None] | None = None
    verify_connection: Callable[[Any], None] | None = None
    root_cas: Sequence[Any] | None = None
    client_cas: Sequence[Any] | None = None
    custom_cipher_suites: Sequence[CipherSuite] | None = None
    retransmit_interval: float = INITIAL_TICKER_INTERVAL
    mtu: int = DEFAULT_MTU
    replay_protection_window: int = DEFAULT_REPLAY_PROTECTION_WINDOW
    key_log_writer: BinaryIO | None = None
    session_store: Any = None
    elliptic_curves: list[int] = field(default_factory=lambda: list(DEFAULT_CURVES))
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("dtlscore"))
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    initial_epoch: int = 0


def sni_server_name(server_name: str) -> str:
    """The name to send as SNI: IP address literals are not allowed and become empty."""
    try:
        ipaddress.ip_address(server_name)
    except ValueError:
        return server_name
    return ""


def session_key(is_client: bool, remote_address: str, server_name: str, session_id: bytes) -> bytes:
    """Key under which a session is stored for resumption."""
    if is_client:
        # "_" can appear in neither an address nor a domain name.
        return f"{remote_address}_{server_name}".encode()
    return bytes(session_id)


def is_reserved_keying_label(label: str) -> bool:
    """Whether the label is reserved and may not be used to export keying material."""
    return label in _RESERVED_KEYING_LABELS


def build_handshake_settings(config: Config | None, is_client: bool) -> HandshakeSettings:
    """Validate a configuration and fill in the defaults a connection uses."""
    if is_client:
        cipher_suites = validate_client_config(config)
    else:
        cipher_suites = validate_config(config)
    assert config is not None

    selector = CertificateSelector(
        certificates=list(config.certificates),
        certificate_callback=config.get_certificate,
        client_certificate_callback=config.get_client_certificate,
    )

    if not is_client:
        # The suites must fit the key of the server's end-entity certificate.
        try:
            cert = selector.get_certificate(ClientHelloInfo())
        except NoCertificatesError:
            cert = None
        cipher_suites = filter_cipher_suites_for_certificate(cert, cipher_suites)

    return HandshakeSettings(
        is_client=is_client,
        cipher_suites=cipher_suites,
        certificate_selector=selector,
        psk=config.psk,
        psk_identity_hint=config.psk_identity_hint,
        signature_schemes=list(config.signature_schemes),
        extended_master_secret=config.extended_master_secret,
        srtp_protection_profiles=list(config.srtp_protection_profiles),
        server_name=sni_server_name(config.server_name),
        supported_protocols=list(config.supported_protocols),
        client_auth=config.client_auth,
        insecure_skip_verify=config.insecure_skip_verify,
        verify_peer_certificate=config.verify_peer_certificate,
        verify_connection=config.verify_connection,
        root_cas=config.root_cas,
        client_cas=config.client_cas,
        custom_cipher_suites=config.custom_cipher_suites,
        retransmit_interval=config.flight_interval if config.flight_interval != 0 else INITIAL_TICKER_INTERVAL,
        mtu=config.mtu if config.mtu > 0 else DEFAULT_MTU,
        replay_protection_window=(
            config.replay_protection_window
            if config.replay_protection_window > 0
            else DEFAULT_REPLAY_PROTECTION_WINDOW
        ),
        key_log_writer=config.key_log_writer,
        session_store=config.session_store,
        elliptic_curves=list(config.elliptic_curves) or list(DEFAULT_CURVES),
        logger=config.logger or logging.getLogger("dtlscore"),
        connect_timeout=config.connect_timeout,
    )


def _request_info(acceptable_cas: Sequence[bytes]) -> CertificateRequestInfo:
    return CertificateRequestInfo(acceptable_cas=list(acceptable_cas))