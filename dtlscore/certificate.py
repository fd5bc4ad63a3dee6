"""Certificate chains and the selection of the certificate to present."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from cryptography import x509
from cryptography.x509.oid import NameOID


class NoCertificatesError(LookupError):
    """No certificate is configured."""

    def __init__(self) -> None:
        super().__init__("no certificates configured")


class NotAcceptableCertificateChainError(ValueError):
    """The chain is not signed by any CA the peer accepts."""

    def __init__(self) -> None:
        super().__init__("certificate chain is not signed by an acceptable CA")


@dataclass
class Certificate:
    """A DER-encoded certificate chain, leaf first, with its private key."""

    chain: list[bytes] = field(default_factory=list)
    private_key: Any = None
    leaf: x509.Certificate | None = None

    def parsed_leaf(self) -> x509.Certificate:
        """The leaf certificate, parsed from the chain if not already set."""
        if self.leaf is not None:
            return self.leaf
        if not self.chain:
            raise ValueError("certificate chain is empty")
        return x509.load_der_x509_certificate(self.chain[0])


@dataclass
class ClientHelloInfo:
    """Details from a ClientHello that guide certificate selection."""

    server_name: str = ""
    cipher_suites: list[int] = field(default_factory=list)


@dataclass
class CertificateRequestInfo:
    """Details from a server's CertificateRequest."""

    acceptable_cas: list[bytes] = field(default_factory=list)

    def supports_certificate(self, certificate: Certificate) -> None:
        """Raise unless some certificate in the chain has an acceptable issuer."""
        if not self.acceptable_cas:
            return
        for index, der in enumerate(certificate.chain):
            parsed = certificate.leaf if index == 0 else None
            if parsed is None:
                try:
                    parsed = x509.load_der_x509_certificate(der)
                except ValueError as exc:
                    raise ValueError(f"failed to parse certificate #{index} in the chain: {exc}") from exc
            if parsed.issuer.public_bytes() in self.acceptable_cas:
                return
        raise NotAcceptableCertificateChainError()


def _names_of(cert: x509.Certificate) -> list[str]:
    names = [
        attr.value
        for attr in cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
        if isinstance(attr.value, str) and attr.value
    ][:1]
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return names
    return names + list(san.value.get_values_for_type(x509.DNSName))


@dataclass
class CertificateSelector:
    """Chooses the local certificate to present to a peer."""

    certificates: Sequence[Certificate] = field(default_factory=list)
    certificate_callback: Callable[[ClientHelloInfo], Certificate | None] | None = None
    client_certificate_callback: Callable[[CertificateRequestInfo], Certificate] | None = None
    _name_map: dict[str, Certificate] | None = field(default=None, init=False, repr=False, compare=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def _build_name_map(self) -> dict[str, Certificate]:
        name_map: dict[str, Certificate] = {}
        for cert in self.certificates:
            try:
                parsed = cert.parsed_leaf()
            except ValueError:
                continue
            for name in _names_of(parsed):
                name_map[name.lower()] = cert
        return name_map

    def get_certificate(self, info: ClientHelloInfo) -> Certificate:
        """Pick the server certificate for a ClientHello, honouring SNI."""
        with self._lock:
            if self.certificate_callback is not None and (not self.certificates or info.server_name):
                cert = self.certificate_callback(info)
                if cert is not None:
                    return cert

            if self._name_map is None:
                self._name_map = self._build_name_map()

            if not self.certificates:
                raise NoCertificatesError()
            first = self.certificates[0]
            if len(self.certificates) == 1 or not info.server_name:
                return first

            name = info.server_name.lower().rstrip(".")
            if name in self._name_map:
                return self._name_map[name]

            labels = name.split(".")
            for index in range(len(labels)):
                labels[index] = "*"
                candidate = ".".join(labels)
                if candidate in self._name_map:
                    return self._name_map[candidate]
            return first

    def get_client_certificate(self, info: CertificateRequestInfo) -> Certificate:
        """Pick the client certificate for a CertificateRequest; empty if none fits."""
        with self._lock:
            if self.client_certificate_callback is not None:
                return self.client_certificate_callback(info)
            for cert in self.certificates:
                try:
                    info.supports_certificate(cert)
                except ValueError:
                    continue
                return cert
            return Certificate()