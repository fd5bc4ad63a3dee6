# dtlscore

Building blocks for a DTLS 1.2 implementation: the cipher suite
registry and selection rules, the choice of which certificate to
present, validation of a client or server configuration, and the
record-level bookkeeping (sequence numbers, handshake fragmentation,
datagram packing) that a connection needs.

## Installation

```
pip install dtlscore
```

To run the test suite:

```
pip install "dtlscore[test]"
pytest
```

## Cipher suites (`dtlscore.cipher_suite`)

```python
from dtlscore.cipher_suite import (
    CipherSuiteID,
    cipher_suite_name,
    cipher_suites,
    parse_cipher_suites,
)

print(cipher_suite_name(CipherSuiteID.TLS_ECDHE_ECDSA_WITH_AES_128_CCM))
# TLS_ECDHE_ECDSA_WITH_AES_128_CCM
print(cipher_suite_name(0x0000))
# 0x0000

# No suites selected: the default preference list is used
suites = parse_cipher_suites(None, None, True, False)

for info in cipher_suites():
    print(hex(info.id), info.name, info.supported_versions, info.insecure)
```

- `CipherSuite` is a frozen description of a suite: id, name,
  `AuthenticationType`, `KeyExchangeAlgorithm`, `CertificateType`, hash
  name and whether elliptic-curve extensions apply.
- `cipher_suite_for_id` looks up a known suite, then any custom suites
  given; `default_cipher_suites` and `all_cipher_suites` return the
  preference and implemented lists; `cipher_suite_ids` gives their ids.
- `parse_cipher_suites(user_selected, custom_cipher_suites,
  include_certificate_suites, include_psk_suites)` resolves the selected
  ids (custom suites go first) and keeps only suites usable with the
  available credentials. It raises `InvalidCipherSuiteError` for an
  unknown id, and `NoAvailableCertificateCipherSuiteError`,
  `NoAvailablePSKCipherSuiteError` or `NoAvailableCipherSuitesError`
  when the selection cannot serve what was asked for. All derive from
  `CipherSuiteError`.
- `filter_cipher_suites_for_certificate` drops certificate suites whose
  signature type does not fit the certificate's private key (ECDSA for
  EC and Ed25519 keys, RSA for RSA keys).
- `insecure_cipher_suites()` is always empty;
  `default_compression_methods()` holds only the null method.

## Certificates (`dtlscore.certificate`)

`Certificate` holds a DER chain (leaf first), a private key and an
optional parsed leaf; `parsed_leaf()` parses the leaf when needed.

`CertificateSelector.get_certificate(info)` picks the certificate for a
`ClientHelloInfo`:

1. the `certificate_callback`, when there are no certificates or a
   server name was sent, if it returns one;
2. the only certificate, or the first one when no server name was sent;
3. an exact match of the lower-cased name (trailing dots removed) against
   the common names and DNS subject alternative names;
4. wildcard candidates made by replacing labels with `*` from the left;
5. otherwise the first certificate.

It raises `NoCertificatesError` when nothing is configured.

`CertificateSelector.get_client_certificate(info)` uses the
`client_certificate_callback` if set; otherwise it returns the first
certificate whose chain `CertificateRequestInfo.supports_certificate`
accepts, or an empty `Certificate` when none does.
`supports_certificate` raises `NotAcceptableCertificateChainError` when
no certificate in the chain is issued by one of the acceptable CAs.

## Configuration (`dtlscore.config`)

```python
from dtlscore.cipher_suite import CipherSuiteID
from dtlscore.config import Config, validate_client_config, validate_config

config = Config(cipher_suites=[CipherSuiteID.TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256])
allowed = validate_config(config)
```

`validate_config` checks that a PSK identity hint comes with a PSK, that
every certificate has a chain and a supported private key (Ed25519, EC
or RSA), and returns the allowed cipher suites.
`validate_client_config` additionally requires a client with a PSK to
give its identity hint. Errors derive from `ConfigError`:
`NoConfigProvidedError`, `IdentityNoPSKError`,
`InvalidCertificateError`, `InvalidPrivateKeyError` and
`PSKAndIdentityMustBeSetForClientError`. `ClientAuthType` and
`ExtendedMasterSecretType` express the server's client-authentication
and Extended Master Secret policies.

## Handshake settings (`dtlscore.conn`)

`build_handshake_settings(config, is_client)` validates a `Config` and
returns `HandshakeSettings` with the defaults filled in: an MTU of 1200
bytes, a replay window of 64, a one-second flight interval and
X25519, P-256, P-384 as curves. For a server, the suites are filtered to
fit the key of the certificate it would present. Helpers:

- `sni_server_name` turns an IP address literal into an empty name;
- `session_key` gives the key a session is stored under
  (`"<remote address>_<server name>"` for a client, the session id for a
  server);
- `is_reserved_keying_label` tells whether a label may not be used to
  export keying material.

## Records (`dtlscore.records`)

- `SequenceCounter` hands out per-epoch sequence numbers with `next`,
  and allows `set` and `peek`; taking a number beyond 2^48 - 1 raises
  `SequenceNumberOverflowError`.
- `split_handshake_content(content, mtu)` cuts a handshake body into
  `HandshakeFragment`s of at most `mtu` bytes; an empty body yields one
  empty fragment.
- `compact_raw_packets(raw_packets, mtu)` packs records into as few
  datagrams as stay below the MTU, never splitting a record.

## What this package does not do

It opens no sockets and runs no handshake: there is no connection
object, no handshake state machine, no message or record encoding, and
no encryption or decryption of records. A `CipherSuite` describes a
suite but does not carry out its cryptography. Session storage is left
to whatever object is passed as `session_store`.