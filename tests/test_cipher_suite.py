import dataclasses

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from dtlscore.cipher_suite import (
    VERSION_DTLS12,
    AuthenticationType,
    CertificateType,
    CipherSuiteID,
    CompressionMethod,
    InvalidCipherSuiteError,
    NoAvailableCertificateCipherSuiteError,
    NoAvailableCipherSuitesError,
    NoAvailablePSKCipherSuiteError,
    all_cipher_suites,
    cipher_suite_for_id,
    cipher_suite_ids,
    cipher_suite_name,
    cipher_suites,
    default_cipher_suites,
    default_compression_methods,
    filter_cipher_suites_for_certificate,
    insecure_cipher_suites,
    parse_cipher_suites,
)


def _custom(auth):
    base = cipher_suite_for_id(CipherSuiteID.TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256)
    return dataclasses.replace(base, id=0xFFFF, authentication_type=auth)


class _Cert:
    def __init__(self, private_key):
        self.private_key = private_key


@pytest.mark.parametrize(
    "suite_id, expected",
    [
        (CipherSuiteID.TLS_ECDHE_ECDSA_WITH_AES_128_CCM, "TLS_ECDHE_ECDSA_WITH_AES_128_CCM"),
        (0x0000, "0x0000"),
    ],
)
def test_cipher_suite_name(suite_id, expected):
    assert cipher_suite_name(suite_id) == expected


def test_all_cipher_suites_nonempty():
    assert len(all_cipher_suites()) > 0


def test_insecure_cipher_suites_empty():
    assert insecure_cipher_suites() == []


def test_cipher_suites_match_all():
    ours = all_cipher_suites()
    theirs = cipher_suites()
    assert len(ours) == len(theirs)
    for suite, listed in zip(ours, theirs):
        assert listed.id == suite.id
        assert listed.name == str(suite)
        assert listed.supported_versions == (VERSION_DTLS12,)
        assert listed.insecure is False


def test_known_ids():
    assert CipherSuiteID.TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256 == 0xC02B
    assert cipher_suite_ids(default_cipher_suites())[:2] == [0xC02B, 0xC02F]


def test_custom_suite_lookup():
    custom = _custom(AuthenticationType.CERTIFICATE)
    assert cipher_suite_for_id(0xFFFF) is None
    assert cipher_suite_for_id(0xFFFF, [custom]) is custom


@pytest.mark.parametrize("auth", [AuthenticationType.CERTIFICATE, AuthenticationType.ANONYMOUS])
def test_parse_custom_cipher_suite(auth):
    custom = _custom(auth)
    assert parse_cipher_suites([], [custom], True, False) == [custom]


def test_parse_defaults():
    assert parse_cipher_suites(None, None, True, False) == default_cipher_suites()


def test_parse_invalid_id():
    with pytest.raises(InvalidCipherSuiteError) as info:
        parse_cipher_suites([0x0000], None, True, False)
    assert info.value == InvalidCipherSuiteError(0x0000)


def test_parse_psk_and_certificate_valid():
    result = parse_cipher_suites(
        [CipherSuiteID.TLS_PSK_WITH_AES_128_CCM_8, CipherSuiteID.TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256],
        None,
        True,
        True,
    )
    assert cipher_suite_ids(result) == [0xC0A8, 0xC02B]


def test_parse_no_psk_suite():
    with pytest.raises(NoAvailablePSKCipherSuiteError):
        parse_cipher_suites([CipherSuiteID.TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256], None, True, True)


def test_parse_no_certificate_suite():
    with pytest.raises(NoAvailableCertificateCipherSuiteError):
        parse_cipher_suites([CipherSuiteID.TLS_PSK_WITH_AES_128_CCM_8], None, True, True)


def test_parse_psk_only_with_defaults():
    with pytest.raises(NoAvailablePSKCipherSuiteError):
        parse_cipher_suites(None, None, False, True)


def test_parse_nothing_selected():
    with pytest.raises(NoAvailableCipherSuitesError):
        parse_cipher_suites([], None, False, False)


def test_filter_ecdsa_key():
    key = ec.generate_private_key(ec.SECP256R1())
    suites = [
        cipher_suite_for_id(CipherSuiteID.TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256),
        cipher_suite_for_id(CipherSuiteID.TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256),
        cipher_suite_for_id(CipherSuiteID.TLS_PSK_WITH_AES_128_CCM),
    ]
    result = filter_cipher_suites_for_certificate(_Cert(key), suites)
    assert cipher_suite_ids(result) == [0xC02B, 0xC0A4]
    assert all(
        s.certificate_type == CertificateType.ECDSA_SIGN
        for s in result
        if s.authentication_type is AuthenticationType.CERTIFICATE
    )


def test_filter_rsa_key():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    suites = [
        cipher_suite_for_id(CipherSuiteID.TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256),
        cipher_suite_for_id(CipherSuiteID.TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256),
    ]
    result = filter_cipher_suites_for_certificate(_Cert(key), suites)
    assert cipher_suite_ids(result) == [0xC02F]


def test_filter_without_certificate_keeps_all():
    suites = default_cipher_suites()
    assert filter_cipher_suites_for_certificate(None, suites) == suites
    assert filter_cipher_suites_for_certificate(_Cert(None), suites) == suites


def test_default_compression_methods():
    assert default_compression_methods() == [CompressionMethod(0)]