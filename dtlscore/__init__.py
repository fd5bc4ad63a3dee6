"""Building blocks of a DTLS 1.2 stack: cipher suites, certificates, configuration and records."""

__version__ = "0.1.0"
__all__ = ["certificate", "cipher_suite", "config", "conn", "records"]