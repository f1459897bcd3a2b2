"""Tests for the pinned Freebox trust anchor."""

from __future__ import annotations

import ssl

from freebox_core.tls import FREEBOX_ROOT_CA, create_ssl_context


def test_root_ca_is_pem():
    assert FREEBOX_ROOT_CA.startswith("-----BEGIN CERTIFICATE-----")
    assert FREEBOX_ROOT_CA.rstrip().endswith("-----END CERTIFICATE-----")


def test_context_trusts_only_pinned_ca():
    context = create_ssl_context()

    assert context.verify_mode == ssl.CERT_REQUIRED
    assert context.check_hostname is True
    assert context.cert_store_stats()["x509_ca"] == 1
    [ca] = context.get_ca_certs()
    assert ("commonName", "Freebox Root CA") in [
        attr for rdn in ca["subject"] for attr in rdn
    ]


def test_contexts_are_independent():
    """Test each client can carry its own trust policy."""
    assert create_ssl_context() is not create_ssl_context()
