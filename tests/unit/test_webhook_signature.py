"""Unit tests for stripe-signature header verification."""

import pytest
from libs.common.errors import SignatureError
from services.payments_service.services.reconciliation import (
    compute_signature,
    verify_stripe_signature,
)

SECRET = "whsec_unit"
PAYLOAD = b'{"type": "checkout.session.completed"}'
NOW = 1_700_000_000


def _header(payload=PAYLOAD, secret=SECRET, timestamp=NOW):
    return f"t={timestamp},v1={compute_signature(payload, timestamp, secret)}"


@pytest.mark.unit
def test_valid_signature_passes():
    verify_stripe_signature(PAYLOAD, _header(), SECRET, now=NOW + 10)


@pytest.mark.unit
def test_any_matching_v1_is_accepted():
    header = f"t={NOW},v1=deadbeef,v1={compute_signature(PAYLOAD, NOW, SECRET)}"
    verify_stripe_signature(PAYLOAD, header, SECRET, now=NOW)


@pytest.mark.unit
@pytest.mark.parametrize(
    "header",
    [
        None,
        "",
        "v1=abc",
        f"t={NOW}",
        "t=not-a-number,v1=abc",
    ],
)
def test_malformed_headers_are_rejected(header):
    with pytest.raises(SignatureError):
        verify_stripe_signature(PAYLOAD, header, SECRET, now=NOW)


@pytest.mark.unit
def test_signature_from_another_secret_is_rejected():
    with pytest.raises(SignatureError):
        verify_stripe_signature(PAYLOAD, _header(secret="whsec_other"), SECRET, now=NOW)


@pytest.mark.unit
def test_tampered_payload_is_rejected():
    with pytest.raises(SignatureError):
        verify_stripe_signature(b'{"type": "forged"}', _header(), SECRET, now=NOW)


@pytest.mark.unit
def test_stale_timestamp_is_rejected():
    with pytest.raises(SignatureError, match="tolerance"):
        verify_stripe_signature(PAYLOAD, _header(), SECRET, tolerance=300, now=NOW + 301)


@pytest.mark.unit
def test_missing_secret_is_rejected():
    with pytest.raises(SignatureError, match="not configured"):
        verify_stripe_signature(PAYLOAD, _header(), "", now=NOW)
