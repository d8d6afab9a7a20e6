"""Tests for HMAC-SHA256 payment callback signatures."""

import hashlib
import hmac

from payments.gateway.signature import compute_signature, verify_signature


class TestComputeSignature:
    def test_matches_hmac_over_order_and_payment_ids(self):
        expected = hmac.new(b"secret", b"order_abc|pay_xyz", hashlib.sha256).hexdigest()
        assert compute_signature("order_abc", "pay_xyz", "secret") == expected

    def test_is_hex_encoded(self):
        signature = compute_signature("order_abc", "pay_xyz", "secret")
        assert len(signature) == 64
        int(signature, 16)


class TestVerifySignature:
    def test_genuine_signature_verifies(self):
        signature = compute_signature("order_abc", "pay_xyz", "secret")
        assert verify_signature("order_abc", "pay_xyz", signature, "secret")

    def test_uppercase_hex_is_accepted(self):
        signature = compute_signature("order_abc", "pay_xyz", "secret").upper()
        assert verify_signature("order_abc", "pay_xyz", signature, "secret")

    def test_wrong_secret_fails(self):
        signature = compute_signature("order_abc", "pay_xyz", "other-secret")
        assert not verify_signature("order_abc", "pay_xyz", signature, "secret")

    def test_signature_for_another_payment_fails(self):
        signature = compute_signature("order_abc", "pay_other", "secret")
        assert not verify_signature("order_abc", "pay_xyz", signature, "secret")

    def test_empty_signature_fails(self):
        assert not verify_signature("order_abc", "pay_xyz", "", "secret")

    def test_forged_signature_fails(self):
        assert not verify_signature("order_abc", "pay_xyz", "deadbeef" * 8, "secret")

    def test_non_ascii_signature_fails_without_raising(self):
        assert not verify_signature("order_abc", "pay_xyz", "é" * 64, "secret")

    def test_genuine_signature_with_non_ascii_suffix_fails(self):
        signature = compute_signature("order_abc", "pay_xyz", "secret")
        assert not verify_signature("order_abc", "pay_xyz", signature + "ü", "secret")

    def test_fullwidth_digits_are_not_hex(self):
        signature = compute_signature("order_abc", "pay_xyz", "secret")
        lookalike = signature.translate({ord(digit): ord(digit) + 0xFEE0 for digit in "0123456789"})
        assert not verify_signature("order_abc", "pay_xyz", lookalike, "secret")
