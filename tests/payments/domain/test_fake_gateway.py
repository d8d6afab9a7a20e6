"""Tests for the configurable fake payment gateway."""

from payments.gateway import get_gateway, reset_gateway, set_gateway
from payments.gateway.fake_adapter import FakeGateway


class TestCreateIntent:
    def test_success_returns_gateway_order_id(self):
        gateway = FakeGateway(key_secret="test-secret")
        result = gateway.create_intent(900, "INR", "ord-001", {"customer_id": "cust-asha"})
        assert result.success is True
        assert result.gateway_order_id.startswith("order_fake")

    def test_records_calls(self):
        gateway = FakeGateway(key_secret="test-secret")
        gateway.create_intent(900, "INR", "ord-001")
        assert gateway.calls[0]["method"] == "create_intent"
        assert gateway.calls[0]["amount"] == 900
        assert gateway.calls[0]["idempotency_key"] == "ord-001"

    def test_configured_failure(self):
        gateway = FakeGateway(key_secret="test-secret")
        gateway.configure(should_succeed=False, failure_reason="Bank offline")
        result = gateway.create_intent(900, "INR", "ord-001")
        assert result.success is False
        assert result.gateway_order_id is None
        assert result.failure_reason == "Bank offline"


class TestVerification:
    def test_sign_produces_verifiable_signature(self):
        gateway = FakeGateway(key_secret="test-secret")
        signature = gateway.sign("order_abc", "pay_001")
        assert gateway.verify_payment_signature("order_abc", "pay_001", signature)
        assert not gateway.verify_payment_signature("order_abc", "pay_002", signature)


class TestFactory:
    def test_defaults_to_fake_gateway(self):
        reset_gateway()
        assert isinstance(get_gateway(), FakeGateway)

    def test_set_gateway_overrides(self):
        custom = FakeGateway(key_secret="another")
        set_gateway(custom)
        assert get_gateway() is custom
