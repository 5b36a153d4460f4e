"""
Payment adapter: options handed to the gateway and outcome mapping.
"""

from kungfu import Error, Ok

from storefront import ClientConfig, ErrorKind, Prefill
from storefront.payment import FAILED_MESSAGE, PaymentAdapter, PaymentFailure
from storefront.testing import ScriptedGateway


def _config() -> ClientConfig:
    return ClientConfig().with_payment_key("rzp_test_abc").with_merchant("AshMart")


class TestPay:
    async def test_success_returns_payment_id(self):
        gateway = ScriptedGateway.succeeding("pay_abc")

        result = await PaymentAdapter(gateway, _config()).pay(25000)

        assert isinstance(result, Ok)
        assert result.value == "pay_abc"

    async def test_options(self):
        gateway = ScriptedGateway.succeeding()
        prefill = Prefill(email="a@b.c", contact="1", name="A")

        await PaymentAdapter(gateway, _config()).pay(25000, prefill)

        options = gateway.opened[0].as_dict()
        assert options["amount"] == 25000
        assert options["currency"] == "INR"
        assert options["key"] == "rzp_test_abc"
        assert options["name"] == "AshMart"
        assert options["prefill"] == {"email": "a@b.c", "contact": "1", "name": "A"}
        assert options["theme"] == {"color": "#6366F1"}

    async def test_cancelled(self):
        gateway = ScriptedGateway.failing("Payment cancelled by user")

        result = await PaymentAdapter(gateway, _config()).pay(100)

        assert isinstance(result, Error)
        assert result.error.kind == ErrorKind.PAYMENT
        assert result.error.message == FAILED_MESSAGE
        assert isinstance(result.error.cause, PaymentFailure)

    async def test_answer_without_payment_id(self):
        gateway = ScriptedGateway([{"status": "ok"}])

        result = await PaymentAdapter(gateway, _config()).pay(100)

        assert isinstance(result, Error)
        assert result.error.kind == ErrorKind.PAYMENT

    async def test_non_positive_amount_never_opens_gateway(self):
        gateway = ScriptedGateway.succeeding()

        result = await PaymentAdapter(gateway, _config()).pay(0)

        assert isinstance(result, Error)
        assert result.error.kind == ErrorKind.VALIDATION
        assert gateway.calls == 0

    async def test_script_plays_in_order(self):
        gateway = ScriptedGateway([PaymentFailure(), "pay_2"])
        adapter = PaymentAdapter(gateway, _config())

        first = await adapter.pay(100)
        second = await adapter.pay(100)

        assert isinstance(first, Error)
        assert isinstance(second, Ok)
        assert second.value == "pay_2"
