"""
Checkout Example — cart to orders, a broken run, and resuming it.

Run: uv run python examples/checkout_example.py
"""

from kungfu import Ok, Error

from storefront import RecordingNotifier
from storefront.address import AddressBook
from storefront.cart import CartRepository, QuantityReconciler
from storefront.checkout import CheckoutOrchestrator, SQLAlchemyLedger
from storefront.payment import PaymentAdapter
from storefront.testing import ScriptedGateway
from examples._infra import banner, run, seeded_store


async def main() -> None:
    fake = seeded_store()
    notifier = RecordingNotifier()
    ledger = await SQLAlchemyLedger.connect()

    async with fake.client() as api:
        reconciler = QuantityReconciler(CartRepository(api), notifier)
        book = AddressBook(api, notifier)
        gateway = ScriptedGateway.succeeding("pay_demo")
        checkout = CheckoutOrchestrator(
            api, PaymentAdapter(gateway, api.config), ledger=ledger, notifier=notifier
        )

        # 1. Cart and address
        banner("1. Cart")
        await reconciler.refresh()
        await book.fetch_addresses()
        for line in reconciler.lines:
            print(f"   {line.product.product_name} x{line.quantity}")
        totals = reconciler.totals()
        print(f"   total={totals.total:.2f} (saved {totals.discount:.2f})")
        print(f"   ship to address #{book.selected_id}")

        # 2. Second order call fails
        banner("2. Checkout, second order fails")
        fake.fail("POST", "/order/", skip=1)
        result = await checkout.proceed_to_pay(book.selected_id, reconciler.lines)
        match result:
            case Ok(session):
                print(f"   {session.state.name}")
            case Error(e):
                print(f"   {checkout.state.name}: {e.kind.name} {e.message}")
        print(f"   orders on server: {len(fake.orders)}")

        # 3. Resume: no second charge
        banner("3. Resume")
        attempt = checkout.session.attempt_id
        match await checkout.resume(attempt):
            case Ok(session):
                print(f"   {session.state.name}: {session.message}")
            case Error(e):
                print(f"   error: {e}")
        print(f"   orders on server: {len(fake.orders)}")
        print(f"   gateway opened: {gateway.calls} time(s)")

        # 4. History
        banner("4. Order history")
        match await checkout.history.fetch_orders():
            case Ok(orders):
                for order in orders:
                    name = order.product_variation.product_name
                    print(f"   #{order.order_id} {name}: {order.order_status}")
            case Error(e):
                print(f"   error: {e}")

        print(f"\nNotices: {', '.join(notifier.titles)}")


if __name__ == "__main__":
    run(main)
