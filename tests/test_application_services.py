import unittest
from datetime import datetime, timezone

from application.ledger import Ledger
from application.services import (
    balance_report,
    balance_text,
    issue_top_up_token,
    parse_amount,
    product_listing,
    purchase_product,
    redeem_top_up_token,
    transaction_report,
)
from application.tokens import TokenService
from domain.catalog import Catalog
from domain.errors import InsufficientFunds, InvalidAmount, UnknownProduct
from domain.models import AdminAccount, Product, UserAccount
from infrastructure.memory.account_repository_memory import (
    InMemoryAdminRepository,
    InMemoryUserRepository,
)


FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class ApplicationServicesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.user_repo = InMemoryUserRepository(
            [
                UserAccount(
                    username="markaz",
                    password="123456",
                    jid="markaz@xmpp.example",
                    jabber_password="jabber",
                    balance=100000,
                )
            ]
        )
        self.admin_repo = InMemoryAdminRepository(
            [
                AdminAccount(username="udin123", password="a", chat_id="11"),
                AdminAccount(username="siti", password="b", chat_id="22"),
            ]
        )
        self.ledger = Ledger(self.user_repo, clock=lambda: FIXED_NOW)
        self.tokens = TokenService(self.ledger, self.user_repo, clock=lambda: FIXED_NOW)
        self.catalog = Catalog()

    def test_purchase_debits_product_price(self):
        result = purchase_product("markaz", "dana44", "0812", self.ledger, self.catalog)

        self.assertTrue(result.success)
        self.assertEqual(self.ledger.balance_of("markaz"), 56000)
        self.assertEqual(self.ledger.history()[0].reference, "dana44:0812")

    def test_purchase_unknown_product_leaves_balance(self):
        with self.assertRaises(UnknownProduct):
            purchase_product("markaz", "foo99", "0812", self.ledger, self.catalog)
        self.assertEqual(self.ledger.balance_of("markaz"), 100000)

    def test_purchase_over_balance(self):
        catalog = Catalog([Product(code="big", name="Big", price=100001)])
        with self.assertRaises(InsufficientFunds):
            purchase_product("markaz", "big", "0812", self.ledger, catalog)
        self.assertEqual(self.ledger.history(), ())

    def test_redeem_broadcasts_to_every_admin(self):
        issued = issue_top_up_token("markaz", "5000", self.tokens)
        token = issued.reply.splitlines()[-1]

        result = redeem_top_up_token(token, self.tokens, self.admin_repo)

        self.assertEqual(
            result.reply,
            "Top-up successful. Added Rp5000 to markaz. New balance: Rp105000.",
        )
        self.assertEqual([b.conversation_id for b in result.broadcasts], ["11", "22"])
        self.assertTrue(all("markaz" in b.text for b in result.broadcasts))

    def test_parse_amount(self):
        self.assertEqual(parse_amount("5000"), 5000)
        for raw in ("0", "-10", "5k", ""):
            with self.assertRaises(InvalidAmount):
                parse_amount(raw)

    def test_text_reports(self):
        self.assertEqual(balance_text("markaz", self.ledger), "The balance for markaz is Rp100000.")
        self.assertEqual(balance_report(self.ledger), "Balance report:\nmarkaz: Rp100000")
        self.assertEqual(transaction_report(self.ledger), "No transactions yet.")

        self.ledger.credit("markaz", 250)
        self.assertEqual(
            transaction_report(self.ledger),
            "Transaction report:\n2024-05-01 12:00:00 markaz credit Rp250",
        )

    def test_product_listing(self):
        listing = product_listing(self.catalog)
        self.assertTrue(listing.startswith("Available products:\n"))
        self.assertIn("dana100 - dana100 - Rp100000", listing)
        self.assertEqual(len(listing.splitlines()), 7)


if __name__ == "__main__":
    unittest.main()
