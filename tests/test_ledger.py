import unittest
from datetime import datetime, timezone

from application.ledger import Ledger
from domain.errors import InsufficientFunds, InvalidAmount, UnknownUser
from domain.models import TransactionKind, UserAccount
from infrastructure.memory.account_repository_memory import InMemoryUserRepository


FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_user(username: str, balance: int) -> UserAccount:
    return UserAccount(
        username=username,
        password="secret",
        jid=f"{username}@xmpp.example",
        jabber_password="jabber",
        balance=balance,
    )


class LedgerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.user_repo = InMemoryUserRepository(
            [make_user("markaz", 100000), make_user("admin", 50000)]
        )
        self.ledger = Ledger(self.user_repo, clock=lambda: FIXED_NOW)

    def test_credit_adds_amount_and_records_transaction(self):
        for amount in (1, 5000, 250000):
            before = self.ledger.balance_of("markaz")
            balance = self.ledger.credit("markaz", amount)
            self.assertEqual(balance, before + amount)
            self.assertEqual(self.ledger.balance_of("markaz"), before + amount)

        history = self.ledger.history()
        self.assertEqual(len(history), 3)
        self.assertTrue(all(tx.kind is TransactionKind.CREDIT for tx in history))
        self.assertEqual([tx.amount for tx in history], [1, 5000, 250000])
        self.assertEqual(history[0].created_at, FIXED_NOW)

    def test_credit_unknown_user_fails_without_record(self):
        with self.assertRaises(UnknownUser):
            self.ledger.credit("nobody", 100)
        self.assertEqual(self.ledger.history(), ())

    def test_non_positive_amounts_are_rejected(self):
        with self.assertRaises(InvalidAmount):
            self.ledger.credit("markaz", 0)
        with self.assertRaises(InvalidAmount):
            self.ledger.debit("markaz", -5)
        self.assertEqual(self.ledger.balance_of("markaz"), 100000)

    def test_debit_decreases_balance(self):
        balance = self.ledger.debit("markaz", 10000, reference="dana10")
        self.assertEqual(balance, 90000)

        (tx,) = self.ledger.history()
        self.assertEqual(tx.kind, TransactionKind.DEBIT)
        self.assertEqual(tx.amount, 10000)
        self.assertEqual(tx.reference, "dana10")

    def test_debit_can_empty_balance_but_not_overdraw(self):
        self.assertEqual(self.ledger.debit("admin", 50000), 0)
        with self.assertRaises(InsufficientFunds):
            self.ledger.debit("admin", 1)
        self.assertEqual(self.ledger.balance_of("admin"), 0)
        self.assertEqual(len(self.ledger.history()), 1)

    def test_balance_of_unknown_user(self):
        with self.assertRaises(UnknownUser):
            self.ledger.balance_of("ghost")

    def test_balances_lists_every_account(self):
        self.assertEqual(self.ledger.balances(), [("markaz", 100000), ("admin", 50000)])

    def test_history_is_a_snapshot(self):
        self.ledger.credit("markaz", 10)
        snapshot = self.ledger.history()
        self.ledger.credit("markaz", 20)
        self.assertEqual(len(snapshot), 1)
        self.assertEqual(len(self.ledger.history()), 2)


if __name__ == "__main__":
    unittest.main()
