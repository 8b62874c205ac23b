import unittest

from application.commands import parse_command, parse_purchase
from domain.errors import InvalidCommand, UsageError


class ParseCommandTests(unittest.TestCase):
    def test_commands_with_arguments(self):
        command = parse_command("/login markaz 123456")
        self.assertEqual(command.name, "login")
        self.assertEqual(command.args, ["markaz", "123456"])

        command = parse_command("  /balance   markaz ")
        self.assertEqual(command.args, ["markaz"])

    def test_bot_suffix_is_ignored(self):
        self.assertEqual(parse_command("/adminLogout@PutraBot").name, "adminLogout")

    def test_commands_are_case_sensitive(self):
        with self.assertRaises(InvalidCommand):
            parse_command("/adminlogin udin123 pw")

    def test_wrong_argument_count(self):
        with self.assertRaises(UsageError) as ctx:
            parse_command("/balance")
        self.assertEqual(str(ctx.exception), "Usage: /balance <username>")

        with self.assertRaises(UsageError):
            parse_command("/products all")

    def test_purchase_form(self):
        command = parse_command("DANA10.081234567890.123456")
        self.assertEqual(command.name, "purchase")
        self.assertEqual(command.args, ["dana10", "081234567890", "123456"])

    def test_text_that_is_not_a_purchase(self):
        self.assertIsNone(parse_purchase("dana10.0812"))
        self.assertIsNone(parse_purchase("dana10. 0812.1"))
        self.assertIsNone(parse_purchase("a.b.c.d"))
        with self.assertRaises(InvalidCommand):
            parse_command("just chatting")


if __name__ == "__main__":
    unittest.main()
