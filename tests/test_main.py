# tests/test_main.py

"""Tests for CLI argument parsing and identity resolution."""

import unittest
from unittest.mock import patch

import main


class TestParser(unittest.TestCase):
    """The argparse front-end accepts every command."""

    def setUp(self) -> None:
        self.parser = main._build_parser()

    def test_add_with_name_and_url(self) -> None:
        args = self.parser.parse_args(
            ["-u", "ann", "add", "Phone", "https://shop.example/p"]
        )
        self.assertEqual(args.command, "add")
        self.assertEqual(args.user, "ann")
        self.assertEqual(args.name, "Phone")
        self.assertEqual(args.url, "https://shop.example/p")

    def test_missing_arguments_left_to_services(self) -> None:
        """Omitted NAME/URL parse as None so services can report them."""
        args = self.parser.parse_args(["add"])
        self.assertIsNone(args.name)
        self.assertIsNone(args.url)

    def test_global_options(self) -> None:
        args = self.parser.parse_args(
            ["--db", "/tmp/x.db", "--timeout", "5", "update"]
        )
        self.assertEqual(args.db_path, "/tmp/x.db")
        self.assertEqual(args.timeout, 5.0)

    def test_verbose_flag(self) -> None:
        self.assertTrue(self.parser.parse_args(["-v", "list"]).verbose)
        self.assertFalse(self.parser.parse_args(["list"]).verbose)

    def test_command_required(self) -> None:
        with self.assertRaises(SystemExit):
            self.parser.parse_args([])


class TestResolveIdentity(unittest.TestCase):
    """--user wins over PRICEWATCH_USER, which wins over the login."""

    def setUp(self) -> None:
        self.parser = main._build_parser()

    def test_explicit_user(self) -> None:
        args = self.parser.parse_args(["-u", "ann", "list"])
        self.assertEqual(main._resolve_identity(args), "ann")

    @patch.object(main.Settings, "DEFAULT_USER", "from-env")
    def test_env_user(self) -> None:
        args = self.parser.parse_args(["list"])
        self.assertEqual(main._resolve_identity(args), "from-env")

    @patch.object(main.Settings, "DEFAULT_USER", None)
    @patch("main.getpass.getuser", return_value="login")
    def test_login_fallback(self, _getuser: object) -> None:
        args = self.parser.parse_args(["list"])
        self.assertEqual(main._resolve_identity(args), "login")


if __name__ == "__main__":
    unittest.main()
