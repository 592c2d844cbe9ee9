# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.


import re
import unittest
from unittest import mock

from typer.testing import CliRunner

from cryptobackup.cli import app
from cryptobackup.cli.core.types import BackupArgs, InfoArgs, RestoreArgs
from cryptobackup.config import user_config_path
from tests.test_support import temp_directory, temp_env

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")


def _strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


class TestCliTyper(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()

    def test_root_info_commands(self) -> None:
        cases = (
            {
                "args": ["--help"],
                "expected_exit_code": 0,
                "contains": ("backup", "restore", "info"),
            },
            {
                "args": ["--version"],
                "expected_exit_code": 0,
                "contains": ("cryptobackup",),
            },
        )
        for case in cases:
            with self.subTest(args=case["args"]):
                with mock.patch("cryptobackup.cli.app._prepare_environment"):
                    result = self.runner.invoke(app, case["args"])
                self.assertEqual(result.exit_code, case["expected_exit_code"])
                for expected in case["contains"]:
                    self.assertIn(expected, result.output)

    def test_root_no_subcommand_non_tty_references_help(self) -> None:
        with mock.patch("cryptobackup.cli.app._prepare_environment"):
            with mock.patch("cryptobackup.cli.app.isatty", return_value=False):
                result = self.runner.invoke(app, [])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("cryptobackup --help", result.output)

    def test_init_config_writes_user_config(self) -> None:
        with temp_directory() as tmp:
            with temp_env({"XDG_CONFIG_HOME": str(tmp / "xdg")}):
                result = self.runner.invoke(app, ["--init-config"])
                self.assertEqual(result.exit_code, 0, result.output)
                self.assertIn("User config ready", result.output)
                self.assertTrue(user_config_path().is_file())
                self.assertTrue(user_config_path().is_relative_to(tmp))

    def test_init_config_failure_exits_two(self) -> None:
        with mock.patch(
            "cryptobackup.cli.app.init_user_config",
            side_effect=OSError("unable to create config at /ro/config.toml"),
        ):
            result = self.runner.invoke(app, ["--init-config"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("unable to create config", result.output)

    def test_first_run_initializes_user_config(self) -> None:
        with temp_directory() as tmp:
            with temp_env({"XDG_CONFIG_HOME": str(tmp / "xdg")}):
                with mock.patch(
                    "cryptobackup.cli.commands.info.run_info_command", return_value=0
                ):
                    result = self.runner.invoke(app, ["info", "/mnt/b"])
                self.assertEqual(result.exit_code, 0, result.output)
                self.assertTrue(user_config_path().is_file())
                self.assertIn("Initialized user config", _strip_ansi(result.output))

    def test_backup_help_lists_options(self) -> None:
        with mock.patch("cryptobackup.cli.app._prepare_environment"):
            result = self.runner.invoke(app, ["backup", "--help"])
        self.assertEqual(result.exit_code, 0)
        output = _strip_ansi(result.output)
        for option in ("--source", "--destination", "--no-timestamp", "--passphrase"):
            self.assertIn(option, output)

    def test_restore_requires_output(self) -> None:
        with mock.patch("cryptobackup.cli.app._prepare_environment"):
            result = self.runner.invoke(app, ["restore", "/tmp/backup"])
        self.assertEqual(result.exit_code, 2)

    def test_backup_forwards_arguments(self) -> None:
        with mock.patch("cryptobackup.cli.app._prepare_environment"):
            with mock.patch(
                "cryptobackup.cli.commands.backup.run_backup_command", return_value=0
            ) as run_mock:
                result = self.runner.invoke(
                    app,
                    [
                        "--quiet",
                        "backup",
                        "-s",
                        "/srv/a",
                        "--source",
                        "/srv/b",
                        "-d",
                        "/mnt/out",
                        "--no-timestamp",
                        "--passphrase",
                        "pw",
                    ],
                )
        self.assertEqual(result.exit_code, 0, result.output)
        args = run_mock.call_args.args[0]
        self.assertIsInstance(args, BackupArgs)
        self.assertEqual(args.source, ["/srv/a", "/srv/b"])
        self.assertEqual(args.destination, "/mnt/out")
        self.assertIs(args.timestamped, False)
        self.assertEqual(args.passphrase, "pw")
        self.assertTrue(args.quiet)

    def test_restore_forwards_arguments(self) -> None:
        with mock.patch("cryptobackup.cli.app._prepare_environment"):
            with mock.patch(
                "cryptobackup.cli.commands.restore.run_restore_command", return_value=0
            ) as run_mock:
                result = self.runner.invoke(
                    app,
                    ["restore", "/mnt/b", "-o", "/tmp/out", "--only", "docs", "--only", "mail"],
                )
        self.assertEqual(result.exit_code, 0, result.output)
        args = run_mock.call_args.args[0]
        self.assertIsInstance(args, RestoreArgs)
        self.assertEqual(args.backup_root, "/mnt/b")
        self.assertEqual(args.output, "/tmp/out")
        self.assertEqual(args.only, ["docs", "mail"])

    def test_partial_failure_exit_code(self) -> None:
        with mock.patch("cryptobackup.cli.app._prepare_environment"):
            with mock.patch(
                "cryptobackup.cli.commands.info.run_info_command", return_value=1
            ) as run_mock:
                result = self.runner.invoke(app, ["info", "/mnt/b"])
        self.assertEqual(result.exit_code, 1)
        self.assertIsInstance(run_mock.call_args.args[0], InfoArgs)

    def test_errors_map_to_exit_code_two(self) -> None:
        with mock.patch("cryptobackup.cli.app._prepare_environment"):
            with mock.patch(
                "cryptobackup.cli.commands.info.run_info_command",
                side_effect=ValueError("broken metadata"),
            ):
                result = self.runner.invoke(app, ["info", "/mnt/b"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("broken metadata", result.output)

    def test_backup_without_sources_fails(self) -> None:
        with temp_directory() as tmp:
            config = tmp / "config.toml"
            config.write_text("[backup]\ndirectories = []\n", encoding="utf-8")
            with temp_env({"CRYPTOBACKUP_PASSPHRASE": "pw"}):
                with mock.patch("cryptobackup.cli.app._prepare_environment"):
                    result = self.runner.invoke(app, ["backup", "--config", str(config)])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("no source directories", _strip_ansi(result.output))


if __name__ == "__main__":
    unittest.main()
