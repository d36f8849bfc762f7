"""Tests for the command line tool."""
import logging

import pytest
import yaml

from p4rt_replication.cli import main, parse_replica
from p4rt_replication.replication import Replica

APP_DB = """
"REPLICATION_IP_MULTICAST_TABLE:0x5":
  "Ethernet0:0x0": replica
"REPLICATION_IP_MULTICAST_TABLE:0x9":
  "Ethernet4:0x0": replica
"FIXED_ROUTER_INTERFACE_TABLE:intf-1":
  "port": Ethernet0
"""

CACHE = """
"REPLICATION_IP_MULTICAST_TABLE:0x5":
  "Ethernet1:0x0": replica
"""


@pytest.fixture(autouse=True)
def workdir(monkeypatch, tmp_path):
    monkeypatch.delenv("P4RT_REPLICATION_TABLE", raising=False)
    monkeypatch.delenv("P4RT_REPLICATION_RETRIES", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write(path, content):
    path.write_text(content)
    return str(path)


class TestCheck:
    """Tests for the check command."""

    def test_check_reports_discrepancies(self, workdir, capsys):
        """Each discrepancy is printed and exit code is 1."""
        app_db = write(workdir / "app_db.yaml", APP_DB)
        cache = write(workdir / "cache.yaml", CACHE)

        code = main(["check", app_db, cache])

        out = capsys.readouterr().out.splitlines()
        assert code == 1
        assert out == [
            "cache is missing replica Ethernet0_0 for group 5",
            "APP DB is missing replica Ethernet1_0 for group 5",
            "cache is missing multicast group 9",
        ]

    def test_check_in_sync(self, workdir, capsys):
        """Identical snapshots exit 0 with no output."""
        app_db = write(workdir / "app_db.yaml", CACHE)
        cache = write(workdir / "cache.yaml", CACHE)

        assert main(["check", app_db, cache]) == 0
        assert capsys.readouterr().out == ""

    def test_check_malformed_snapshot(self, workdir, capsys):
        """A malformed key aborts with exit code 2."""
        app_db = write(
            workdir / "app_db.yaml",
            '"REPLICATION_IP_MULTICAST_TABLE:0xZZ":\n  "Ethernet0:0x0": replica\n',
        )
        cache = write(workdir / "cache.yaml", CACHE)

        code = main(["check", app_db, cache])

        assert code == 2
        assert "0xZZ" in capsys.readouterr().err

    def test_check_missing_file(self, workdir, capsys):
        """A missing snapshot exits 2."""
        cache = write(workdir / "cache.yaml", CACHE)

        assert main(["check", str(workdir / "nope.yaml"), cache]) == 2


class TestEncode:
    """Tests for the encode command."""

    def test_encode_insert(self, capsys):
        """Insert prints the SET record."""
        code = main([
            "encode", "--group-id", "7",
            "--replica", "Ethernet0:0", "--replica", "Ethernet4:1",
        ])

        assert code == 0
        assert yaml.safe_load(capsys.readouterr().out) == {
            "key": "REPLICATION_IP_MULTICAST_TABLE:0x7",
            "operation": "SET",
            "fields": [["Ethernet0:0x0", "replica"], ["Ethernet4:0x1", "replica"]],
        }

    def test_encode_delete(self, capsys):
        """Delete prints the DEL record without fields."""
        assert main(["encode", "--group-id", "7", "--delete"]) == 0
        assert yaml.safe_load(capsys.readouterr().out) == {
            "key": "REPLICATION_IP_MULTICAST_TABLE:0x7",
            "operation": "DEL",
            "fields": [],
        }

    def test_encode_negative_group(self, capsys):
        """Out-of-range group ids exit 2."""
        assert main(["encode", "--group-id", "-1"]) == 2

    def test_parse_replica(self):
        assert parse_replica("Ethernet0:3") == Replica("Ethernet0", 3)
        assert parse_replica("Ethernet0") == Replica("Ethernet0", 0)


class TestDump:
    """Tests for the dump command."""

    def test_dump(self, workdir, capsys):
        """Dump decodes the table and skips other tables."""
        snapshot = write(workdir / "app_db.yaml", APP_DB)

        assert main(["dump", snapshot]) == 0
        assert yaml.safe_load(capsys.readouterr().out) == {
            "multicast_groups": {
                5: [{"port": "Ethernet0", "instance": 0}],
                9: [{"port": "Ethernet4", "instance": 0}],
            }
        }

    def test_dump_with_settings(self, workdir, capsys):
        """The table name comes from the settings file."""
        settings = write(workdir / "replication.yaml", "table_name: LAB\n")
        snapshot = write(workdir / "lab.yaml", '"LAB:0x1":\n  "Ethernet0:0x2": replica\n')

        assert main(["--settings", settings, "dump", snapshot]) == 0
        groups = yaml.safe_load(capsys.readouterr().out)["multicast_groups"]
        assert groups == {1: [{"port": "Ethernet0", "instance": 2}]}


class TestSettingsAndVerbose:
    """Tests for settings propagation and verbose output."""

    def test_check_loaders_use_retry_settings(self, workdir, monkeypatch):
        """Both the App DB and cache loaders honor the retry settings."""
        import p4rt_replication.cli as cli
        import p4rt_replication.manager as manager

        created = []

        class RecordingLoader(cli.TableLoader):
            def __init__(self, store, **kwargs):
                created.append(kwargs)
                super().__init__(store, **kwargs)

        monkeypatch.setattr(cli, "TableLoader", RecordingLoader)
        monkeypatch.setattr(manager, "TableLoader", RecordingLoader)
        settings = write(
            workdir / "replication.yaml",
            "retry_attempts: 5\nretry_min_wait: 0\nretry_max_wait: 2\n",
        )
        app_db = write(workdir / "app_db.yaml", CACHE)
        cache = write(workdir / "cache.yaml", CACHE)

        assert main(["--settings", settings, "check", app_db, cache]) == 0

        assert len(created) == 2
        for kwargs in created:
            assert kwargs["retry_attempts"] == 5
            assert kwargs["retry_min_wait"] == 0.0
            assert kwargs["retry_max_wait"] == 2.0

    def test_bad_settings_exit_2(self, workdir, capsys):
        """A mistyped setting is reported and exits 2."""
        settings = write(workdir / "replication.yaml", "retry_attempts: '2'\n")
        snapshot = write(workdir / "app_db.yaml", CACHE)

        assert main(["--settings", settings, "dump", snapshot]) == 2
        assert "retry_attempts" in capsys.readouterr().err

    def test_verbose_prints_timing_summary(self, workdir, capsys):
        """-v prints the timing summary to stderr."""
        snapshot = write(workdir / "app_db.yaml", APP_DB)
        root = logging.getLogger()
        level = root.level

        try:
            assert main(["-v", "dump", snapshot]) == 0
        finally:
            root.setLevel(level)

        err = capsys.readouterr().err
        assert "Performance Summary" in err
        assert "load_table" in err

    def test_summary_not_printed_without_verbose(self, workdir, capsys):
        snapshot = write(workdir / "app_db.yaml", APP_DB)

        assert main(["dump", snapshot]) == 0
        assert "Performance Summary" not in capsys.readouterr().err
