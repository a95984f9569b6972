"""
StealthCore - CLI Tests
=========================
Tests for the stealthcore command line.
"""

import json

import pytest
from typer.testing import CliRunner

from stealth_core.cli.main import app


runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Console log off: stdout carries only command output"""
    monkeypatch.setenv("STEALTH_ENABLE_CONSOLE_LOG", "false")


def _invoke(*args):
    return runner.invoke(app, list(args))


class TestInfo:
    """Test info command"""

    def test_info(self):
        """Test curve parameters shown"""
        result = _invoke("--curve", "bls12_381", "info")
        assert result.exit_code == 0
        assert "bls12_381" in result.stdout

    def test_missing_curve(self):
        """Test no curve configured"""
        result = _invoke("info")
        assert result.exit_code == 1
        assert "No curve" in result.stdout

    def test_curve_from_env(self, monkeypatch):
        """Test STEALTH_CURVE"""
        monkeypatch.setenv("STEALTH_CURVE", "bls12_377")
        result = _invoke("info")
        assert result.exit_code == 0
        assert "bls12_377" in result.stdout

    def test_unknown_curve(self):
        """Test unsupported --curve"""
        result = _invoke("--curve", "p256", "info")
        assert result.exit_code == 1


class TestWorkflow:
    """Test keygen -> generate -> check -> recover"""

    def test_full_flow(self, temp_data_dir):
        """Test CLI round trip on BN254"""
        keys_file = temp_data_dir / "keys.json"
        ann_file = temp_data_dir / "announcements.json"

        result = _invoke("--curve", "bn254", "keygen", "--json", "--output", str(keys_file))
        assert result.exit_code == 0
        keys = json.loads(result.stdout)
        assert keys["meta_address"].startswith("st:eth:0x")
        assert json.loads(keys_file.read_text()) == keys

        result = _invoke(
            "--curve", "bn254", "generate", keys["meta_address"],
            "--count", "2", "--output", str(ann_file),
        )
        assert result.exit_code == 0
        assert len(json.loads(result.stdout)) == 2

        # Appends to existing file
        result = _invoke("--curve", "bn254", "generate", keys["meta_address"], "-o", str(ann_file))
        assert result.exit_code == 0
        assert json.loads(result.stdout)["curve"] == "bn254"
        assert len(json.loads(ann_file.read_text())) == 3

        result = _invoke(
            "--curve", "bn254", "check", str(ann_file),
            "--viewing-key", keys["viewing_private_key"],
        )
        assert result.exit_code == 0

        result = _invoke("--curve", "bn254", "recover", str(ann_file), "--keys", str(keys_file), "--json")
        assert result.exit_code == 0
        matches = json.loads(result.stdout)
        assert len(matches) == 3
        stored = json.loads(ann_file.read_text())
        assert [m["stealth_address"] for m in matches] == [a["stealth_address"] for a in stored]

    def test_recover_with_explicit_keys(self, temp_data_dir):
        """Test --spending-key / --viewing-key"""
        ann_file = temp_data_dir / "announcements.json"
        keys = json.loads(_invoke("--curve", "bls12_377", "keygen", "--json").stdout)
        _invoke("--curve", "bls12_377", "generate", keys["meta_address"], "-o", str(ann_file))

        result = _invoke(
            "--curve", "bls12_377", "recover", str(ann_file),
            "--spending-key", keys["spending_private_key"],
            "--viewing-key", keys["viewing_private_key"],
            "--json",
        )
        assert result.exit_code == 0
        assert len(json.loads(result.stdout)) == 1

    def test_recover_requires_keys(self, temp_data_dir):
        """Test missing key options"""
        ann_file = temp_data_dir / "announcements.json"
        ann_file.write_text("[]")
        result = _invoke("--curve", "bn254", "recover", str(ann_file))
        assert result.exit_code == 1

    def test_recover_curve_mismatch(self, temp_data_dir):
        """Test keys file for another curve"""
        keys_file = temp_data_dir / "keys.json"
        ann_file = temp_data_dir / "announcements.json"
        ann_file.write_text("[]")
        _invoke("--curve", "bn254", "keygen", "--json", "-o", str(keys_file))

        result = _invoke("--curve", "bls12_381", "recover", str(ann_file), "--keys", str(keys_file))
        assert result.exit_code == 1

    def test_generate_invalid_meta_address(self):
        """Test bad meta-address"""
        result = _invoke("--curve", "bn254", "generate", "st:eth:0xdead")
        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_check_invalid_key(self, temp_data_dir):
        """Test bad viewing key"""
        ann_file = temp_data_dir / "announcements.json"
        ann_file.write_text("[]")
        result = _invoke("--curve", "bn254", "check", str(ann_file), "--viewing-key", "00")
        assert result.exit_code == 1
