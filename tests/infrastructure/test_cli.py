"""Tests for the offline CLI commands (cart, affiliate capture, local catalog).

State lives in a temporary JSON file; nothing talks to HostBill.
"""

import pytest
from click.testing import CliRunner

from storefront.infrastructure.cli.main import cli


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()
    env = {
        "STOREFRONT_STATE_PATH": str(tmp_path / "client_state.json"),
        "HOSTBILL_API_URL": "",
        "LOG_LEVEL": "WARNING",
    }

    def invoke(*args):
        return runner.invoke(cli, list(args), env=env)

    return invoke


class TestCartCommands:

    def test_add_and_show(self, run):
        result = run("cart", "add", "--id", "1")
        assert result.exit_code == 0, result.output
        assert "Added 'VPS Basic' to cart." in result.output

        run("cart", "add", "--id", "1")
        shown = run("cart", "show")
        assert "VPS Basic" in shown.output
        assert "598.00 CZK" in shown.output

    def test_unknown_product(self, run):
        result = run("cart", "add", "--id", "99")
        assert result.exit_code != 0
        assert "No billing product mapped" in result.output

    def test_update_to_zero_empties_cart(self, run):
        run("cart", "add", "--id", "1")
        result = run("cart", "update", "--id", "1", "--qty", "0")
        assert "Cart is empty." in result.output

    def test_clear_keeps_affiliate(self, run):
        run("cart", "show", "--url", "https://shop.example/?aff=7&aff_code=ABC")
        run("cart", "add", "--id", "2")
        run("cart", "clear")

        shown = run("cart", "show")
        assert "Cart is empty." in shown.output
        assert "Affiliate: 7 (code ABC)" in shown.output


class TestAffiliateCommands:

    def test_capture_then_show(self, run):
        captured = run("affiliate", "capture", "https://shop.example/?ref=5&utm_campaign=spring")
        assert captured.exit_code == 0, captured.output

        shown = run("affiliate", "show")
        assert "5" in shown.output


class TestCatalogCommands:

    def test_local_list(self, run):
        result = run("catalog", "list")
        assert result.exit_code == 0, result.output
        assert "VPS Enterprise" in result.output

    def test_addons(self, run):
        result = run("catalog", "addons", "--product", "1")
        assert "ssl_cert" in result.output
        assert "annually" in result.output
