"""Tests for amount, timestamp and key helpers."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from eth_account import Account

import wallet

# Throwaway key, never funded
PRIVKEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


class TestParseEth:
    """Tests for ETH to wei conversion."""

    def test_string_amounts(self):
        assert wallet.parseeth("0.01") == 10**16
        assert wallet.parseeth("1") == 10**18
        assert wallet.parseeth(" 0.5 ") == 5 * 10**17

    def test_decimal_and_int_amounts(self):
        assert wallet.parseeth(Decimal("0.000000000000000001")) == 1
        assert wallet.parseeth(2) == 2 * 10**18

    def test_zero(self):
        assert wallet.parseeth("0") == 0

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            wallet.parseeth("-0.1")

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            wallet.parseeth("lots")

    def test_sub_wei_precision_rejected(self):
        """Amounts finer than one wei would be truncated, so they are refused."""
        with pytest.raises(ValueError, match="more than 18 decimals"):
            wallet.parseeth("0.0000000000000000015")

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_rejected(self, amount):
        with pytest.raises(ValueError):
            wallet.parseeth(amount)

    def test_float_rejected(self):
        """Floats are not exact, so they are refused outright."""
        with pytest.raises(TypeError):
            wallet.parseeth(0.1)


class TestFormatting:
    """Tests for wei to ETH conversion and formatting."""

    def test_fromwei(self):
        assert wallet.fromwei(10**16) == Decimal("0.01")
        assert wallet.fromwei(1_500_000_000_000_000_000) == Decimal("1.5")
        assert wallet.fromwei(0) == Decimal("0")
        assert isinstance(wallet.fromwei(0), Decimal)

    def test_formateth(self):
        assert wallet.formateth(10**16) == "0.01"
        assert wallet.formateth(10**18) == "1"
        assert wallet.formateth(100 * 10**18) == "100"
        assert wallet.formateth(0) == "0"

    def test_formateth_smallest_unit_has_no_exponent(self):
        assert wallet.formateth(1) == "0.000000000000000001"

    def test_estimatefee(self):
        """1.5% of the deposit, rounded down to the wei."""
        assert wallet.estimatefee(10**16) == 150_000_000_000_000
        assert wallet.estimatefee(10**18, bps=100) == 10**16
        assert wallet.estimatefee(1) == 0


class TestTimestamps:
    """Tests for contract timestamp conversion."""

    def test_fromtimestamp_is_utc(self):
        result = wallet.fromtimestamp(1700000000)
        assert result == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_optional_zero_is_none(self):
        assert wallet.fromtimestamp(0, optional=True) is None

    def test_required_zero_is_epoch(self):
        assert wallet.fromtimestamp(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)


class TestAccounts:
    """Tests for key loading and address comparison."""

    def test_loadaccount_with_and_without_prefix(self):
        expected = Account.from_key("0x" + PRIVKEY).address
        assert wallet.loadaccount(PRIVKEY).address == expected
        assert wallet.loadaccount("0x" + PRIVKEY).address == expected

    def test_loadaccount_requires_key(self):
        with pytest.raises(ValueError):
            wallet.loadaccount(None)
        with pytest.raises(ValueError):
            wallet.loadaccount("")

    def test_sameaddress_ignores_case(self):
        assert wallet.sameaddress("0xABCDEF0000000000000000000000000000000001",
                                  "0xabcdef0000000000000000000000000000000001")

    def test_sameaddress_empty_never_matches(self):
        assert wallet.sameaddress("", "") is False
        assert wallet.sameaddress(None, "0x0000000000000000000000000000000000000000") is False

    def test_iszeroaddress(self):
        assert wallet.iszeroaddress("0x0000000000000000000000000000000000000000")
        assert not wallet.iszeroaddress("0x2222222222222222222222222222222222222222")
