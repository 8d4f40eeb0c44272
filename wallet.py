"""
This file contains the helpers for handling ETH amounts, timestamps and signing keys.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, localcontext
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.constants import ADDRESS_ZERO

#Fee the contract charges, in basis points. Only used to estimate fees in logs.
FEE_BPS = 150


def parseeth (amount) -> int :
    """
    Convert an ETH amount (ex. "0.05") into wei.
    Accepts str, int or Decimal. Floats are rejected because they are not exact.
    """
    if (isinstance(amount, float)) :
        raise TypeError("Pass ETH amounts as str or Decimal, not float")
    try :
        value = Decimal(str(amount).strip())
    except InvalidOperation :
        raise ValueError("Invalid ETH amount: " + repr(amount))
    if (not value.is_finite()) :
        raise ValueError("Invalid ETH amount: " + repr(amount))
    if (value < 0) :
        raise ValueError("ETH amount cannot be negative: " + str(amount))
    #wei is the smallest unit, anything finer can't be sent
    with localcontext() as ctx :
        ctx.prec = 999
        subwei = (value * 10**18) % 1 != 0
    if (subwei) :
        raise ValueError("ETH amount has more than 18 decimals: " + str(amount))
    return int(Web3.to_wei(value, "ether"))


def fromwei (wei: int) -> Decimal :
    """
    Convert wei into a Decimal number of ETH
    """
    return Decimal(Web3.from_wei(int(wei), "ether"))


def formateth (wei: int) -> str :
    """
    Format wei as a plain ETH string with no exponent and no trailing zeros (ex. 10**16 -> "0.01")
    """
    value = fromwei(wei)
    if (value == 0) :
        return "0"
    return "{:f}".format(value.normalize())


def estimatefee (wei: int, bps: int = FEE_BPS) -> int :
    """
    Estimate the fee the contract will take from a deposit of wei
    """
    return (int(wei) * bps) // 10000


def fromtimestamp (seconds: int, optional: bool = False) -> datetime :
    """
    Convert a unix timestamp from the contract into a UTC datetime.
    If optional is set, a timestamp of 0 means "not set" and None is returned.
    """
    seconds = int(seconds)
    if (optional and seconds == 0) :
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def loadaccount (privkey: str) -> LocalAccount :
    """
    Load a local signing account from a hex private key, with or without the 0x prefix
    """
    if (not privkey) :
        raise ValueError("A private key is required")
    privkey = privkey.strip()
    if (not privkey.startswith("0x")) :
        privkey = "0x" + privkey
    return Account.from_key(privkey)


def sameaddress (a: str, b: str) -> bool :
    """
    Compare two addresses ignoring checksum casing. Empty addresses never match.
    """
    if (not a or not b) :
        return False
    return a.lower() == b.lower()


def iszeroaddress (address: str) -> bool :
    """
    Returns whether address is the zero address (an open job has no worker)
    """
    return sameaddress(address, ADDRESS_ZERO)
