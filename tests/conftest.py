"""
Pytest fixtures for the escrow client tests. Nothing here touches the network.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

import config
from escrow import EscrowClient, Job

PAYER = "0x1111111111111111111111111111111111111111"
WORKER = "0x2222222222222222222222222222222222222222"
TXHASH = b"\xab" * 32


@pytest.fixture(autouse=True)
def clean_config(monkeypatch, tmp_path):
    """Pin the settings that tests depend on, whatever the environment says."""
    monkeypatch.setattr(config, "startblock", None)
    monkeypatch.setattr(config, "maxblockrange", 2000)
    monkeypatch.setattr(config, "workeraddress", None)
    monkeypatch.setattr(config, "workendpoint", None)
    monkeypatch.setattr(config, "worksleep", 0)
    monkeypatch.setattr(config, "handledfile", str(tmp_path / "handled.json"))


@pytest.fixture
def w3():
    """Stand-in for a Web3 instance whose transactions always succeed."""
    w3 = MagicMock()
    w3.eth.block_number = 100
    w3.eth.get_transaction_count.return_value = 3
    w3.eth.send_raw_transaction.return_value = TXHASH
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1, "transactionHash": TXHASH}
    return w3


@pytest.fixture
def account():
    """Stand-in for a local signing account."""
    account = MagicMock()
    account.address = PAYER
    account.sign_transaction.return_value.raw_transaction = b"\x01\x02"
    return account


@pytest.fixture
def client(w3, account):
    """Signing client over the mocked Web3."""
    return EscrowClient(w3, account)


@pytest.fixture
def contract(client):
    """The mocked contract behind the client."""
    return client.contract


@pytest.fixture
def make_job():
    """Build a Job with sensible defaults."""

    def _make(status="ACTIVE", deadline=None, worker=WORKER, jobid=1):
        now = datetime.now(timezone.utc)
        return Job(
            id=jobid,
            payer=PAYER,
            worker=worker,
            amount=Decimal("0.01"),
            fee=Decimal("0.00015"),
            netamount=Decimal("0.00985"),
            description="Summarize the week's governance votes",
            status=status,
            createdat=now,
            deadline=deadline or now + timedelta(hours=24),
            completedat=None,
        )

    return _make
