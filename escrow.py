"""
This file contains the client for the AgentEscrow contract.

Write calls are signed locally and sent as raw transactions. Reads go through eth_call.
Events are delivered by polling the contract's logs, since HTTP providers can't push.
"""

import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from datetime import datetime
from typing import Callable, Optional
from web3 import Web3
from web3.constants import ADDRESS_ZERO
from web3.logs import DISCARD

import config
import wallet
from abi import ESCROW_ABI

logger = logging.getLogger(__name__)

#Status codes used by the contract
JOBSTATUS = {
    0: "OPEN",
    1: "ACTIVE",
    2: "COMPLETED",
    3: "RELEASED",
    4: "REFUNDED",
    5: "DISPUTED",
}


def interpretstatus (code: int) -> str :
    """
    Translate a numeric job status into its name
    """
    return JOBSTATUS.get(int(code), "UNKNOWN")


class EscrowError (Exception) :
    """
    Base class for errors raised by the escrow client
    """
    pass


class SignerRequired (EscrowError) :
    """
    Raised when a write call is made on a read-only client
    """
    def __init__ (self) :
        super().__init__("Signer required for write operations. Use EscrowClient.withprivatekey()")


class TransactionFailed (EscrowError) :
    """
    Raised when a transaction reverted or did not produce the expected event
    """
    def __init__ (self, message: str, txhash: str = None) :
        super().__init__(message)
        self.txhash = txhash


@dataclass
class Job :
    id: int
    payer: str
    worker: str
    amount: Decimal
    fee: Decimal
    netamount: Decimal
    description: str
    status: str
    createdat: datetime
    deadline: datetime
    completedat: Optional[datetime]

    @classmethod
    def decode (cls, raw) -> "Job" :
        """
        Build a Job from the tuple returned by getJob
        """
        return cls(
            id=int(raw[0]),
            payer=raw[1],
            worker=raw[2],
            amount=wallet.fromwei(raw[3]),
            fee=wallet.fromwei(raw[4]),
            netamount=wallet.fromwei(raw[5]),
            description=raw[6],
            status=interpretstatus(raw[7]),
            createdat=wallet.fromtimestamp(raw[8]),
            deadline=wallet.fromtimestamp(raw[9]),
            completedat=wallet.fromtimestamp(raw[10], optional=True),
        )

    def isopen (self) -> bool :
        return wallet.iszeroaddress(self.worker)

    def todict (self) -> dict :
        return {
            "id": self.id,
            "payer": self.payer,
            "worker": self.worker,
            "amount": str(self.amount),
            "fee": str(self.fee),
            "netAmount": str(self.netamount),
            "description": self.description,
            "status": self.status,
            "createdAt": self.createdat.isoformat(),
            "deadline": self.deadline.isoformat(),
            "completedAt": self.completedat.isoformat() if self.completedat else None,
        }


@dataclass
class Stats :
    totaljobs: int
    completedjobs: int
    accumulatedfees: Decimal
    totalfeesearned: Decimal
    totalescrowedfunds: Decimal
    totalvolume: Decimal
    feepercent: str
    paused: bool
    contractbalance: Decimal

    @classmethod
    def decode (cls, raw) -> "Stats" :
        """
        Build Stats from the values returned by getStats. The fee comes back in basis points.
        """
        return cls(
            totaljobs=int(raw[0]),
            completedjobs=int(raw[1]),
            accumulatedfees=wallet.fromwei(raw[2]),
            totalfeesearned=wallet.fromwei(raw[3]),
            totalescrowedfunds=wallet.fromwei(raw[4]),
            totalvolume=wallet.fromwei(raw[5]),
            feepercent=str(Decimal(int(raw[6])) / 100) + "%",
            paused=bool(raw[7]),
            contractbalance=wallet.fromwei(raw[8]),
        )

    def todict (self) -> dict :
        return {
            "totalJobs": self.totaljobs,
            "completedJobs": self.completedjobs,
            "accumulatedFees": str(self.accumulatedfees),
            "totalFeesEarned": str(self.totalfeesearned),
            "totalEscrowedFunds": str(self.totalescrowedfunds),
            "totalVolume": str(self.totalvolume),
            "feePercent": self.feepercent,
            "paused": self.paused,
            "contractBalance": str(self.contractbalance),
        }


@dataclass
class Health :
    healthy: bool
    status: str


@dataclass
class JobCreated :
    jobid: int
    payer: str
    worker: str
    amount: Decimal
    fee: Decimal
    description: str
    deadline: datetime
    blocknumber: Optional[int] = None
    txhash: Optional[str] = None

    @classmethod
    def decode (cls, log) -> "JobCreated" :
        args = log["args"]
        return cls(
            jobid=int(args["jobId"]),
            payer=args["payer"],
            worker=args["worker"],
            amount=wallet.fromwei(args["amount"]),
            fee=wallet.fromwei(args["fee"]),
            description=args["description"],
            deadline=wallet.fromtimestamp(args["deadline"]),
            blocknumber=log.get("blockNumber"),
            txhash=_hex(log.get("transactionHash")),
        )

    def isopen (self) -> bool :
        return wallet.iszeroaddress(self.worker)


@dataclass
class FundsReleased :
    jobid: int
    worker: str
    netamount: Decimal
    fee: Decimal
    blocknumber: Optional[int] = None
    txhash: Optional[str] = None

    @classmethod
    def decode (cls, log) -> "FundsReleased" :
        args = log["args"]
        return cls(
            jobid=int(args["jobId"]),
            worker=args["worker"],
            netamount=wallet.fromwei(args["netAmount"]),
            fee=wallet.fromwei(args["fee"]),
            blocknumber=log.get("blockNumber"),
            txhash=_hex(log.get("transactionHash")),
        )


#Which dataclass decodes each event
EVENTS = {
    "JobCreated": JobCreated,
    "FundsReleased": FundsReleased,
}


def _hex (value) -> str :
    if (value is None) :
        return None
    if (isinstance(value, str)) :
        return value
    return Web3.to_hex(value)


class EscrowClient :
    def __init__ (self, w3: Web3, account=None, address: str = None) -> None :
        self.w3 = w3

        #local signing account, or None for a read-only client
        self.account = account

        self._address = Web3.to_checksum_address(address or config.contractaddress)
        self.contract = w3.eth.contract(address=self._address, abi=ESCROW_ABI)

        #(event name, callback) pairs, in subscription order
        self.listeners = []

        #last block whose logs have been dispatched
        self.lastblock = config.startblock - 1 if config.startblock is not None else None

    @classmethod
    def readonly (cls, rpcurl: str = None) -> "EscrowClient" :
        """
        Client that can only read from the contract
        """
        return cls(Web3(Web3.HTTPProvider(rpcurl or config.rpcurl)))

    @classmethod
    def withprivatekey (cls, privkey: str, rpcurl: str = None) -> "EscrowClient" :
        """
        Client that signs transactions with privkey
        """
        return cls(Web3(Web3.HTTPProvider(rpcurl or config.rpcurl)), wallet.loadaccount(privkey))

    @property
    def address (self) -> str :
        return self._address

    @property
    def chainid (self) -> int :
        return config.chainid

    @property
    def abi (self) -> list :
        return ESCROW_ABI

    @property
    def signeraddress (self) -> str :
        return self.account.address if self.account is not None else None

    #Job functions

    def createjob (self, description: str, paymenteth, workeraddress: str = ADDRESS_ZERO, deadlinehours: int = 24) -> int :
        """
        Create a new escrow job and deposit paymenteth into it.
        workeraddress may be the zero address to leave the job open.
        Returns the id of the new job.
        """
        self._requiresigner()
        value = wallet.parseeth(paymenteth)
        logger.info("Creating job: %s", description)
        logger.info("Deposit: %s ETH | Fee: %s ETH", wallet.formateth(value), wallet.formateth(wallet.estimatefee(value)))

        fn = self.contract.functions.createJob(description, Web3.to_checksum_address(workeraddress), int(deadlinehours))
        receipt = self._transact(fn, value)
        txhash = _hex(receipt["transactionHash"])

        events = self.contract.events.JobCreated().process_receipt(receipt, errors=DISCARD)
        if (len(events) == 0) :
            raise TransactionFailed("No JobCreated event in receipt", txhash)
        jobid = int(events[0]["args"]["jobId"])
        logger.info("Job #%d created! TX: %s", jobid, txhash)
        return jobid

    def assignworker (self, jobid: int, workeraddress: str) -> str :
        """
        Assign a worker to an open job (called by the payer)
        """
        self._requiresigner()
        receipt = self._transact(self.contract.functions.assignWorker(int(jobid), Web3.to_checksum_address(workeraddress)))
        logger.info("Worker %s assigned to Job #%d", workeraddress, jobid)
        return _hex(receipt["transactionHash"])

    def markcomplete (self, jobid: int) -> str :
        """
        Mark a job as complete (called by the worker). This starts the dispute window.
        """
        self._requiresigner()
        receipt = self._transact(self.contract.functions.markComplete(int(jobid)))
        logger.info("Job #%d marked complete. Dispute window started.", jobid)
        return _hex(receipt["transactionHash"])

    def releasefunds (self, jobid: int) -> str :
        """
        Release the funds of a job to its worker (called by the payer)
        """
        self._requiresigner()
        receipt = self._transact(self.contract.functions.releaseFunds(int(jobid)))
        logger.info("Funds released for Job #%d", jobid)
        return _hex(receipt["transactionHash"])

    def claimrefund (self, jobid: int) -> str :
        """
        Claim a refund once the job deadline has passed (called by the payer)
        """
        self._requiresigner()
        receipt = self._transact(self.contract.functions.claimRefund(int(jobid)))
        logger.info("Refund claimed for Job #%d", jobid)
        return _hex(receipt["transactionHash"])

    def raisedispute (self, jobid: int) -> str :
        """
        Raise a dispute on a job
        """
        self._requiresigner()
        receipt = self._transact(self.contract.functions.raiseDispute(int(jobid)))
        logger.warning("Dispute raised for Job #%d", jobid)
        return _hex(receipt["transactionHash"])

    def withdraw (self) -> Decimal :
        """
        Withdraw the signer's pending balance.
        Returns the amount withdrawn in ETH, or None if there was nothing to withdraw.
        """
        self._requiresigner()
        pending = self.contract.functions.pendingWithdrawals(self.account.address).call()
        if (pending == 0) :
            logger.info("Nothing to withdraw.")
            return None
        self._transact(self.contract.functions.withdraw())
        logger.info("Withdrawn %s ETH", wallet.formateth(pending))
        return wallet.fromwei(pending)

    #Read functions

    def getjob (self, jobid: int) -> Job :
        return Job.decode(self.contract.functions.getJob(int(jobid)).call())

    def getstats (self) -> Stats :
        return Stats.decode(self.contract.functions.getStats().call())

    def getpendingwithdrawal (self, address: str) -> Decimal :
        """
        Pending withdrawal balance of address, in ETH
        """
        return wallet.fromwei(self.contract.functions.pendingWithdrawals(Web3.to_checksum_address(address)).call())

    def healthcheck (self) -> Health :
        healthy, status = self.contract.functions.accountingHealthCheck().call()
        return Health(bool(healthy), status)

    #Events

    def onjobcreated (self, callback: Callable[[JobCreated], None]) -> None :
        self.listeners.append(("JobCreated", callback))

    def onopenjob (self, callback: Callable[[JobCreated], None]) -> None :
        """
        Like onjobcreated, but only for jobs created without a worker
        """
        def filtered (event: JobCreated) :
            if (event.isopen()) :
                callback(event)
        self.listeners.append(("JobCreated", filtered))

    def onfundsreleased (self, callback: Callable[[FundsReleased], None]) -> None :
        self.listeners.append(("FundsReleased", callback))

    def stoplistening (self) -> None :
        self.listeners = []

    def pollevents (self) -> int :
        """
        Fetch new logs for every subscribed event and hand them to the callbacks in chain order.
        The first poll only records the current block unless a start block is configured.
        Returns the number of callbacks invoked.
        """
        if (len(self.listeners) == 0) :
            return 0
        head = self.w3.eth.block_number
        if (self.lastblock is None) :
            self.lastblock = head
            return 0

        names = []
        for name, _ in self.listeners :
            if (name not in names) :
                names.append(name)

        calls = 0
        while (self.lastblock < head) :
            start = self.lastblock + 1
            end = min(head, start + config.maxblockrange - 1)
            logs = []
            for name in names :
                for log in getattr(self.contract.events, name)().get_logs(from_block=start, to_block=end) :
                    logs.append((log["blockNumber"], log["logIndex"], name, log))
            logs.sort(key=lambda entry: (entry[0], entry[1]))
            for _, _, name, log in logs :
                event = EVENTS[name].decode(log)
                for listenername, callback in list(self.listeners) :
                    if (listenername == name) :
                        callback(event)
                        calls += 1
            self.lastblock = end
        return calls

    def listen (self, interval: int = None, stop: Callable[[], bool] = None) -> None :
        """
        Poll for events until stop() returns True (or forever)
        """
        interval = interval if interval is not None else config.pollinterval
        while (stop is None or not stop()) :
            self.pollevents()
            time.sleep(interval)

    #Helpers

    def _requiresigner (self) -> None :
        if (self.account is None) :
            raise SignerRequired()

    def _transact (self, fn, value: int = 0) :
        """
        Sign and send a contract call, then wait for it to be mined.
        Raises TransactionFailed if it reverted.
        """
        sender = self.account.address
        tx = fn.build_transaction({
            "from": sender,
            "value": value,
            "nonce": self.w3.eth.get_transaction_count(sender, "pending"),
        })
        signed = self.account.sign_transaction(tx)
        txhash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.debug("Sent %s", _hex(txhash))
        receipt = self.w3.eth.wait_for_transaction_receipt(txhash, timeout=config.txtimeout)
        if (receipt["status"] != 1) :
            raise TransactionFailed("Transaction " + _hex(txhash) + " reverted", _hex(txhash))
        return receipt
