"""
Example worker agent. Watches for jobs assigned to it, does the work, marks the jobs complete
and withdraws whatever the contract holds for it.
Run: python main.py worker
"""

import json
import logging
import os
import time
from decimal import Decimal
import requests
from web3.exceptions import Web3Exception

import config
import wallet
from escrow import EscrowClient, EscrowError, JobCreated

logger = logging.getLogger(__name__)

#Errors that should not bring the agent down
TRANSIENT = (requests.exceptions.RequestException, Web3Exception, TimeoutError)


def readhandled (path: str = None) -> list :
    """
    Reads the list of job ids this worker already completed. Returns list of int
    """
    path = path or config.handledfile
    if (not os.path.exists(path)) :
        return []
    with open(path, 'r') as f :
        return json.load(f)


def writehandled (jobids: list, path: str = None) -> None :
    """
    Writes the list of completed job ids to the handled file
    """
    with open(path or config.handledfile, 'w') as f :
        json.dump(jobids, f)


def dowork (description: str) -> str :
    """
    Do the work a job asks for.
    If a work endpoint is configured the description is posted to it and the response body is the result.
    Otherwise the work is simulated.
    """
    logger.info("Working on: \"%s\"", description)
    if (config.workendpoint) :
        r = requests.post(config.workendpoint, json={"description": description}, timeout=300)
        r.raise_for_status()
        return r.text
    time.sleep(config.worksleep)
    return "Completed analysis for: " + description


class Worker :
    def __init__ (self, escrow: EscrowClient, myaddress: str = None, handledfile: str = None) -> None :
        self.escrow = escrow

        #address jobs must be assigned to
        self.myaddress = myaddress or config.workeraddress or escrow.signeraddress

        self.handledfile = handledfile or config.handledfile
        self.handled = readhandled(self.handledfile)

        #unix time of the last pending withdrawal check
        self.lastwithdrawcheck = 0

    def handlejob (self, job: JobCreated) -> bool :
        """
        Work on a newly created job if it is ours. Returns whether the job was completed.
        Failures are logged so that one bad job does not stop the agent.
        """
        if (not wallet.sameaddress(job.worker, self.myaddress)) :
            return False
        if (job.jobid in self.handled) :
            logger.debug("Job #%d already handled", job.jobid)
            return False

        logger.info("New job received!")
        logger.info("Job ID:      #%d", job.jobid)
        logger.info("Description: %s", job.description)
        logger.info("Payment:     %s ETH", job.amount)
        logger.info("Deadline:    %s", job.deadline.isoformat())

        try :
            result = dowork(job.description)
            logger.info("Work completed: %s", result)
            logger.info("Marking job complete on-chain...")
            self.escrow.markcomplete(job.jobid)
        except Exception as e :
            logger.error("Failed to complete job #%d: %s", job.jobid, e)
            return False

        self.handled.append(job.jobid)
        writehandled(self.handled, self.handledfile)
        logger.info("Job #%d marked complete! Waiting for payer to release funds...", job.jobid)
        return True

    def checkwithdrawal (self) -> Decimal :
        """
        Withdraw the pending balance if there is one. Returns the amount withdrawn or None.
        """
        self.lastwithdrawcheck = time.time()
        pending = self.escrow.getpendingwithdrawal(self.myaddress)
        if (pending <= 0) :
            return None
        logger.info("Pending withdrawal: %s ETH", pending)
        try :
            amount = self.escrow.withdraw()
        except EscrowError as e :
            logger.error("Withdrawal failed: %s", e)
            return None
        if (amount is not None) :
            logger.info("Withdrew %s ETH to wallet!", amount)
        return amount

    def step (self) -> None :
        """
        One pass of the main loop
        """
        self.escrow.pollevents()
        if (time.time() - self.lastwithdrawcheck >= config.withdrawinterval) :
            self.checkwithdrawal()

    def run (self) -> None :
        logger.info("Worker Agent starting...")
        logger.info("Listening for new jobs for %s on the escrow contract...", self.myaddress)
        self.escrow.onjobcreated(self.handlejob)
        logger.info("Worker agent running. Press Ctrl+C to stop.")
        try :
            while (True) :
                try :
                    self.step()
                except TRANSIENT as e :
                    logger.warning("RPC error, retrying: %s", e)
                time.sleep(config.pollinterval)
        finally :
            self.escrow.stoplistening()


def run (escrow: EscrowClient = None) -> None :
    if (escrow is None) :
        escrow = EscrowClient.withprivatekey(config.workerprivkey)
    Worker(escrow).run()
