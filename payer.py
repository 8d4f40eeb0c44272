"""
Example payer agent. Creates a job, funds it and pays the worker once the job is marked complete.
Run: python main.py payer
"""

import logging
import time
from datetime import datetime, timezone
import requests
from web3.constants import ADDRESS_ZERO
from web3.exceptions import Web3Exception

import config
from escrow import EscrowClient

logger = logging.getLogger(__name__)


def checkjob (escrow: EscrowClient, jobid: int) -> bool :
    """
    Look at the job once and act on its status.
    Returns True when there is nothing left for the payer to do.
    """
    job = escrow.getjob(jobid)
    logger.info("Job #%d status: %s", jobid, job.status)

    if (job.status == "COMPLETED") :
        logger.info("Worker marked job complete! Releasing funds...")
        escrow.releasefunds(jobid)
        logger.info("Payment released: %s ETH to worker", job.netamount)
        logger.info("Fee paid: %s ETH", job.fee)
        return True
    if (job.status == "RELEASED") :
        logger.info("Job complete and paid!")
        return True
    if (job.status in ("REFUNDED", "DISPUTED")) :
        logger.warning("Job #%d is %s. Stopping.", jobid, job.status)
        return True
    #deadline passed without the worker finishing
    if (job.status in ("OPEN", "ACTIVE") and datetime.now(timezone.utc) > job.deadline) :
        logger.warning("Job #%d passed its deadline. Claiming refund.", jobid)
        escrow.claimrefund(jobid)
        return True
    return False


def monitorjob (escrow: EscrowClient, jobid: int, interval: int = None) -> None :
    """
    Poll the job until checkjob says we are done. RPC hiccups are logged and retried.
    """
    interval = interval if interval is not None else config.payerinterval
    while (True) :
        try :
            if (checkjob(escrow, jobid)) :
                return
        except (requests.exceptions.RequestException, Web3Exception, TimeoutError) as e :
            logger.warning("Error while checking Job #%d: %s", jobid, e)
        time.sleep(interval)


def run (escrow: EscrowClient = None) -> int :
    """
    Run the payer agent. Returns the id of the job it created.
    """
    logger.info("Payer Agent starting...")
    if (escrow is None) :
        escrow = EscrowClient.withprivatekey(config.payerprivkey)

    health = escrow.healthcheck()
    logger.info("Contract health: %s", health.status)

    stats = escrow.getstats()
    logger.info("Total jobs on platform: %d", stats.totaljobs)
    logger.info("Fee: %s", stats.feepercent)

    logger.info("Creating escrow job...")
    jobid = escrow.createjob(
        config.jobdescription,
        config.paymenteth,
        workeraddress=config.workeraddress or ADDRESS_ZERO,
        deadlinehours=config.deadlinehours,
    )
    logger.info("Job #%d created and funded!", jobid)

    logger.info("Monitoring job status...")
    monitorjob(escrow, jobid)
    return jobid
