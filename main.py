import argparse
import json
import logging
import sys
from web3 import Web3

import config
import payer
import worker
from escrow import EscrowClient


def address (value: str) -> str :
    """
    argparse type for an Ethereum address
    """
    if (not Web3.is_address(value)) :
        raise argparse.ArgumentTypeError("not a valid address: " + value)
    return value


def parseargs (argv: list = None) -> argparse.Namespace :
    parser = argparse.ArgumentParser(description="AgentEscrow client and example agents")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("payer", help="run the example payer agent")
    sub.add_parser("worker", help="run the example worker agent")
    job = sub.add_parser("job", help="show a job")
    job.add_argument("jobid", type=int)
    sub.add_parser("stats", help="show contract statistics")
    sub.add_parser("health", help="run the contract accounting health check")
    pending = sub.add_parser("pending", help="show the pending withdrawal of an address")
    pending.add_argument("address", type=address)
    return parser.parse_args(argv)


def read (command: str, args: argparse.Namespace, escrow: EscrowClient) -> dict :
    """
    Run a read-only command and return its result as a JSON-ready dict
    """
    if (command == "job") :
        return escrow.getjob(args.jobid).todict()
    if (command == "stats") :
        return escrow.getstats().todict()
    if (command == "health") :
        health = escrow.healthcheck()
        return {"healthy": health.healthy, "status": health.status}
    if (command == "pending") :
        return {"address": args.address, "pending": str(escrow.getpendingwithdrawal(args.address))}
    raise ValueError("Unknown command: " + command)


def main (argv: list = None) -> int :
    args = parseargs(argv)
    logging.basicConfig(level=config.loglevel, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try :
        if (args.command == "payer") :
            payer.run()
        elif (args.command == "worker") :
            worker.run()
        else :
            print(json.dumps(read(args.command, args, EscrowClient.readonly()), indent=2))
    except KeyboardInterrupt :
        logging.getLogger(__name__).info("Stopped.")
    return 0


if (__name__ == '__main__') :
    sys.exit(main())
