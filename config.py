"""
Settings for the escrow client and the example agents.
Everything can be overridden from the environment or a .env file.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _int (name: str, default: int = None) -> int :
    value = os.getenv(name)
    if (value is None or value.strip() == "") :
        return default
    return int(value)


def _optional (name: str) -> str :
    value = os.getenv(name, "").strip()
    return value or None


#Network
rpcurl = os.getenv("RPC_URL", "https://sepolia.base.org")
contractaddress = os.getenv("CONTRACT_ADDRESS", "0x91E929EF86785005991eD49Dc449147CAD571D6d")
chainid = _int("CHAIN_ID", 84532) #Base Sepolia

#Keys. Never commit these.
payerprivkey = _optional("PAYER_PRIVATE_KEY")
workerprivkey = _optional("WORKER_PRIVATE_KEY")
workeraddress = _optional("WORKER_ADDRESS")

#Payer agent job
jobdescription = os.getenv("JOB_DESCRIPTION", "Analyze the top 10 DeFi protocols on Base by TVL and return structured JSON with APY data")
paymenteth = os.getenv("PAYMENT_ETH", "0.01")
deadlinehours = _int("DEADLINE_HOURS", 24)

#Polling, in seconds
payerinterval = _int("PAYER_INTERVAL", 10)
pollinterval = _int("POLL_INTERVAL", 5)
withdrawinterval = _int("WITHDRAW_INTERVAL", 60)

#Event log scanning
startblock = _int("START_BLOCK", None)
maxblockrange = _int("MAX_BLOCK_RANGE", 2000)

#Seconds to wait for a transaction to be mined
txtimeout = _int("TX_TIMEOUT", 120)

#Worker agent
workendpoint = _optional("WORK_ENDPOINT")
worksleep = _int("WORK_SLEEP", 3)
handledfile = os.getenv("HANDLED_FILE", "handled.json")

loglevel = os.getenv("LOG_LEVEL", "INFO").upper()
