"""
ABI of the AgentEscrow contract. Only the functions and events the client uses.
"""

ESCROW_ABI = [
    #Write functions
    {
        "name": "createJob",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [
            {"name": "description", "type": "string"},
            {"name": "workerAddress", "type": "address"},
            {"name": "deadlineHours", "type": "uint256"},
        ],
        "outputs": [{"name": "jobId", "type": "uint256"}],
    },
    {
        "name": "assignWorker",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "jobId", "type": "uint256"},
            {"name": "worker", "type": "address"},
        ],
        "outputs": [],
    },
    {
        "name": "markComplete",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "jobId", "type": "uint256"}],
        "outputs": [],
    },
    {
        "name": "releaseFunds",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "jobId", "type": "uint256"}],
        "outputs": [],
    },
    {
        "name": "claimRefund",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "jobId", "type": "uint256"}],
        "outputs": [],
    },
    {
        "name": "raiseDispute",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "jobId", "type": "uint256"}],
        "outputs": [],
    },
    {
        "name": "withdraw",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [],
    },
    #Read functions
    {
        "name": "getJob",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "jobId", "type": "uint256"}],
        "outputs": [{
            "name": "",
            "type": "tuple",
            "components": [
                {"name": "id", "type": "uint256"},
                {"name": "payer", "type": "address"},
                {"name": "worker", "type": "address"},
                {"name": "amount", "type": "uint256"},
                {"name": "fee", "type": "uint256"},
                {"name": "netAmount", "type": "uint256"},
                {"name": "description", "type": "string"},
                {"name": "status", "type": "uint8"},
                {"name": "createdAt", "type": "uint256"},
                {"name": "deadline", "type": "uint256"},
                {"name": "completedAt", "type": "uint256"},
            ],
        }],
    },
    {
        "name": "getStats",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "_totalJobs", "type": "uint256"},
            {"name": "_completedJobs", "type": "uint256"},
            {"name": "_accumulatedFees", "type": "uint256"},
            {"name": "_totalFeesEarned", "type": "uint256"},
            {"name": "_totalEscrowedFunds", "type": "uint256"},
            {"name": "_totalVolume", "type": "uint256"},
            {"name": "_feePercent", "type": "uint256"},
            {"name": "_paused", "type": "bool"},
            {"name": "_contractBalance", "type": "uint256"},
        ],
    },
    {
        "name": "pendingWithdrawals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "address", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "accountingHealthCheck",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "healthy", "type": "bool"},
            {"name": "status", "type": "string"},
        ],
    },
    #Events
    {
        "name": "JobCreated",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "jobId", "type": "uint256", "indexed": True},
            {"name": "payer", "type": "address", "indexed": True},
            {"name": "worker", "type": "address", "indexed": True},
            {"name": "amount", "type": "uint256", "indexed": False},
            {"name": "fee", "type": "uint256", "indexed": False},
            {"name": "description", "type": "string", "indexed": False},
            {"name": "deadline", "type": "uint256", "indexed": False},
        ],
    },
    {
        "name": "FundsReleased",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "jobId", "type": "uint256", "indexed": True},
            {"name": "worker", "type": "address", "indexed": True},
            {"name": "netAmount", "type": "uint256", "indexed": False},
            {"name": "fee", "type": "uint256", "indexed": False},
        ],
    },
]
