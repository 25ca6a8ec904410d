"""M-of-N multi-signature wallet."""

from ricknad.generator.rules import ContractParts, FeatureRule, RuleContext
from ricknad.generator.templates.base import Archetype
from ricknad.generator.types import ContractType, Feature


def _base(ctx: RuleContext) -> ContractParts:
    timed = ctx.has(Feature.TIMELOCK)
    submitted_field = "\n                uint256 submittedAt;" if timed else ""
    submitted_init = ",\n                    submittedAt: block.timestamp" if timed else ""
    delay_check = (
        '\n                require(block.timestamp >= txn.submittedAt + EXECUTION_DELAY, "Execution delay not elapsed");'
        if timed else ""
    )
    return ContractParts(
        variables=[
            f"""
            struct Transaction {{
                address to;
                uint256 value;
                bytes data;
                bool executed;
                uint256 confirmations;{submitted_field}
            }}
            """,
            "address[] public owners;",
            "mapping(address => bool) public isOwner;",
            "uint256 public threshold;",
            "Transaction[] public transactions;",
            "mapping(uint256 => mapping(address => bool)) public isConfirmed;",
        ],
        events=[
            "event Deposit(address indexed sender, uint256 amount, uint256 balance);",
            "event TransactionSubmitted(address indexed owner, uint256 indexed txId, address indexed to, uint256 value, bytes data);",
            "event TransactionConfirmed(address indexed owner, uint256 indexed txId);",
            "event ConfirmationRevoked(address indexed owner, uint256 indexed txId);",
            "event TransactionExecuted(address indexed owner, uint256 indexed txId);",
        ],
        constructor_params=["address[] memory _owners", "uint256 _threshold"],
        constructor_body=[
            'require(_owners.length > 0, "Owners required");',
            'require(_threshold > 0 && _threshold <= _owners.length, "Invalid threshold");',
            "for (uint256 i = 0; i < _owners.length; i++) {",
            "    address owner = _owners[i];",
            '    require(owner != address(0), "Invalid owner");',
            '    require(!isOwner[owner], "Owner not unique");',
            "    isOwner[owner] = true;",
            "    owners.push(owner);",
            "}",
            "threshold = _threshold;",
        ],
        modifiers=["""
        modifier onlySigner() {
            require(isOwner[msg.sender], "Not an owner");
            _;
        }

        modifier txExists(uint256 txId) {
            require(txId < transactions.length, "Transaction does not exist");
            _;
        }

        modifier notExecuted(uint256 txId) {
            require(!transactions[txId].executed, "Transaction already executed");
            _;
        }
        """],
        functions=[
            """
            receive() external payable {
                emit Deposit(msg.sender, msg.value, address(this).balance);
            }
            """,
            f"""
            function submitTransaction(address to, uint256 value, bytes memory data) public onlySigner returns (uint256) {{
                uint256 txId = transactions.length;
                transactions.push(Transaction({{
                    to: to,
                    value: value,
                    data: data,
                    executed: false,
                    confirmations: 0{submitted_init}
                }}));
                emit TransactionSubmitted(msg.sender, txId, to, value, data);
                return txId;
            }}
            """,
            """
            function confirmTransaction(uint256 txId) public onlySigner txExists(txId) notExecuted(txId) {
                require(!isConfirmed[txId][msg.sender], "Transaction already confirmed");
                transactions[txId].confirmations += 1;
                isConfirmed[txId][msg.sender] = true;
                emit TransactionConfirmed(msg.sender, txId);
            }
            """,
            f"""
            function executeTransaction(uint256 txId) public onlySigner txExists(txId) notExecuted(txId) {{
                Transaction storage txn = transactions[txId];
                require(txn.confirmations >= threshold, "Not enough confirmations");{delay_check}
                txn.executed = true;
                (bool success, ) = txn.to.call{{value: txn.value}}(txn.data);
                require(success, "Transaction execution failed");
                emit TransactionExecuted(msg.sender, txId);
            }}
            """,
            """
            function revokeConfirmation(uint256 txId) public onlySigner txExists(txId) notExecuted(txId) {
                require(isConfirmed[txId][msg.sender], "Transaction not confirmed");
                transactions[txId].confirmations -= 1;
                isConfirmed[txId][msg.sender] = false;
                emit ConfirmationRevoked(msg.sender, txId);
            }
            """,
            """
            function getOwners() public view returns (address[] memory) {
                return owners;
            }
            """,
            """
            function getTransactionCount() public view returns (uint256) {
                return transactions.length;
            }
            """,
        ],
    )


def _timelock_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(add_variables=(
        f"uint256 public constant EXECUTION_DELAY = {ctx.parameters.timelock_delay_days} days;",
    ))


BATCH_CONFIRM = FeatureRule(add_functions=("""
function confirmTransactions(uint256[] calldata txIds) external {
    for (uint256 i = 0; i < txIds.length; i++) {
        confirmTransaction(txIds[i]);
    }
}
""",))


RULES = (
    (Feature.TIMELOCK, _timelock_rule),
    (Feature.BATCHABLE, BATCH_CONFIRM),
)


def _notes(ctx: RuleContext) -> list[str]:
    params = ctx.parameters
    return [f"Suggested setup: {params.multisig_threshold} of {params.multisig_owners} owners"]


MULTISIG = Archetype(
    type=ContractType.MULTISIG,
    description="Multi-Signature Wallet Contract",
    base_parts=_base,
    rules=RULES,
    admin_rule=None,
    notes=_notes,
)
