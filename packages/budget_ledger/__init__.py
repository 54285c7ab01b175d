"""Public interface for the ``budget_ledger`` package.

This module exposes the ledger operations and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.

Operations that touch the database take an SQLAlchemy ``Session`` first and
flush without committing; callers own the transaction scope.
"""

from .allocations import allocate, budget_allocated, list_allocations, transfer, unallocated
from .authz import MembershipChecker, SqlMembershipChecker
from .balances import balance_at, balance_breakdown, current_balance
from .config import LedgerSettings, configure, load_settings
from .errors import ForbiddenError, InvalidArgumentError, LedgerError, NotFoundError
from .models import (
    AccountBalance,
    AccountSeed,
    AllocationEntry,
    BalanceSnapshot,
    CategoryType,
    DateRangeOption,
    Granularity,
    TransactionRecord,
    TransactionView,
    TransferRecord,
    TransferView,
    UnallocatedSummary,
)
from .sampling import chart_series, choose_granularity, load_chart_series, resolve_date_range
from .transactions import (
    create_transaction,
    delete_transaction,
    list_transactions,
    update_transaction,
)
from .transfers import create_transfer, delete_transfer, list_transfers, update_transfer

__all__ = [
    # Balances
    "current_balance",
    "balance_at",
    "balance_breakdown",
    # Charts
    "chart_series",
    "load_chart_series",
    "choose_granularity",
    "resolve_date_range",
    # Allocations
    "allocate",
    "transfer",
    "unallocated",
    "budget_allocated",
    "list_allocations",
    # Account transfers
    "create_transfer",
    "update_transfer",
    "delete_transfer",
    "list_transfers",
    # Transactions
    "create_transaction",
    "update_transaction",
    "delete_transaction",
    "list_transactions",
    # Collaborators / configuration
    "MembershipChecker",
    "SqlMembershipChecker",
    "LedgerSettings",
    "load_settings",
    "configure",
    # Errors
    "LedgerError",
    "NotFoundError",
    "ForbiddenError",
    "InvalidArgumentError",
    # Models / types
    "CategoryType",
    "Granularity",
    "DateRangeOption",
    "AccountSeed",
    "TransactionView",
    "TransferView",
    "BalanceSnapshot",
    "AccountBalance",
    "UnallocatedSummary",
    "AllocationEntry",
    "TransferRecord",
    "TransactionRecord",
]
