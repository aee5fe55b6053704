from .site import Site, SITE_STATUSES
from .vendor import Vendor
from .worker import Worker
from .ledger import Expense, WorkerPayment, SiteIncome

__all__ = [
    "Site",
    "SITE_STATUSES",
    "Vendor",
    "Worker",
    "Expense",
    "WorkerPayment",
    "SiteIncome",
]
