"""Domain layer for bizledger.

Services are imported lazily: the database mappers import the entity module
from this package, and the services import the mappers.
"""

__all__ = [
    "TransactionService",
    "ClientService",
    "InvoiceService",
    "AnalyticsService",
]


def __getattr__(name):
    if name == "TransactionService":
        from bizledger.domain.transaction import TransactionService

        return TransactionService
    if name == "ClientService":
        from bizledger.domain.client import ClientService

        return ClientService
    if name == "InvoiceService":
        from bizledger.domain.invoice import InvoiceService

        return InvoiceService
    if name == "AnalyticsService":
        from bizledger.domain.analytics import AnalyticsService

        return AnalyticsService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
