"""
Integrations layer.
This package contains all code used to communicate with the rental backend:
- Rental orders (create, list, search, extend, confirm return)
- Contracts and contract annexes (email PIN signing)
- Deposit settlements and handover reports
- The public device-model catalog

Key rule:
- Callers MUST NOT build URLs or call httpx directly.
- Everything goes through the clients under src/integrations/clients/real_http,
  which share one ApiTransport.
- Tests and the demo script route the same clients into the in-process mock
  backend (clients/mocks) instead of the network.

Switching implementations:
- The selection of network vs mock transport happens in ONE place
  (src/integrations/rental_api.py, build_rental_api).
"""

from .contracts.agreements import Contract, ContractAnnex, SignatureRecord
from .contracts.catalog import DeviceModel
from .contracts.handover import HandoverReport
from .contracts.interfaces import (
    HandoverType,
    SessionCredentials,
    SessionProvider,
    StaticSessionProvider,
)
from .contracts.orders import (
    OrderDetailRequest,
    PaginatedOrders,
    RentalOrder,
    RentalWindow,
)
from .contracts.settlements import Settlement, split_settlement_amounts
from .policy.errors import (
    ApiError,
    AuthError,
    ConfigurationError,
    IntegrationResponseError,
    RentalClientError,
    SigningSequenceError,
    TransportError,
    ValidationError,
)

__all__ = [
    # session
    "SessionCredentials", "SessionProvider", "StaticSessionProvider",
    # orders
    "OrderDetailRequest", "PaginatedOrders", "RentalOrder", "RentalWindow",
    # agreements
    "Contract", "ContractAnnex", "SignatureRecord",
    # settlement / handover
    "HandoverReport", "HandoverType", "Settlement", "split_settlement_amounts",
    # catalog
    "DeviceModel",
    # errors
    "ApiError", "AuthError", "ConfigurationError", "IntegrationResponseError",
    "RentalClientError", "SigningSequenceError", "TransportError", "ValidationError",
]
