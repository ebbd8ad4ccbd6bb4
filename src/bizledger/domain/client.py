"""Client and vendor domain service."""

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

from bizledger.database.base import SheetStore
from bizledger.database.mappers import (
    CLIENT_HEADERS,
    CLIENTS_TABLE,
    client_to_row,
    row_to_client,
)
from bizledger.database.tables import EntityTable
from bizledger.domain.entities import CLIENT_TYPES, Client
from bizledger.domain.errors import NotFoundError, client_not_found
from bizledger.domain.validation import check_update_fields, require_choice
from bizledger.utils.ids import generate_id, utc_now

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "email",
    "phone",
    "address",
    "city",
    "state",
    "zip_code",
    "country",
    "tax_id",
    "type",
    "notes",
)


@dataclass(frozen=True)
class ClientStats:
    total: int
    clients: int
    vendors: int
    both: int


def matches_query(client: Client, query: str) -> bool:
    """Case-insensitive match on name, email and tax id; substring on phone."""
    lowered = query.lower()
    if lowered in client.name.lower() or lowered in client.email.lower():
        return True
    if client.tax_id and lowered in client.tax_id.lower():
        return True
    return bool(client.phone) and query in client.phone


class ClientService:
    """Service for managing clients and vendors."""

    def __init__(self, store: SheetStore):
        """Initialize client service.

        Args:
            store: Row store instance
        """
        self.store = store
        self.table = EntityTable(
            store, CLIENTS_TABLE, CLIENT_HEADERS, client_to_row, row_to_client
        )

    def initialize_table(self) -> None:
        self.table.initialize()

    def list_clients(self) -> list[Client]:
        return self.table.list_all()

    def get_client(self, client_id: str) -> Optional[Client]:
        """Get client by ID.

        Returns:
            Client entity or None if not found
        """
        return self.table.get(client_id)

    def search_clients(self, query: str) -> list[Client]:
        """Find clients whose name, email, phone or tax id contains ``query``."""
        return [client for client in self.list_clients() if matches_query(client, query)]

    def list_clients_by_type(self, client_type: str) -> list[Client]:
        """List clients of ``client_type``, including those of type "both".

        Raises:
            ValidationError: If client_type is unknown
        """
        require_choice("client type", client_type, CLIENT_TYPES)
        return [
            client
            for client in self.list_clients()
            if client.type == client_type or client.type == "both"
        ]

    def create_client(
        self,
        actor: str,
        name: str,
        email: str = "",
        phone: str = "",
        address: str = "",
        city: str = "",
        state: str = "",
        zip_code: str = "",
        country: str = "",
        tax_id: Optional[str] = None,
        type: str = "client",
        notes: Optional[str] = None,
    ) -> Client:
        """Create a client or vendor.

        Args:
            actor: Identity of the user creating the client
            name: Display name
            email: Contact email
            phone: Contact phone
            address: Street address
            city: City
            state: State or region
            zip_code: Postal code
            country: Country
            tax_id: Optional tax identifier
            type: "client", "vendor" or "both"
            notes: Optional notes

        Returns:
            The stored Client

        Raises:
            ValidationError: If type is unknown
        """
        require_choice("client type", type, CLIENT_TYPES)
        self.initialize_table()

        now = utc_now()
        client = Client(
            id=generate_id("client"),
            name=name,
            email=email,
            phone=phone,
            address=address,
            city=city,
            state=state,
            zip_code=zip_code,
            country=country,
            tax_id=tax_id,
            type=type,
            notes=notes,
            created_at=now,
            updated_at=now,
            created_by=actor,
        )
        self.table.append([client])
        logger.info(f"Created client {client.id} ({client.name})")
        return client

    def update_client(self, client_id: str, **changes: Any) -> Client:
        """Update client fields.

        Raises:
            NotFoundError: If the client doesn't exist
            ValidationError: If a field is unknown or has an invalid value
        """
        check_update_fields("client", changes, UPDATABLE_FIELDS)
        require_choice("client type", changes.get("type"), CLIENT_TYPES, required="type" in changes)

        existing = self.table.get(client_id)
        if existing is None:
            raise NotFoundError(client_not_found(client_id))

        updated = replace(existing, **changes, updated_at=utc_now())
        if not self.table.replace(client_id, updated):
            raise NotFoundError(client_not_found(client_id))
        logger.info(f"Updated client {client_id}")
        return updated

    def delete_client(self, client_id: str) -> None:
        """Delete a client. Transactions and invoices referencing it are kept.

        Raises:
            NotFoundError: If the client doesn't exist
        """
        if not self.table.remove(client_id):
            raise NotFoundError(client_not_found(client_id))
        logger.info(f"Deleted client {client_id}")

    def get_stats(self) -> ClientStats:
        """Count clients per type."""
        clients = self.list_clients()
        return ClientStats(
            total=len(clients),
            clients=sum(1 for c in clients if c.type == "client"),
            vendors=sum(1 for c in clients if c.type == "vendor"),
            both=sum(1 for c in clients if c.type == "both"),
        )
