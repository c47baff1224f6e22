# Overview: Service-layer operations for clients; encapsulates business logic and database work.

from __future__ import annotations

from ..extensions import db
from ..models import Client, User
from ..time_utils import utcnow
from .catalog_common import contact_patch, get_live, list_live, require_business_id
from .concurrency import transactional
from . import permission_service


def get_clients(caller: User, business_id: int) -> list[Client]:
    permission_service.require_reader(caller, business_id)
    return list_live(Client, business_id)


def get_client(caller: User, client_id: int) -> Client:
    client = get_live(Client, client_id, "Client")
    permission_service.require_reader(caller, client.business_id)
    return client


@transactional
def create_client(caller: User, data: dict) -> Client:
    business_id = require_business_id(data)
    permission_service.require_writer(caller, business_id)

    client = Client(business_id=business_id, **contact_patch(data, partial=False))
    db.session.add(client)
    db.session.flush()
    return client


@transactional
def update_client(caller: User, client_id: int, data: dict) -> Client:
    client = get_live(Client, client_id, "Client", lock=True)
    permission_service.require_writer(caller, client.business_id)

    for key, value in contact_patch(data, partial=True).items():
        setattr(client, key, value)
    db.session.flush()
    return client


@transactional
def delete_client(caller: User, client_id: int) -> int:
    client = get_live(Client, client_id, "Client", lock=True)
    permission_service.require_writer(caller, client.business_id)

    client.deletion_date = utcnow()
    return client_id
