"""Client directory: lookup and find-or-create keyed by phone number."""

import logging
import re
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from ..errors import DuplicateClientError, NotFoundError
from ..models import Client

logger = logging.getLogger(__name__)

_PHONE_NOISE = re.compile(r"[\s\-\(\)\.]")


def normalize_phone(phone: str) -> str:
    return _PHONE_NOISE.sub("", phone.strip())


@dataclass(frozen=True)
class NewClient:
    name: str
    phone: str
    email: str | None = None


class ClientDirectory:
    def __init__(self, store):
        self.store = store

    def get(self, client_id: int) -> Client:
        client = self.store.client(client_id)
        if client is None:
            raise NotFoundError(f"Client {client_id} not found")
        return client

    def find_by_phone(self, phone: str) -> Client | None:
        return self.store.client_by_phone(normalize_phone(phone))

    def find_by_email(self, email: str) -> Client | None:
        return self.store.client_by_email(email)

    def create(self, data: NewClient) -> Client:
        phone = normalize_phone(data.phone)
        if self.store.client_by_phone(phone) is not None:
            raise DuplicateClientError(f"Client with phone {phone} already exists")

        client = Client(name=data.name, phone=phone, email=data.email.lower() if data.email else None)
        try:
            self.store.insert_client(client)
        except IntegrityError as e:
            self.store.rollback()
            raise DuplicateClientError(f"Client with phone {phone} already exists") from e
        logger.info("Created client %s", client.id)
        return client

    def find_or_create(self, data: NewClient) -> Client:
        existing = self.find_by_phone(data.phone)
        if existing is not None:
            return existing
        try:
            return self.create(data)
        except DuplicateClientError:
            # Another request inserted the same phone between lookup and insert.
            existing = self.find_by_phone(data.phone)
            if existing is None:
                raise
            return existing
