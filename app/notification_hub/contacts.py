"""Recipient contact lookup.

Maps a user id to the addresses each channel needs. The dispatcher asks
the directory once per request; a missing address surfaces as a failed
outcome on the affected channel only.
"""

import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Contact(BaseModel):
    """Channel addresses for one user. Any of them may be absent."""

    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    phone_number: Optional[str] = None
    device_tokens: List[str] = Field(default_factory=list)
    webhook_url: Optional[str] = None


class ContactDirectory(ABC):
    """Abstract base for contact lookup."""

    @abstractmethod
    def get_contact(self, user_id: str) -> Contact:
        """Return the user's contact, empty if the user is unknown."""
        pass


class InMemoryContactDirectory(ContactDirectory):
    """Process-local contact directory."""

    def __init__(self, contacts: Optional[List[Contact]] = None):
        self._contacts: Dict[str, Contact] = {}
        self._lock = threading.Lock()
        for contact in contacts or []:
            self.upsert(contact)

    def upsert(self, contact: Contact) -> None:
        with self._lock:
            self._contacts[contact.user_id] = contact.model_copy(deep=True)

    def get_contact(self, user_id: str) -> Contact:
        with self._lock:
            contact = self._contacts.get(user_id)
            if contact is None:
                return Contact(user_id=user_id)
            return contact.model_copy(deep=True)
