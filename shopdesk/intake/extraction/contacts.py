"""Contact extraction from photographed customer lists."""

from __future__ import annotations

import logging
import re
from enum import Enum

from . import RecordExtractor
from .lines import segment_lines
from .models import ExtractedContact
from .patterns import find_email, find_phone, normalize_phone

logger = logging.getLogger(__name__)

_UPPERCASE = re.compile(r"[A-Z]")

# Separators left between a name and the email that follows it on one line
_NAME_SEPARATORS = " \t-–:;,|<(\"'"


class ContactState(Enum):
    EMPTY = "empty"
    NAME_ONLY = "name_only"
    EMAIL_ONLY = "email_only"
    COMPLETE = "complete"


class ContactAccumulator:
    """The contact record currently being assembled."""

    def __init__(self) -> None:
        self.name: str | None = None
        self.email: str | None = None
        self.phone: str | None = None

    @property
    def state(self) -> ContactState:
        if self.name and self.email:
            return ContactState.COMPLETE
        if self.email:
            return ContactState.EMAIL_ONLY
        if self.name:
            return ContactState.NAME_ONLY
        return ContactState.EMPTY

    @property
    def is_empty(self) -> bool:
        return self.state is ContactState.EMPTY and not self.phone

    def flush(self) -> ExtractedContact | None:
        """Close the record and reset the accumulator.

        Returns the finished contact, or None if name or email is missing.
        """
        contact = None
        if self.state is ContactState.COMPLETE:
            contact = ExtractedContact(
                name=self.name, email=self.email, phone=self.phone
            )
        elif not self.is_empty:
            logger.debug(
                "Dropping incomplete contact name=%r email=%r",
                self.name,
                self.email,
            )
        self.name = None
        self.email = None
        self.phone = None
        return contact


class ContactAssembler:
    """Groups classified lines into contacts in a single left-to-right pass.

    A second email closes the open record. Name-shaped lines seen after the
    open record is already complete are held for the next record together
    with any phone number that follows them; the last such line before the
    next email is its name, unless that email's own line carries a name.
    """

    def __init__(self) -> None:
        self._current = ContactAccumulator()
        self._upcoming = ContactAccumulator()
        self._contacts: list[ExtractedContact] = []

    @property
    def contacts(self) -> list[ExtractedContact]:
        return list(self._contacts)

    def feed(self, line: str) -> None:
        email_match = find_email(line)
        if email_match:
            promoted = False
            if self._current.email:
                self._close_current()
                promoted = True
            self._current.email = email_match.group(0)
            name = line[: email_match.start()].strip(_NAME_SEPARATORS)
            if name and (promoted or not self._current.name):
                self._current.name = name

        phone_match = find_phone(line)
        if phone_match:
            target = self._current if self._upcoming.is_empty else self._upcoming
            if not target.phone:
                target.phone = normalize_phone(phone_match.group(0))

        if email_match or phone_match:
            return
        if not self._looks_like_name(line):
            return
        if not self._current.name:
            self._current.name = line
        elif self._current.state is ContactState.COMPLETE:
            self._upcoming.name = line

    def finish(self) -> list[ExtractedContact]:
        """Flush the open record and return every contact found."""
        self._close_current()
        self._upcoming.flush()
        return self.contacts

    def _close_current(self) -> None:
        contact = self._current.flush()
        if contact is not None:
            self._contacts.append(contact)
        self._current, self._upcoming = self._upcoming, self._current

    @staticmethod
    def _looks_like_name(line: str) -> bool:
        if len(line) <= 2:
            return False
        return bool(_UPPERCASE.search(line)) or " " in line


class ContactExtractor(RecordExtractor):
    """Reconstructs contact records from a photographed list."""

    kind = "contacts"

    def extract(self, text: str, source: str = "") -> list[ExtractedContact]:
        assembler = ContactAssembler()
        for line in segment_lines(text):
            assembler.feed(line)
        contacts = assembler.finish()
        logger.debug("Extracted %d contacts from %s", len(contacts), source or "text")
        return contacts
