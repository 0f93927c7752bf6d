"""Participant credentials."""

import logging

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

from ..persistence.store import CREDENTIALS, JsonStore

logger = logging.getLogger(__name__)


class AuthManager:
    """
    Checks the password a client presents for a participant id.

    Password hashes are Argon2 and live in the `credentials` table. Unknown
    ids register on first use, except reserved ids (the admins), which must
    be given a password ahead of time with `set_password`.
    """

    def __init__(self, store: JsonStore, reserved_ids: list[str] | set[str] | None = None):
        self._store = store
        self._reserved: set[str] = set(reserved_ids or ())
        self._hasher = PasswordHasher()
        self._hashes: dict[str, str] = store.load_cache(CREDENTIALS)

    def hash_password(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            return self._hasher.verify(password_hash, password)
        except (VerifyMismatchError, InvalidHashError):
            return False

    def is_registered(self, participant_id: str) -> bool:
        return participant_id in self._hashes

    def authenticate(self, participant_id: str, password: str) -> bool:
        """
        Check a participant's password.

        Returns True if credentials are valid.
        Rehashes and stores the hash when Argon2's parameters have changed.
        """
        password_hash = self._hashes.get(participant_id)
        if password_hash is None or not self.verify_password(password, password_hash):
            return False

        if self._hasher.check_needs_rehash(password_hash):
            self.set_password(participant_id, password)
        return True

    def register(self, participant_id: str, password: str) -> bool:
        """
        Register a password for a new participant id.

        Returns False if the id is taken or reserved.
        """
        if participant_id in self._hashes or participant_id in self._reserved:
            return False
        self.set_password(participant_id, password)
        logger.info("Registered credentials for %s", participant_id)
        return True

    def set_password(self, participant_id: str, password: str) -> None:
        """Store a password for any id, replacing an existing one."""
        self._hashes[participant_id] = self.hash_password(password)
        self._store.save_cache(CREDENTIALS, self._hashes)
