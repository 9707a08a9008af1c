"""
Account service: driver / admin registry, password hashing, authorization.

Passwords are stored as ``pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>``.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets

from dutytrip.domain.entities import Account, Principal, Trip
from dutytrip.domain.enums import Role
from dutytrip.domain.errors import AuthenticationError
from dutytrip.infrastructure.repositories import AccountRepository

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 240_000


def hash_password(password: str, iterations: int = PBKDF2_ITERATIONS) -> str:
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, iterations)
    return f"pbkdf2_sha256${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt_hex, digest_hex = encoded.split("$")
        salt, rounds = bytes.fromhex(salt_hex), int(iterations)
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, rounds)
    return hmac.compare_digest(digest.hex(), digest_hex)


# ── Authorization ─────────────────────────────────────────────────────


def has_role(principal: Principal, required: Role) -> bool:
    match principal.role:
        case Role.ADMIN:
            return required is Role.ADMIN
        case Role.DRIVER:
            return required is Role.DRIVER


def may_complete(principal: Principal, trip: Trip) -> bool:
    """Admins may end any duty; drivers only their own."""
    match principal.role:
        case Role.ADMIN:
            return True
        case Role.DRIVER:
            return trip.driver_id is not None and (
                trip.driver_id.lower() == principal.username.lower()
            )


# ── Service ───────────────────────────────────────────────────────────


class AccountService:
    def __init__(self, accounts: AccountRepository):
        self.accounts = accounts

    async def register(
        self, username: str, password: str, role: Role = Role.DRIVER
    ) -> Account:
        row = await self.accounts.create(
            username.strip(), hash_password(password), role
        )
        logger.info("Registered %s account %s", role.value, row.username)
        return row.to_entity()

    async def authenticate(
        self, username: str, password: str, role: Role
    ) -> Principal:
        row = await self.accounts.get_by_username(username.strip())
        if (
            row is None
            or Role(row.role) is not role
            or not verify_password(password, row.password_hash)
        ):
            raise AuthenticationError("Invalid credentials")
        return Principal(username=row.username, role=role)

    async def list_drivers(self) -> list[Account]:
        return [row.to_entity() for row in await self.accounts.list_by_role(Role.DRIVER)]

    async def remove_driver(self, username: str) -> bool:
        """Admin accounts are never removed through here."""
        removed = await self.accounts.delete(username.strip(), Role.DRIVER)
        if removed:
            logger.info("Removed driver account %s", username)
        return removed
