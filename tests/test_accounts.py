"""Unit tests for password hashing, authorization and the account service."""

import pytest

from dutytrip.domain.entities import Principal, Trip
from dutytrip.domain.enums import Role, TripState
from dutytrip.domain.errors import AuthenticationError, DuplicateAccountError
from dutytrip.infrastructure.repositories import AccountRepository
from dutytrip.services.accounts import (
    AccountService,
    has_role,
    hash_password,
    may_complete,
    verify_password,
)

ADMIN = Principal("ops", Role.ADMIN)
RAVI = Principal("ravi", Role.DRIVER)


class TestPasswords:
    def test_round_trip(self):
        encoded = hash_password("s3cret", iterations=1_000)
        assert verify_password("s3cret", encoded)
        assert not verify_password("S3cret", encoded)

    def test_salted(self):
        assert hash_password("pw", iterations=1_000) != hash_password("pw", iterations=1_000)

    @pytest.mark.parametrize("encoded", ["", "plaintext", "md5$1$aa$bb"])
    def test_malformed_hash_never_verifies(self, encoded):
        assert not verify_password("plaintext", encoded)


class TestAuthorization:
    def test_roles_are_exclusive(self):
        assert has_role(ADMIN, Role.ADMIN)
        assert not has_role(ADMIN, Role.DRIVER)
        assert has_role(RAVI, Role.DRIVER)
        assert not has_role(RAVI, Role.ADMIN)

    def test_driver_may_complete_own_duty_only(self):
        own = Trip(code="1", state=TripState.ACTIVE, driver_id="Ravi")
        other = Trip(code="2", state=TripState.ACTIVE, driver_id="suresh")
        unclaimed = Trip(code="3")
        assert may_complete(RAVI, own)
        assert not may_complete(RAVI, other)
        assert not may_complete(RAVI, unclaimed)

    def test_admin_may_complete_any_duty(self):
        assert may_complete(ADMIN, Trip(code="2", driver_id="suresh"))


class TestAccountService:
    @pytest.mark.asyncio
    async def test_register_and_authenticate(self, db_session):
        service = AccountService(AccountRepository(db_session))
        account = await service.register(" ravi ", "pw")
        assert account.username == "ravi"
        assert account.role == Role.DRIVER
        assert account.password_hash != "pw"

        principal = await service.authenticate("Ravi", "pw", Role.DRIVER)
        assert principal == Principal("ravi", Role.DRIVER)

    @pytest.mark.asyncio
    async def test_authenticate_failures(self, db_session):
        service = AccountService(AccountRepository(db_session))
        await service.register("ravi", "pw")

        with pytest.raises(AuthenticationError):
            await service.authenticate("ravi", "wrong", Role.DRIVER)
        with pytest.raises(AuthenticationError):
            await service.authenticate("ravi", "pw", Role.ADMIN)
        with pytest.raises(AuthenticationError):
            await service.authenticate("nobody", "pw", Role.DRIVER)

    @pytest.mark.asyncio
    async def test_duplicate_username(self, db_session):
        service = AccountService(AccountRepository(db_session))
        await service.register("ravi", "pw")
        with pytest.raises(DuplicateAccountError):
            await service.register("RAVI", "other")

    @pytest.mark.asyncio
    async def test_list_drivers_excludes_admins(self, db_session):
        service = AccountService(AccountRepository(db_session))
        await service.register("suresh", "pw")
        await service.register("ops", "pw", Role.ADMIN)
        await service.register("farhan", "pw")

        assert [a.username for a in await service.list_drivers()] == ["farhan", "suresh"]
        assert await service.remove_driver("Farhan") is True
        assert await service.remove_driver("farhan") is False

    @pytest.mark.asyncio
    async def test_remove_driver_leaves_admins(self, db_session):
        service = AccountService(AccountRepository(db_session))
        await service.register("ops", "pw", Role.ADMIN)

        assert await service.remove_driver("ops") is False
        assert await service.authenticate("ops", "pw", Role.ADMIN) == Principal(
            "ops", Role.ADMIN
        )
