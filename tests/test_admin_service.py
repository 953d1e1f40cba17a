"""Tests for OTP config management and cascade user deletion."""

import pytest

from otp_gateway.database.repository import OtpRepository, UserRepository
from otp_gateway.exceptions import BadRequestError, NotFoundError
from otp_gateway.models.user import UserRole


@pytest.fixture
def admin_service(services):
    return services.admin_service


@pytest.mark.asyncio
async def test_update_config(admin_service, services):
    await admin_service.update_otp_config(4, 30)
    config = await services.otp_service.get_config()
    assert (config.length, config.ttl_seconds) == (4, 30)


@pytest.mark.asyncio
@pytest.mark.parametrize("length,ttl", [(0, 30), (6, 0), (-1, -1)])
async def test_update_config_rejects_out_of_range(admin_service, length, ttl):
    with pytest.raises(BadRequestError):
        await admin_service.update_otp_config(length, ttl)


@pytest.mark.asyncio
async def test_list_excludes_admins(admin_service, services):
    await services.user_service.sign_up("root", "pw", UserRole.ADMIN)
    await services.user_service.sign_up("alice", "pw", UserRole.USER)
    await services.user_service.sign_up("bob", "pw", UserRole.USER)
    users = await admin_service.get_all_users_without_admins()
    assert [u.username for u in users] == ["alice", "bob"]


@pytest.mark.asyncio
async def test_delete_user_cascades_codes(admin_service, services, session_factory):
    alice = await services.user_service.sign_up("alice", "pw", UserRole.USER)
    bob = await services.user_service.sign_up("bob", "pw", UserRole.USER)
    for op in ("a", "b", "c"):
        await services.otp_service.generate(alice.id, op)
    await services.otp_service.generate(bob.id, "d")
    token = await services.user_service.login("alice", "pw")

    await admin_service.delete_user_and_codes(alice.id)

    async with session_factory() as session:
        assert await UserRepository(session).get_by_id(alice.id) is None
        assert await OtpRepository(session).list_by_user(alice.id) == []
        assert len(await OtpRepository(session).list_by_user(bob.id)) == 1
    assert services.token_registry.lookup(token) is None


@pytest.mark.asyncio
async def test_delete_missing_user(admin_service):
    with pytest.raises(NotFoundError):
        await admin_service.delete_user_and_codes(12345)
