"""Unit tests for user_service: signup, signin and referral code assignment."""

import re
import uuid
from decimal import Decimal

import pytest
from fastapi import HTTPException
from libs.auth.security import hash_password
from services.ledger_service.services.user_service import (
    ReferralCodeExhaustedError,
    assign_unique_referral_code,
    authenticate,
    backfill_referral_codes,
    create_user,
    generate_referral_code,
    get_user_by_id,
)
from tests.factories import UserFactory, persist


def _scripted(*codes):
    """Generator stub returning ``codes`` in order."""
    remaining = list(codes)
    calls = []

    def _next():
        code = remaining.pop(0)
        calls.append(code)
        return code

    _next.calls = calls
    return _next


# ---------------------------------------------------------------------------
# Referral codes
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_generate_referral_code_format():
    code = generate_referral_code()

    assert re.fullmatch(r"[0-9A-F]{8}", code)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_colliding_code_is_regenerated(db_session):
    await persist(db_session, UserFactory.create(referral_code="TAKEN001"))
    newcomer = UserFactory.create(referral_code=None)
    generator = _scripted("TAKEN001", "FRESH002")

    code = await assign_unique_referral_code(db_session, newcomer, generator=generator)

    assert code == "FRESH002"
    assert newcomer.referral_code == "FRESH002"
    assert generator.calls == ["TAKEN001", "FRESH002"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_existing_unique_code_is_kept(db_session):
    user = UserFactory.create(referral_code="KEEPME01")
    generator = _scripted()

    code = await assign_unique_referral_code(db_session, user, generator=generator)

    assert code == "KEEPME01"
    assert generator.calls == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_code_generation_gives_up_after_limit(db_session):
    await persist(db_session, UserFactory.create(referral_code="TAKEN001"))
    newcomer = UserFactory.create(referral_code=None)
    generator = _scripted(*["TAKEN001"] * 4)

    with pytest.raises(ReferralCodeExhaustedError):
        await assign_unique_referral_code(
            db_session, newcomer, max_attempts=3, generator=generator
        )

    # One initial draw plus three regenerations
    assert len(generator.calls) == 4
    assert newcomer.referral_code is None


# ---------------------------------------------------------------------------
# create_user
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_user_defaults(db_session):
    user = await create_user(
        db_session,
        username="newtrader",
        wallet_address="WalletNew111",
        password="secret123",
        email="New@Test.com",
    )

    assert user.id is not None
    assert user.wallet_balance == Decimal("0.00")
    assert re.fullmatch(r"[0-9A-F]{8}", user.referral_code)
    assert user.email == "new@test.com"
    assert user.password_hash and user.password_hash != "secret123"
    assert user.is_active is True
    assert user.is_admin is False


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize(
    "overrides,detail",
    [
        ({"username": "dupe_name"}, "Username already exists"),
        ({"wallet_address": "DupeWallet"}, "Wallet address already registered"),
        ({"email": "dupe@test.com"}, "Email already registered"),
    ],
)
async def test_create_user_rejects_duplicates(db_session, overrides, detail):
    await persist(
        db_session,
        UserFactory.create(
            username="dupe_name", wallet_address="DupeWallet", email="dupe@test.com"
        ),
    )
    fields = {
        "username": "another_name",
        "wallet_address": "AnotherWallet",
        "email": "another@test.com",
    }
    fields.update(overrides)

    with pytest.raises(HTTPException) as exc_info:
        await create_user(db_session, password="secret123", **fields)

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == detail


# ---------------------------------------------------------------------------
# authenticate / get_user_by_id
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_authenticate_stamps_last_login(db_session):
    user = await persist(
        db_session, UserFactory.create(password_hash=hash_password("secret123"))
    )

    result = await authenticate(
        db_session, wallet_address=user.wallet_address, password="secret123"
    )

    assert result.id == user.id
    assert result.last_login is not None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_authenticate_wrong_password(db_session):
    user = await persist(
        db_session, UserFactory.create(password_hash=hash_password("secret123"))
    )

    with pytest.raises(HTTPException) as exc_info:
        await authenticate(
            db_session, wallet_address=user.wallet_address, password="wrong-one"
        )

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Invalid credentials"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_authenticate_disabled_account(db_session):
    user = await persist(
        db_session,
        UserFactory.create(password_hash=hash_password("secret123"), is_active=False),
    )

    with pytest.raises(HTTPException) as exc_info:
        await authenticate(
            db_session, wallet_address=user.wallet_address, password="secret123"
        )

    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("user_id", [uuid.uuid4(), "not-a-uuid"])
async def test_get_user_by_id_not_found(db_session, user_id):
    with pytest.raises(HTTPException) as exc_info:
        await get_user_by_id(db_session, user_id)

    assert exc_info.value.status_code == 404


# ---------------------------------------------------------------------------
# backfill_referral_codes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_backfill_assigns_codes_to_users_without_one(db_session):
    legacy = [UserFactory.create(referral_code=None) for _ in range(3)]
    current = UserFactory.create(referral_code="HASONE01")
    await persist(db_session, *legacy, current)

    updated, failed = await backfill_referral_codes(db_session)

    assert failed == []
    assert {u.id for u in updated} == {u.id for u in legacy}
    codes = [u.referral_code for u in updated]
    assert all(re.fullmatch(r"[0-9A-F]{8}", code) for code in codes)
    assert len(set(codes)) == 3

    await db_session.refresh(current)
    assert current.referral_code == "HASONE01"

    # Second run has nothing left to do
    assert await backfill_referral_codes(db_session) == ([], [])
