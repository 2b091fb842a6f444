"""Integration tests for challenge activation and the referral payout it triggers."""

from decimal import Decimal

import pytest
from services.ledger_service.models import Transaction, TransactionType
from sqlalchemy import select
from tests.factories import ReferralFactory, UserFactory, auth_headers, persist


def _activation_body(buyer, **overrides):
    body = {
        "walletAddress": buyer.wallet_address,
        "selectedAccountSize": "10K",
        "usdPrice": 99.0,
        "solAmount": 0.6,
        "transactionSignature": "5xSig",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
@pytest.mark.integration
async def test_activation_pays_referrer(client, db_session):
    referrer = UserFactory.create(wallet_balance=Decimal("1.00"))
    buyer = UserFactory.create()
    await persist(db_session, referrer, buyer)
    await persist(db_session, ReferralFactory.create(referrer, buyer))

    response = await client.post(
        "/api/activate-challenge",
        json=_activation_body(buyer),
        headers=auth_headers(buyer),
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["message"] == "Challenge activated successfully"
    assert data["referralReward"] == {
        "referrerId": str(referrer.id),
        "referrerUsername": referrer.username,
        "rewardAmount": 49.5,
    }

    await db_session.refresh(referrer)
    assert referrer.wallet_balance == Decimal("50.50")

    rewards = (
        await db_session.execute(
            select(Transaction).where(
                Transaction.user_id == referrer.id,
                Transaction.transaction_type == TransactionType.REFERRAL_REWARD,
            )
        )
    ).scalars().all()
    assert len(rewards) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_activation_without_referral(client, db_session):
    buyer = await persist(db_session, UserFactory.create())

    response = await client.post(
        "/api/activate-challenge",
        json=_activation_body(buyer),
        headers=auth_headers(buyer),
    )

    assert response.status_code == 200, response.text
    assert response.json()["referralReward"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_activation_wallet_mismatch(client, db_session):
    buyer = await persist(db_session, UserFactory.create())

    response = await client.post(
        "/api/activate-challenge",
        json=_activation_body(buyer, walletAddress="SomeoneElsesWallet"),
        headers=auth_headers(buyer),
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_activation_rejects_zero_price(client, db_session):
    buyer = await persist(db_session, UserFactory.create())

    response = await client.post(
        "/api/activate-challenge",
        json=_activation_body(buyer, usdPrice=0),
        headers=auth_headers(buyer),
    )

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_activation_rejects_sub_cent_price(client, db_session):
    buyer = await persist(db_session, UserFactory.create())

    response = await client.post(
        "/api/activate-challenge",
        json=_activation_body(buyer, usdPrice=99.999),
        headers=auth_headers(buyer),
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid challenge price"}
