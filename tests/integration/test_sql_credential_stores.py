"""SQL token stores and account repository on SQLite (aiosqlite).

SQLite needs pysqlite's implicit transaction handling turned off for
SAVEPOINT to work; the engine fixture installs the documented event hooks.
"""

from datetime import timedelta

import pytest
from sqlalchemy import event, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.application.dtos.account import AccountCreate
from app.application.services.account_events import ACCOUNT_CREATED, AccountEventChannel
from app.application.services.token_issuer import TokenIssuer
from app.application.services.token_redeemer import TokenRedeemer
from app.application.services.token_verifier import TokenVerifier
from app.application.use_cases.credentials import PasswordResetService
from app.application.use_cases.credentials.password_reset import RESET_REQUESTED_MESSAGE
from app.domain.entities.token import TokenEntity
from app.domain.enums import InvalidReason, TokenPurpose
from app.domain.exceptions import (
    AccountAlreadyExistsException,
    SqlNotConfiguredException,
    TransientException,
)
from app.infrastructure.persistence.database import Base, get_db
from app.infrastructure.persistence.models import Profile
from app.infrastructure.persistence.repositories import (
    AccountRepository,
    InvitationRepository,
    PasswordResetTokenRepository,
)
from app.infrastructure.security import verify_password_async
from app.infrastructure.services import EmailTemplateRenderer


@pytest.fixture
async def session() -> AsyncSession:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _no_implicit_begin(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _explicit_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as db:
        yield db
    await engine.dispose()


@pytest.fixture
async def account(session: AsyncSession):
    repo = AccountRepository(session)
    return await repo.create_account(
        AccountCreate(
            email="Alice@Example.com",
            password="old-password",
            name="Alice",
            role="employee",
            department="Engineering",
        )
    )


def _reset_services(session: AsyncSession, clock):
    store = PasswordResetTokenRepository(session)
    accounts = AccountRepository(session)

    async def exists(account_id: str) -> bool:
        return await accounts.get_by_id(account_id) is not None

    issuer = TokenIssuer(store, TokenPurpose.PASSWORD_RESET, timedelta(hours=1), clock=clock)
    verifier = TokenVerifier(store, subject_exists=exists, clock=clock)
    return store, accounts, issuer, TokenRedeemer(store, verifier, clock=clock)


async def test_issue_and_get_reset_token(session, account, clock) -> None:
    store, _, issuer, _ = _reset_services(session, clock)
    issued = await issuer.issue(account.id, email=account.email)

    record = await store.get(issued.token)
    assert record is not None
    assert record.purpose == TokenPurpose.PASSWORD_RESET
    assert record.subject_id == account.id
    assert record.email == "alice@example.com"
    assert record.expires_at == clock.now + timedelta(hours=1)
    assert record.expires_at.tzinfo is not None
    assert record.used_at is None
    assert await store.get("unknown") is None


async def test_claim_is_compare_and_set(session, account, clock) -> None:
    store, _, issuer, _ = _reset_services(session, clock)
    issued = await issuer.issue(account.id)

    async with store.transaction():
        claimed = await store.claim(issued.token, clock.now)
    assert claimed is not None and claimed.used_at == clock.now

    async with store.transaction():
        assert await store.claim(issued.token, clock.now) is None
        assert await store.claim("unknown", clock.now) is None


async def test_claim_refuses_expired(session, account, clock) -> None:
    store, _, issuer, _ = _reset_services(session, clock)
    issued = await issuer.issue(account.id)
    async with store.transaction():
        assert await store.claim(issued.token, clock.now + timedelta(hours=1)) is None


async def test_redeem_updates_password(session, account, clock) -> None:
    store, accounts, issuer, redeemer = _reset_services(session, clock)
    issued = await issuer.issue(account.id)

    async def set_password(record: TokenEntity) -> None:
        await accounts.update_password(record.subject_id, "new-password")

    result = await redeemer.redeem(issued.token, set_password)
    await session.commit()
    assert result.ok

    profile = (await session.execute(select(Profile).where(Profile.id == account.id))).scalar_one()
    assert await verify_password_async("new-password", profile.hashed_password)
    assert (await store.get(issued.token)).used_at is not None


async def test_failed_effect_rolls_back_savepoint(session, account, clock) -> None:
    """The claim is undone but the surrounding transaction survives."""
    store, _, issuer, redeemer = _reset_services(session, clock)
    issued = await issuer.issue(account.id)

    async def broken(record: TokenEntity) -> None:
        raise RuntimeError("directory down")

    result = await redeemer.redeem(issued.token, broken)
    assert result.reason == InvalidReason.EFFECT_FAILED
    assert (await store.get(issued.token)).used_at is None

    async def works(record: TokenEntity) -> None:
        return None

    assert (await redeemer.redeem(issued.token, works)).ok


async def test_sequential_redemptions_single_winner(session, account, clock) -> None:
    store, _, issuer, redeemer = _reset_services(session, clock)
    issued = await issuer.issue(account.id)
    calls = 0

    async def effect(record: TokenEntity) -> None:
        nonlocal calls
        calls += 1

    results = [await redeemer.redeem(issued.token, effect) for _ in range(3)]
    assert [r.ok for r in results] == [True, False, False]
    assert calls == 1


async def test_deleted_account_invalidates_reset_token(session, account, clock) -> None:
    store, _, issuer, _ = _reset_services(session, clock)
    accounts = AccountRepository(session)
    issued = await issuer.issue(account.id)
    profile = (await session.execute(select(Profile).where(Profile.id == account.id))).scalar_one()
    await session.delete(profile)
    await session.flush()

    async def exists(account_id: str) -> bool:
        return await accounts.get_by_id(account_id) is not None

    verifier = TokenVerifier(store, subject_exists=exists, clock=clock)
    assert (await verifier.verify(issued.token)).reason == InvalidReason.IDENTITY_MISMATCH


async def test_invitation_repository_roundtrip(session, clock) -> None:
    store = InvitationRepository(session)
    issuer = TokenIssuer(store, TokenPurpose.INVITATION, timedelta(days=7), clock=clock)
    issued = await issuer.issue(
        "bob@example.com",
        issued_by="ceo@example.com",
        name="Bob",
        role="developer",
        department="Platform",
    )
    record = await store.get(issued.token)
    assert (record.email, record.issued_by, record.name, record.role, record.department) == (
        "bob@example.com",
        "ceo@example.com",
        "Bob",
        "developer",
        "Platform",
    )
    assert await store.has_pending_for_email("bob@example.com", clock.now)
    assert not await store.has_pending_for_email("bob@example.com", clock.now + timedelta(days=8))
    assert not await store.has_pending_for_email("eve@example.com", clock.now)


async def test_accept_invitation_materializes_account(session, clock) -> None:
    store = InvitationRepository(session)
    events = AccountEventChannel()
    created: list[str] = []
    events.subscribe(lambda name, acc: created.append(f"{name}:{acc.email}"))
    accounts = AccountRepository(session, events)
    issuer = TokenIssuer(store, TokenPurpose.INVITATION, timedelta(days=7), clock=clock)
    verifier = TokenVerifier(store, clock=clock)
    redeemer = TokenRedeemer(store, verifier, clock=clock)
    issued = await issuer.issue("bob@example.com", name="Bob", role="developer", department="Ops")

    async def materialize(record: TokenEntity) -> None:
        await accounts.create_account(
            AccountCreate(
                email=record.email,
                password="password1",
                name=record.name,
                role=record.role,
                department=record.department,
                invited_by=record.issued_by,
            )
        )

    assert (await redeemer.redeem(issued.token, materialize, "BOB@example.com")).ok
    assert created == [f"{ACCOUNT_CREATED}:bob@example.com"]
    bob = await accounts.get_by_email("bob@example.com")
    assert bob is not None and bob.role == "developer"


async def test_duplicate_account_rejected(session, account) -> None:
    repo = AccountRepository(session)
    with pytest.raises(AccountAlreadyExistsException):
        await repo.create_account(
            AccountCreate(
                email="alice@example.com",
                password="x" * 8,
                name="Alice 2",
                role="employee",
                department="",
            )
        )


async def test_get_db_requires_postgres_backend() -> None:
    """The SQL session dependency refuses to run on the memory backend."""
    with pytest.raises(SqlNotConfiguredException):
        async for _ in get_db():
            pass


class _DisconnectedSession:
    """AsyncSession stand-in whose connection was reset by the server."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, ConnectionResetError("connection reset"))


async def test_account_lookup_outage_raises_transient() -> None:
    accounts = AccountRepository(_DisconnectedSession())
    with pytest.raises(TransientException):
        await accounts.get_by_id("acc1")
    with pytest.raises(TransientException):
        await accounts.get_by_email("alice@example.com")


async def test_redeem_during_account_outage_keeps_token(session, account, clock) -> None:
    store = PasswordResetTokenRepository(session)
    down = AccountRepository(_DisconnectedSession())

    async def exists(account_id: str) -> bool:
        return await down.get_by_id(account_id) is not None

    verifier = TokenVerifier(store, subject_exists=exists, clock=clock)
    redeemer = TokenRedeemer(store, verifier, clock=clock)
    issued = await TokenIssuer(
        store, TokenPurpose.PASSWORD_RESET, timedelta(hours=1), clock=clock
    ).issue(account.id)

    async def effect(record: TokenEntity) -> None:
        return None

    result = await redeemer.redeem(issued.token, effect)
    assert result.reason == InvalidReason.TRANSIENT
    assert (await store.get(issued.token)).used_at is None


async def test_reset_request_during_account_outage_is_generic(session, clock, notifier) -> None:
    store = PasswordResetTokenRepository(session)
    down = AccountRepository(_DisconnectedSession())
    verifier = TokenVerifier(store, clock=clock)
    service = PasswordResetService(
        TokenIssuer(store, TokenPurpose.PASSWORD_RESET, timedelta(hours=1), clock=clock),
        TokenRedeemer(store, verifier, clock=clock),
        down,
        notifier,
        EmailTemplateRenderer(),
    )
    result = await service.request_reset("alice@example.com", "http://localhost:8080")
    assert result.message == RESET_REQUESTED_MESSAGE
    assert result.reset_link is None
    assert result.deliver is None
