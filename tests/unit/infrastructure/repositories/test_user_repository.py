import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError, OperationalError

from tests.factories.user import create_fake_user
from warden.core.exceptions import (
    DatabaseError,
    DeadlineExceededError,
    DuplicateEmailError,
    EditConflictError,
    PasswordDigestMissingError,
    RecordNotFoundError,
)
from warden.infrastructure.repositories.user_repository import UserRepository


def _compiled(db_session) -> str:
    statement = db_session.execute.call_args.args[0]
    return str(statement.compile(dialect=postgresql.dialect()))


class _PsycopgUniqueViolation(Exception):
    def __init__(self, constraint):
        super().__init__(f'duplicate key value violates unique constraint "{constraint}"')
        self.diag = SimpleNamespace(constraint_name=constraint)


class _AsyncpgUniqueViolation(Exception):
    def __init__(self, constraint):
        super().__init__("duplicate key value violates unique constraint")
        self.constraint_name = constraint


def _asyncpg_integrity_error(constraint: str) -> IntegrityError:
    adapted = Exception("<class 'asyncpg.exceptions.UniqueViolationError'>")
    adapted.__cause__ = _AsyncpgUniqueViolation(constraint)
    return IntegrityError("INSERT INTO users", {}, adapted)


@pytest.fixture
def user_repository_sql(db_session):
    return UserRepository(db_session, timeout=1.0)


class TestUserRepositoryInsert:
    @pytest.mark.asyncio
    async def test_insert_reads_back_generated_columns(self, user_repository_sql, db_session):
        # Arrange
        created_at = datetime(2024, 5, 1, tzinfo=timezone.utc)
        db_session.execute.return_value.mappings.return_value.one.return_value = {
            "id": 7,
            "created_at": created_at,
            "version": 1,
        }
        user = create_fake_user(email="alice@example.com")

        # Act
        saved = await user_repository_sql.insert(user)

        # Assert
        assert (saved.id, saved.created_at, saved.version) == (7, created_at, 1)
        sql = _compiled(db_session)
        assert sql.startswith("INSERT INTO users")
        assert "RETURNING users.id, users.created_at, users.version" in sql
        db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            IntegrityError("INSERT INTO users", {}, _PsycopgUniqueViolation("users_email_key")),
            _asyncpg_integrity_error("users_email_key"),
        ],
        ids=["psycopg", "asyncpg"],
    )
    async def test_email_constraint_violation_is_duplicate_email(self, user_repository_sql, db_session, error):
        # Arrange
        db_session.execute.side_effect = error

        # Act & Assert
        with pytest.raises(DuplicateEmailError):
            await user_repository_sql.insert(create_fake_user())
        db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_constraint_violation_is_database_error(self, user_repository_sql, db_session):
        # Arrange
        db_session.execute.side_effect = _asyncpg_integrity_error("users_pkey")

        # Act & Assert
        with pytest.raises(DatabaseError):
            await user_repository_sql.insert(create_fake_user())

    @pytest.mark.asyncio
    async def test_driver_failure_hides_driver_text(self, user_repository_sql, db_session):
        # Arrange
        db_session.execute.side_effect = OperationalError(
            "INSERT INTO users", {}, Exception("could not connect to db.internal:5432")
        )

        # Act
        with pytest.raises(DatabaseError) as exc_info:
            await user_repository_sql.insert(create_fake_user())

        # Assert
        assert "db.internal" not in str(exc_info.value)
        assert exc_info.value.__cause__ is None
        db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_digest_faults_before_touching_the_store(self, user_repository_sql, db_session):
        with pytest.raises(PasswordDigestMissingError):
            await user_repository_sql.insert(create_fake_user(password=None))
        db_session.execute.assert_not_awaited()


class TestUserRepositoryLookup:
    @pytest.mark.asyncio
    async def test_get_by_email_maps_row(self, user_repository_sql, db_session):
        # Arrange
        digest = create_fake_user().password.hash
        db_session.execute.return_value.mappings.return_value.first.return_value = {
            "id": 3,
            "created_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
            "name": "Alice",
            "email": "alice@example.com",
            "password_hash": digest,
            "activated": True,
            "version": 4,
        }

        # Act
        user = await user_repository_sql.get_by_email("alice@example.com")

        # Assert
        assert (user.id, user.name, user.activated, user.version) == (3, "Alice", True, 4)
        assert user.password.hash == digest
        assert user.password.plaintext is None
        assert "WHERE users.email =" in _compiled(db_session)

    @pytest.mark.asyncio
    async def test_get_by_id_missing_row_raises_not_found(self, user_repository_sql, db_session):
        # Arrange
        db_session.execute.return_value.mappings.return_value.first.return_value = None

        # Act & Assert
        with pytest.raises(RecordNotFoundError):
            await user_repository_sql.get_by_id(404)


class TestUserRepositoryUpdate:
    @pytest.mark.asyncio
    async def test_update_is_conditional_on_version(self, user_repository_sql, db_session):
        # Arrange
        db_session.execute.return_value.scalar_one_or_none.return_value = 6
        user = create_fake_user()
        user.id, user.version = 11, 5

        # Act
        updated = await user_repository_sql.update(user)

        # Assert
        assert updated.version == 6
        sql = _compiled(db_session)
        assert "WHERE users.id =" in sql
        assert "users.version =" in sql
        assert "users.version +" in sql
        assert sql.endswith("RETURNING users.version")

    @pytest.mark.asyncio
    async def test_zero_rows_is_edit_conflict(self, user_repository_sql, db_session):
        # Arrange
        db_session.execute.return_value.scalar_one_or_none.return_value = None
        user = create_fake_user()
        user.id, user.version = 11, 5

        # Act & Assert
        with pytest.raises(EditConflictError):
            await user_repository_sql.update(user)
        assert user.version == 5

    @pytest.mark.asyncio
    async def test_slow_store_exceeds_deadline(self, db_session):
        # Arrange
        async def stall(*args, **kwargs):
            await asyncio.sleep(1)

        db_session.execute.side_effect = stall
        repository = UserRepository(db_session, timeout=0.01)
        user = create_fake_user()
        user.id, user.version = 11, 5

        # Act & Assert
        with pytest.raises(DeadlineExceededError):
            await repository.update(user)
        db_session.rollback.assert_awaited_once()
        db_session.commit.assert_not_awaited()
