from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List

import pytest

from dcnexus.auth import (
    AuthService,
    DuplicateEmail,
    InvalidCredentials,
    MissingCredentials,
    ValidationFailed,
)
from dcnexus.models import UserRecord
from dcnexus.store import MemoryRecordStore, StorageUnavailable
from dcnexus.validation import INVALID_EMAIL_MESSAGE, INVALID_NAME_MESSAGE, WEAK_PASSWORD_MESSAGE

FIXED_NOW = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


class _FailingStore:
    def load(self) -> List[UserRecord]:
        raise StorageUnavailable("disk on fire")

    def save(self, records: Iterable[UserRecord]) -> None:
        raise StorageUnavailable("disk on fire")


@pytest.fixture()
def store() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture()
def service(store: MemoryRecordStore) -> AuthService:
    return AuthService(store, clock=lambda: FIXED_NOW)


def test_register_normalises_and_persists_record(service: AuthService, store: MemoryRecordStore) -> None:
    user = service.register("  Ana Lopez  ", "Ana@Test.com", "secret1")

    expected_id = int(FIXED_NOW.timestamp() * 1000)
    assert user == {"id": expected_id, "fullName": "Ana Lopez", "email": "ana@test.com"}
    assert "password" not in user

    [record] = store.load()
    assert record.full_name == "Ana Lopez"
    assert record.email == "ana@test.com"
    assert record.password == "secret1"
    assert record.created_at == FIXED_NOW.isoformat()


@pytest.mark.parametrize(
    "full_name, email, password, message",
    [
        ("Al", "bad", "1", INVALID_NAME_MESSAGE),
        ("Ana Lopez", "bad", "1", INVALID_EMAIL_MESSAGE),
        ("Ana Lopez", "ana@test.com", "1", WEAK_PASSWORD_MESSAGE),
    ],
)
def test_register_reports_first_failed_rule(
    service: AuthService, store: MemoryRecordStore, full_name, email, password, message
) -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        service.register(full_name, email, password)

    assert excinfo.value.message == message
    assert store.load() == []


def test_validation_happens_before_store_access() -> None:
    service = AuthService(_FailingStore())

    with pytest.raises(ValidationFailed):
        service.register("Al", "ana@test.com", "secret1")


def test_register_rejects_case_insensitive_duplicate(service: AuthService, store: MemoryRecordStore) -> None:
    service.register("First User", "A@x.com", "secret1")

    with pytest.raises(DuplicateEmail):
        service.register("Second User", "a@X.com", "secret2")

    assert len(store.load()) == 1


def test_register_appends_after_existing_records(store: MemoryRecordStore) -> None:
    ticks = iter(
        [
            datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
            datetime(2024, 5, 1, 12, 1, tzinfo=timezone.utc),
        ]
    )
    service = AuthService(store, clock=lambda: next(ticks))

    first = service.register("First User", "first@example.com", "secret1")
    second = service.register("Second User", "second@example.com", "secret2")

    assert [record.email for record in store.load()] == ["first@example.com", "second@example.com"]
    assert second["id"] > first["id"]


def test_ids_stay_increasing_when_clock_repeats(service: AuthService) -> None:
    first = service.register("First User", "first@example.com", "secret1")
    second = service.register("Second User", "second@example.com", "secret2")

    assert second["id"] == first["id"] + 1


def test_login_round_trip(service: AuthService) -> None:
    service.register("Ana Lopez", "Ana@Test.com", "secret1")

    user = service.login("ana@test.com", "secret1")

    assert user["fullName"] == "Ana Lopez"
    assert user["email"] == "ana@test.com"
    assert "password" not in user


def test_login_matches_email_case_insensitively(service: AuthService) -> None:
    service.register("Ana Lopez", "ana@test.com", "secret1")

    assert service.login("ANA@TEST.COM", "secret1")["email"] == "ana@test.com"


@pytest.mark.parametrize("email, password", [("", "secret1"), ("ana@test.com", ""), (None, None)])
def test_login_requires_both_fields(service: AuthService, email, password) -> None:
    with pytest.raises(MissingCredentials):
        service.login(email, password)


def test_unknown_email_and_wrong_password_are_indistinguishable(service: AuthService) -> None:
    service.register("Ana Lopez", "ana@test.com", "secret1")

    with pytest.raises(InvalidCredentials) as unknown:
        service.login("nobody@test.com", "secret1")
    with pytest.raises(InvalidCredentials) as wrong:
        service.login("ana@test.com", "Secret1")

    assert type(unknown.value) is type(wrong.value)
    assert unknown.value.message == wrong.value.message


def test_password_comparison_is_exact(service: AuthService) -> None:
    service.register("Ana Lopez", "ana@test.com", "contraseña")

    assert service.login("ana@test.com", "contraseña")["email"] == "ana@test.com"
    with pytest.raises(InvalidCredentials):
        service.login("ana@test.com", "contraseña ")


def test_wrong_password_with_lone_surrogate_is_invalid_credentials(service: AuthService) -> None:
    service.register("Ana Lopez", "ana@test.com", "secret1")

    with pytest.raises(InvalidCredentials):
        service.login("ana@test.com", "secret\ud800")


def test_password_with_lone_surrogate_can_sign_in(service: AuthService) -> None:
    service.register("Ana Lopez", "ana@test.com", "secret\ud800")

    assert service.login("ana@test.com", "secret\ud800")["email"] == "ana@test.com"


def test_storage_failure_propagates() -> None:
    service = AuthService(_FailingStore())

    with pytest.raises(StorageUnavailable):
        service.register("Ana Lopez", "ana@test.com", "secret1")
    with pytest.raises(StorageUnavailable):
        service.login("ana@test.com", "secret1")
