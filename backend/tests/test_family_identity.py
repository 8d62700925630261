# backend/tests/test_family_identity.py

import pytest

from app.family.errors import FailedPreconditionError, NotFoundError, UnauthenticatedError
from app.family.identity import IdentityResolver
from app.family.store import InMemoryDocumentStore


def _make_store() -> InMemoryDocumentStore:
    store = InMemoryDocumentStore()
    store.add_user("caller", familyCode="F1", displayName="Ana", fcmTokens=["tc"])
    store.add_user("bruno", familyCode="F1", displayName="Bruno", fcmTokens=["t1"])
    store.add_user("carla", familyCode="F1", fcmTokens=["t2"])
    store.add_user("other", familyCode="F2", displayName="Outro", fcmTokens=["tx"])
    store.add_user("loner", displayName="Sem família")
    return store


def test_resolve_returns_family_code_and_display_name() -> None:
    resolver = IdentityResolver(_make_store())

    identity = resolver.resolve("caller")

    assert identity.family_code == "F1"
    assert identity.display_name == "Ana"
    assert identity.fcm_tokens == ["tc"]


def test_resolve_uses_placeholder_when_display_name_missing() -> None:
    resolver = IdentityResolver(_make_store(), default_display_name="Alguém")

    identity = resolver.resolve("carla")

    assert identity.display_name == "Alguém"


def test_resolve_placeholder_for_empty_display_name() -> None:
    store = _make_store()
    store.add_user("blank", familyCode="F1", displayName="")
    resolver = IdentityResolver(store)

    assert resolver.resolve("blank").display_name == "Alguém da família"


def test_resolve_missing_user_raises_not_found() -> None:
    resolver = IdentityResolver(_make_store())

    with pytest.raises(NotFoundError):
        resolver.resolve("ghost")


def test_resolve_without_family_code_raises_failed_precondition() -> None:
    resolver = IdentityResolver(_make_store())

    with pytest.raises(FailedPreconditionError):
        resolver.resolve("loner")


def test_resolve_empty_family_code_raises_failed_precondition() -> None:
    store = _make_store()
    store.add_user("empty", familyCode="", displayName="Vazio")
    resolver = IdentityResolver(store)

    with pytest.raises(FailedPreconditionError):
        resolver.resolve("empty")


def test_resolve_empty_caller_raises_unauthenticated() -> None:
    resolver = IdentityResolver(_make_store())

    with pytest.raises(UnauthenticatedError):
        resolver.resolve("")


def test_members_excluding_filters_caller_and_other_families() -> None:
    resolver = IdentityResolver(_make_store())

    members = resolver.members_excluding("F1", "caller")

    assert sorted(m.id for m in members) == ["bruno", "carla"]


def test_members_excluding_family_of_one_is_empty() -> None:
    store = InMemoryDocumentStore()
    store.add_user("solo", familyCode="F9", fcmTokens=["t"])
    resolver = IdentityResolver(store)

    assert resolver.members_excluding("F9", "solo") == []
