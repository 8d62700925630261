# backend/app/family/state.py

"""
FamilyService / IdTokenVerifier のプロセス共有インスタンス管理。

- 初回呼び出し時にのみ生成し、以降は同じインスタンスを返す
- ストア・トランスポートは FAMILY_BACKEND に応じて選ぶ
- テスト時にリセットできるようにする
"""

from __future__ import annotations

from typing import Optional

from app.notifications.factory import build_push_transport
from app.utils.firebase import reset_firebase_app

from .auth import FirebaseIdTokenVerifier, IdTokenVerifier, StaticIdTokenVerifier
from .config import get_family_settings
from .service import FamilyService
from .store import DocumentStore, InMemoryDocumentStore

_family_service: Optional[FamilyService] = None
_id_token_verifier: Optional[IdTokenVerifier] = None


def _build_store(backend: str) -> DocumentStore:
    if backend == "firebase":
        from app.utils.firebase import get_firebase_app

        from .firestore_store import FirestoreDocumentStore

        return FirestoreDocumentStore(get_firebase_app())
    return InMemoryDocumentStore()


def get_family_service() -> FamilyService:
    """
    共有の FamilyService インスタンスを返す。
    """
    global _family_service
    if _family_service is None:
        settings = get_family_settings()
        _family_service = FamilyService(
            store=_build_store(settings.backend),
            transport=build_push_transport(settings.backend),
            app_name=settings.app_name,
            default_display_name=settings.default_display_name,
            default_pet_name=settings.default_pet_name,
        )
    return _family_service


def get_id_token_verifier() -> IdTokenVerifier:
    """
    共有の IdTokenVerifier を返す。
    """
    global _id_token_verifier
    if _id_token_verifier is None:
        settings = get_family_settings()
        if settings.backend == "firebase":
            from app.utils.firebase import get_firebase_app

            _id_token_verifier = FirebaseIdTokenVerifier(get_firebase_app())
        else:
            _id_token_verifier = StaticIdTokenVerifier()
    return _id_token_verifier


def reset_state() -> None:
    """
    テスト用に共有インスタンス・Firebase App・設定キャッシュをリセットする。
    """
    global _family_service, _id_token_verifier
    _family_service = None
    _id_token_verifier = None
    reset_firebase_app()
    get_family_settings.cache_clear()
