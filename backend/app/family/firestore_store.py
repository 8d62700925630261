# backend/app/family/firestore_store.py

"""
Cloud Firestore をバックエンドにした DocumentStore 実装。

- users / pets / pet_tasks コレクションを扱う
- 等価フィルタは Firestore 側で行い、クライアント側での絞り込みはしない
- Google API 由来の例外は DocumentStoreError に包んで送出する
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import firebase_admin
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from .schemas import FIELD_FAMILY_CODE, PetRecord, TaskRecord, UserProfile
from .store import PET_TASKS, PETS, USERS, DocumentStoreError


class FirestoreDocumentStore:
    """
    firebase_admin.firestore クライアントの薄いラッパー。

    client を渡さない場合は共有 App から生成する。
    """

    def __init__(self, app: Optional[firebase_admin.App] = None, *, client: Any = None) -> None:
        self._db = client if client is not None else firestore.client(app)

    def _get(self, collection: str, doc_id: str):
        try:
            snapshot = self._db.collection(collection).document(doc_id).get()
        except google_exceptions.GoogleAPICallError as exc:
            raise DocumentStoreError(f"Failed to read {collection}/{doc_id}: {exc}") from exc
        if not snapshot.exists:
            return None
        return snapshot

    def _where_family(self, collection: str, family_code: str) -> list:
        query = self._db.collection(collection).where(
            filter=FieldFilter(FIELD_FAMILY_CODE, "==", family_code)
        )
        try:
            return list(query.stream())
        except google_exceptions.GoogleAPICallError as exc:
            raise DocumentStoreError(f"Failed to query {collection}: {exc}") from exc

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        snapshot = self._get(USERS, user_id)
        if snapshot is None:
            return None
        return UserProfile.from_document(snapshot.id, snapshot.to_dict())

    def query_users_by_family(self, family_code: str) -> List[UserProfile]:
        return [
            UserProfile.from_document(s.id, s.to_dict())
            for s in self._where_family(USERS, family_code)
        ]

    def update_user(self, user_id: str, fields: Dict[str, Any]) -> None:
        try:
            self._db.collection(USERS).document(user_id).update(fields)
        except google_exceptions.GoogleAPICallError as exc:
            raise DocumentStoreError(f"Failed to update {USERS}/{user_id}: {exc}") from exc

    def get_pet(self, pet_id: str) -> Optional[PetRecord]:
        snapshot = self._get(PETS, pet_id)
        if snapshot is None:
            return None
        return PetRecord.from_document(snapshot.id, snapshot.to_dict())

    def query_pets_by_family(self, family_code: str) -> List[PetRecord]:
        return [
            PetRecord.from_document(s.id, s.to_dict())
            for s in self._where_family(PETS, family_code)
        ]

    def query_tasks_by_family(self, family_code: str) -> List[TaskRecord]:
        return [
            TaskRecord.from_document(s.id, s.to_dict())
            for s in self._where_family(PET_TASKS, family_code)
        ]
