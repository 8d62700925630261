# backend/app/family/store.py

"""
ドキュメントストアのインターフェースとインメモリ実装。

本番では FirestoreDocumentStore（firestore_store.py）を使い、
開発・テストでは InMemoryDocumentStore に差し替える。
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .schemas import FIELD_FAMILY_CODE, PetRecord, TaskRecord, UserProfile

USERS = "users"
PETS = "pets"
PET_TASKS = "pet_tasks"


class DocumentStoreError(RuntimeError):
    """ストアへの到達失敗など、ストア全般の例外。"""


class DocumentStore(Protocol):
    """
    ドキュメントストアのインターフェース。

    キー取得・等価フィルタ検索・部分更新ができる実装であれば差し替え可能。
    """

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        """ユーザーを ID で取得する。存在しなければ None。"""

    def query_users_by_family(self, family_code: str) -> List[UserProfile]:
        """familyCode が一致するユーザーを全件返す。"""

    def update_user(self, user_id: str, fields: Dict[str, Any]) -> None:
        """ユーザードキュメントの指定フィールドだけを更新する。"""

    def get_pet(self, pet_id: str) -> Optional[PetRecord]:
        """ペットを ID で取得する。存在しなければ None。"""

    def query_pets_by_family(self, family_code: str) -> List[PetRecord]:
        """familyCode が一致するペットを全件返す。"""

    def query_tasks_by_family(self, family_code: str) -> List[TaskRecord]:
        """familyCode が一致するタスクを全件返す。"""


class InMemoryDocumentStore:
    """
    dict ベースのインメモリストア。

    - 開発環境 (FAMILY_BACKEND=memory) とテストで使用
    - update_user の呼び出しを updates に記録する（書き込み回数の検証用）
    """

    def __init__(
        self,
        *,
        users: Optional[Dict[str, Dict[str, Any]]] = None,
        pets: Optional[Dict[str, Dict[str, Any]]] = None,
        tasks: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> None:
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {
            USERS: copy.deepcopy(users or {}),
            PETS: copy.deepcopy(pets or {}),
            PET_TASKS: copy.deepcopy(tasks or {}),
        }
        self.updates: List[Tuple[str, Dict[str, Any]]] = []

    @property
    def update_count(self) -> int:
        return len(self.updates)

    # ---- テスト / 開発用の投入ヘルパー ---------------------------------

    def add_user(self, user_id: str, **data: Any) -> None:
        self._collections[USERS][user_id] = data

    def add_pet(self, pet_id: str, **data: Any) -> None:
        self._collections[PETS][pet_id] = data

    def add_task(self, task_id: str, **data: Any) -> None:
        self._collections[PET_TASKS][task_id] = data

    def raw_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._collections[USERS].get(user_id)

    # ---- DocumentStore -------------------------------------------------

    def _where_family(self, collection: str, family_code: str) -> List[Tuple[str, Dict[str, Any]]]:
        return [
            (doc_id, data)
            for doc_id, data in self._collections[collection].items()
            if data.get(FIELD_FAMILY_CODE) == family_code
        ]

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        data = self._collections[USERS].get(user_id)
        if data is None:
            return None
        return UserProfile.from_document(user_id, data)

    def query_users_by_family(self, family_code: str) -> List[UserProfile]:
        return [
            UserProfile.from_document(doc_id, data)
            for doc_id, data in self._where_family(USERS, family_code)
        ]

    def update_user(self, user_id: str, fields: Dict[str, Any]) -> None:
        doc = self._collections[USERS].get(user_id)
        if doc is None:
            raise DocumentStoreError(f"User document not found: {user_id}")
        doc.update(copy.deepcopy(fields))
        self.updates.append((user_id, copy.deepcopy(fields)))

    def get_pet(self, pet_id: str) -> Optional[PetRecord]:
        data = self._collections[PETS].get(pet_id)
        if data is None:
            return None
        return PetRecord.from_document(pet_id, data)

    def query_pets_by_family(self, family_code: str) -> List[PetRecord]:
        return [
            PetRecord.from_document(doc_id, data)
            for doc_id, data in self._where_family(PETS, family_code)
        ]

    def query_tasks_by_family(self, family_code: str) -> List[TaskRecord]:
        return [
            TaskRecord.from_document(doc_id, data)
            for doc_id, data in self._where_family(PET_TASKS, family_code)
        ]
