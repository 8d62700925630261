# backend/app/family/identity.py

"""
呼び出し元の家族解決と、家族メンバーの収集。
"""

from __future__ import annotations

from typing import List

from .errors import FailedPreconditionError, NotFoundError, UnauthenticatedError
from .schemas import FamilyIdentity, UserProfile
from .store import DocumentStore

DEFAULT_DISPLAY_NAME = "Alguém da família"


class IdentityResolver:
    """
    呼び出し元 ID から家族コード・表示名を解決し、
    同じ家族コードを持つ他のメンバーを取得する。

    家族は保存されたエンティティではなく、familyCode の一致で決まる集合として扱う。
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        default_display_name: str = DEFAULT_DISPLAY_NAME,
    ) -> None:
        self._store = store
        self._default_display_name = default_display_name

    def resolve(self, caller_id: str) -> FamilyIdentity:
        """
        呼び出し元の家族コードと表示名を返す。

        :raises UnauthenticatedError: caller_id が空
        :raises NotFoundError: ユーザードキュメントが存在しない
        :raises FailedPreconditionError: 家族コードが未設定
        """
        if not caller_id:
            raise UnauthenticatedError("Usuário não autenticado.")

        profile = self._store.get_user(caller_id)
        if profile is None:
            raise NotFoundError("Usuário que fez a chamada não encontrado.")
        if not profile.family_code:
            raise FailedPreconditionError("Usuário não tem um código de família.")

        return FamilyIdentity(
            family_code=profile.family_code,
            display_name=profile.display_name or self._default_display_name,
            fcm_tokens=list(profile.fcm_tokens),
        )

    def members_excluding(self, family_code: str, exclude_id: str) -> List[UserProfile]:
        """
        family_code が一致するメンバーのうち、exclude_id 以外を返す。

        順序に意味はない。1人家族なら空リスト。
        """
        members = self._store.query_users_by_family(family_code)
        return [m for m in members if m.id != exclude_id]
