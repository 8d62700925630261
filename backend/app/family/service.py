# backend/app/family/service.py

"""
family 通知バックエンドのサービス層。

責務:
- 通知: 呼び出し元の家族解決 → （ペット名解決）→ ペイロード生成 → メンバー収集
  → トークン収集 → マルチキャスト配信、の順で処理する
- 家族統計・トークン掃除の入口
- 想定外の例外は InternalError に包み、詳細はサーバーログにだけ残す

どこかの段階で失敗した場合はそこで中断し、部分的な配信は行わない。
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from app.notifications.dispatcher import NotificationDispatcher
from app.notifications.payloads import (
    DEFAULT_APP_NAME,
    PET_SCOPED_KINDS,
    compose_payload,
    missing_fields,
)
from app.notifications.schemas import NotificationEvent
from app.notifications.transport import PushTransport

from .errors import (
    FamilyServiceError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    UnauthenticatedError,
)
from .identity import DEFAULT_DISPLAY_NAME, IdentityResolver
from .schemas import FamilyStatsResponse, NotifyResponse, TokenCleanupResponse
from .stats import FamilyStatsAggregator
from .store import DocumentStore
from .tokens import TokenHygieneEngine, collect_tokens

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_TOKENS_MESSAGE = "Nenhum token para notificar."
DEFAULT_PET_NAME = "Um pet"


class FamilyService:
    """
    DocumentStore と PushTransport を受け取り、各エントリーポイントを提供するサービス。

    - 依存はコンストラクタで注入する（プロセス共有のインスタンスは state.py で管理）
    - FamilyServiceError はそのまま呼び出し元へ、それ以外は InternalError へ
    """

    def __init__(
        self,
        store: DocumentStore,
        transport: PushTransport,
        *,
        app_name: str = DEFAULT_APP_NAME,
        default_display_name: str = DEFAULT_DISPLAY_NAME,
        default_pet_name: str = DEFAULT_PET_NAME,
        hygiene: Optional[TokenHygieneEngine] = None,
    ) -> None:
        self._store = store
        self._app_name = app_name
        self._default_pet_name = default_pet_name
        self._identity = IdentityResolver(store, default_display_name=default_display_name)
        self._dispatcher = NotificationDispatcher(transport)
        self._stats = FamilyStatsAggregator(store)
        self._hygiene = hygiene or TokenHygieneEngine(store, transport)

    # ---- 内部ヘルパー -------------------------------------------------

    def _run(self, operation: str, func: Callable[[], T]) -> T:
        try:
            return func()
        except FamilyServiceError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("%s failed unexpectedly.", operation)
            raise InternalError("Erro interno do servidor.") from exc

    def _resolve_pet_name(self, pet_id: str) -> str:
        pet = self._store.get_pet(pet_id)
        if pet is None:
            raise NotFoundError("Pet não encontrado.")
        return pet.name or self._default_pet_name

    # ---- 公開メソッド -------------------------------------------------

    def notify_family(self, caller_id: str, event: NotificationEvent) -> NotifyResponse:
        """
        呼び出し元以外の家族メンバー全員へ event を通知する。

        トークン単位の失敗があっても success=True を返す（件数は notifications_sent に反映）。
        """
        logger.info("notify_family(%s) called by %s", event.kind.value, caller_id)

        missing = missing_fields(event)
        if missing:
            raise InvalidArgumentError(
                f"Dados obrigatórios não fornecidos: {', '.join(missing)}."
            )

        def _notify() -> NotifyResponse:
            identity = self._identity.resolve(caller_id)

            pet_name = None
            if event.kind in PET_SCOPED_KINDS:
                pet_name = self._resolve_pet_name(event.pet_id)

            payload = compose_payload(
                event,
                display_name=identity.display_name,
                pet_name=pet_name,
                app_name=self._app_name,
            )

            members = self._identity.members_excluding(identity.family_code, caller_id)
            tokens = collect_tokens(
                members,
                exclude_id=caller_id,
                exclude_tokens=identity.fcm_tokens,
            )
            if not tokens:
                logger.info("No registration tokens found in family (excluding the sender).")
                return NotifyResponse(success=True, notifications_sent=0, message=NO_TOKENS_MESSAGE)

            result = self._dispatcher.dispatch(tokens, payload)
            return NotifyResponse(success=True, notifications_sent=result.sent_count)

        return self._run("notify_family", _notify)

    def family_stats(self, caller_id: str) -> FamilyStatsResponse:
        """呼び出し元の家族のペット / タスク統計を返す。"""
        logger.info("family_stats called by %s", caller_id)

        def _stats() -> FamilyStatsResponse:
            identity = self._identity.resolve(caller_id)
            return FamilyStatsResponse(success=True, stats=self._stats.stats(identity.family_code))

        return self._run("family_stats", _stats)

    def cleanup_tokens(self, caller_id: str) -> TokenCleanupResponse:
        """呼び出し元自身の端末トークンを掃除する。"""
        logger.info("cleanup_tokens called by %s", caller_id)
        if not caller_id:
            raise UnauthenticatedError("Usuário não autenticado.")

        def _cleanup() -> TokenCleanupResponse:
            result = self._hygiene.cleanup_tokens(caller_id)
            return TokenCleanupResponse(
                success=True,
                removed_tokens=result.removed_tokens,
                valid_tokens=result.valid_tokens,
            )

        return self._run("cleanup_tokens", _cleanup)
