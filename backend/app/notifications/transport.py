# backend/app/notifications/transport.py

"""
プッシュ配信トランスポートのインターフェースと実装。

- PushTransport: send_multicast() を持つ最小インターフェース
- FirebasePushTransport: FCM (firebase_admin.messaging) 経由の本番実装
- LoggingPushTransport: ログ出力のみ行う開発用実装

トランスポート固有の例外は、ここで "unregistered" / "invalid-argument" のような
ハイフン区切りのエラー分類に正規化してから上位レイヤへ返す。
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import firebase_admin
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from .schemas import MulticastRequest, MulticastResponse, SendOutcome

logger = logging.getLogger(__name__)

# FCM の send_each_for_multicast が 1回で受け付けるトークン数の上限
FCM_MULTICAST_LIMIT = 500

# 全トークンがこの分類で失敗した場合は FCM 自体に到達できなかったものとみなす
UNREACHABLE_CODES = frozenset({"unavailable", "deadline-exceeded", "unknown"})


class PushTransportError(RuntimeError):
    """トランスポート自体に到達できない等、送信全体が失敗した場合の例外。"""


class PushTransport(Protocol):
    """
    プッシュ配信の最小インターフェース。

    実装例:
    - FirebasePushTransport: FCM 経由で送信
    - LoggingPushTransport: ログ出力のみ
    """

    def send_multicast(self, request: MulticastRequest) -> MulticastResponse:  # pragma: no cover - Protocol
        ...


def normalize_error_code(exc: BaseException) -> str:
    """
    firebase_admin の例外をエラー分類文字列に変換する。

    - UnregisteredError → "unregistered"
    - FirebaseError → code を小文字化し "_" を "-" に置換（INVALID_ARGUMENT → invalid-argument）
    - それ以外 → "unknown"
    """
    if isinstance(exc, messaging.UnregisteredError):
        return "unregistered"
    if isinstance(exc, firebase_exceptions.FirebaseError) and exc.code:
        return str(exc.code).lower().replace("_", "-")
    return "unknown"


class FirebasePushTransport:
    """
    FCM へのマルチキャスト送信を行うトランスポート。

    500件を超えるトークンは FCM の上限に合わせて分割して送り、
    結果はリクエストのトークン順に連結して 1回分のレスポンスとして返す。
    """

    def __init__(
        self,
        app: Optional[firebase_admin.App] = None,
        *,
        chunk_size: int = FCM_MULTICAST_LIMIT,
    ) -> None:
        self._app = app
        self._chunk_size = chunk_size

    def _build_message(self, request: MulticastRequest, tokens: List[str]) -> messaging.MulticastMessage:
        notification = None
        if request.title is not None or request.body is not None:
            notification = messaging.Notification(title=request.title, body=request.body)

        return messaging.MulticastMessage(
            tokens=tokens,
            notification=notification,
            data=dict(request.data) or None,
        )

    def send_multicast(self, request: MulticastRequest) -> MulticastResponse:
        outcomes: List[SendOutcome] = []

        for start in range(0, len(request.tokens), self._chunk_size):
            chunk = request.tokens[start : start + self._chunk_size]
            message = self._build_message(request, chunk)
            try:
                batch = messaging.send_each_for_multicast(
                    message,
                    dry_run=request.dry_run,
                    app=self._app,
                )
            except firebase_exceptions.FirebaseError as exc:
                raise PushTransportError(f"FCM multicast failed: {exc}") from exc

            for response in batch.responses:
                if response.success:
                    outcomes.append(SendOutcome(success=True, message_id=response.message_id))
                else:
                    exc = response.exception
                    outcomes.append(
                        SendOutcome(
                            success=False,
                            error_code=normalize_error_code(exc) if exc else "unknown",
                            error_message=str(exc) if exc else None,
                        )
                    )

        if outcomes and all(
            not o.success and o.error_code in UNREACHABLE_CODES for o in outcomes
        ):
            raise PushTransportError(
                f"FCM unreachable: all {len(outcomes)} sends failed ({outcomes[0].error_code})"
            )

        success_count = sum(1 for o in outcomes if o.success)
        return MulticastResponse(
            success_count=success_count,
            failure_count=len(outcomes) - success_count,
            responses=outcomes,
        )


class LoggingPushTransport:
    """
    MulticastRequest を logger に記録するだけのトランスポート。

    - 開発環境 (FAMILY_BACKEND=memory) のデフォルト
    - 全トークンを配信成功として扱う
    """

    def __init__(self, logger_: logging.Logger | None = None) -> None:
        self._logger = logger_ or logger

    def send_multicast(self, request: MulticastRequest) -> MulticastResponse:
        mode = "dry-run" if request.dry_run else "send"
        self._logger.info(
            "[push][%s] %s tokens: %s %s",
            mode,
            len(request.tokens),
            request.title or "",
            request.body or "",
        )
        return MulticastResponse(
            success_count=len(request.tokens),
            failure_count=0,
            responses=[
                SendOutcome(success=True, message_id=f"logged-{i}")
                for i in range(len(request.tokens))
            ],
        )
