# backend/app/notifications/dispatcher.py

"""
通知ペイロードを家族の端末トークンへまとめて送るディスパッチャ。

責務:
- トークン一覧＋ペイロードを 1回のマルチキャスト送信要求にまとめる（トークンごとの送信はしない）
- トランスポートのレスポンスをトークン順に解釈し、トークン単位の結果を返す
- 部分失敗は例外にせず、結果とログで報告する
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from .schemas import DeliveryOutcome, DispatchResult, MulticastRequest, NotificationPayload
from .transport import PushTransport

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    PushTransport を使ってマルチキャスト配信を行うサービス。

    トランスポート自体の例外（到達不能など）はそのまま送出し、
    上位のサービス層で internal エラーとして扱う。
    """

    def __init__(self, transport: PushTransport) -> None:
        self._transport = transport

    def dispatch(self, tokens: Sequence[str], payload: NotificationPayload) -> DispatchResult:
        """
        tokens 全件に payload を 1回のマルチキャストで送信する。

        tokens が空の場合はトランスポートを呼ばずに 0件送信として返す
        （空のマルチキャストは不正なリクエストになるため）。
        """
        token_list: List[str] = list(tokens)
        if not token_list:
            logger.info("No registration tokens to notify; skipping multicast.")
            return DispatchResult(sent_count=0, failure_count=0, outcomes=[])

        request = MulticastRequest(
            tokens=token_list,
            title=payload.title,
            body=payload.body,
            data=payload.data,
        )
        response = self._transport.send_multicast(request)

        outcomes: List[DeliveryOutcome] = []
        for idx, token in enumerate(token_list):
            if idx >= len(response.responses):
                # レスポンスが足りない場合は結果不明として失敗扱い
                outcomes.append(DeliveryOutcome(token=token, success=False, error_code="unknown"))
                logger.error("No delivery result returned for token %s.", token)
                continue

            res = response.responses[idx]
            if res.success:
                outcomes.append(DeliveryOutcome(token=token, success=True))
            else:
                outcomes.append(
                    DeliveryOutcome(token=token, success=False, error_code=res.error_code)
                )
                logger.error(
                    "Failed to send notification to token %s: %s (%s)",
                    token,
                    res.error_code,
                    res.error_message or "",
                )

        sent = sum(1 for o in outcomes if o.success)
        logger.info("Notifications sent to %s of %s tokens.", sent, len(token_list))

        return DispatchResult(
            sent_count=sent,
            failure_count=len(outcomes) - sent,
            outcomes=outcomes,
        )
