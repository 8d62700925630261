# backend/app/notifications/schemas.py

"""
プッシュ通知の共通スキーマ定義。

- 通知イベント種別（どの出来事を知らせるか）
- 通知ペイロード（タイトル＋本文＋data ブロック）
- マルチキャスト送信のリクエスト / レスポンス
- トークン単位の配信結果

※ いずれも送信ごとに組み立てる一時的なデータで、永続化はしない。
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class NotificationEventKind(str, Enum):
    """
    家族に通知するイベントの種類。

    data ブロックの "type" としてそのままアプリ側に渡る。
    """

    NEW_TASK = "new_task"
    OVERDUE_TASK = "overdue_task"
    NEW_VACCINE = "new_vaccine"
    NEW_PET = "new_pet"
    TASK_COMPLETED = "task_completed"
    CUSTOM_MESSAGE = "custom_message"


class NotificationEvent(BaseModel):
    """
    通知イベント 1件分の入力。

    kind ごとに使うフィールドが異なる（payloads.compose_payload を参照）。
    """

    kind: NotificationEventKind = Field(..., description="イベント種別。")
    pet_id: Optional[str] = Field(None, description="対象ペットの ID。")
    task_title: Optional[str] = Field(None, description="タスク名。")
    vaccine_name: Optional[str] = Field(None, description="ワクチン名。")
    due_date: Optional[datetime] = Field(None, description="期限日時。")
    pet_name: Optional[str] = Field(None, description="新規ペット名（new_pet のみ）。")
    pet_species: Optional[str] = Field(None, description="新規ペットの種類（new_pet のみ）。")
    message: Optional[str] = Field(None, description="任意メッセージ。")
    title: Optional[str] = Field(None, description="任意タイトル（custom_message のみ）。")


class NotificationPayload(BaseModel):
    """
    プッシュ通知の中身。

    data の値はすべて文字列（FCM の data ブロックの制約）。
    """

    title: str = Field(..., description="通知タイトル。")
    body: str = Field(..., description="通知本文。")
    data: Dict[str, str] = Field(
        default_factory=dict,
        description="アプリ側で解釈する構造化データ。",
    )


class MulticastRequest(BaseModel):
    """
    1回のマルチキャスト送信要求。

    dry_run=True の場合は実配信せず、トークンの有効性だけを検証する。
    """

    tokens: List[str] = Field(..., min_length=1, description="送信先トークン。")
    title: Optional[str] = Field(None, description="notification ブロックのタイトル。")
    body: Optional[str] = Field(None, description="notification ブロックの本文。")
    data: Dict[str, str] = Field(default_factory=dict, description="data ブロック。")
    dry_run: bool = Field(False, description="検証のみ行う場合 True。")


class SendOutcome(BaseModel):
    """トランスポートが返すトークン 1件分の結果。"""

    success: bool
    message_id: Optional[str] = None
    error_code: Optional[str] = Field(
        None,
        description="失敗時のエラー分類（例: unregistered, invalid-argument）。",
    )
    error_message: Optional[str] = None


class MulticastResponse(BaseModel):
    """
    マルチキャスト送信の結果。

    responses[i] はリクエストの tokens[i] に対応する。
    """

    success_count: int = Field(..., ge=0)
    failure_count: int = Field(..., ge=0)
    responses: List[SendOutcome] = Field(default_factory=list)


class DeliveryOutcome(BaseModel):
    """ディスパッチ結果のうち、トークン 1件分。"""

    token: str
    success: bool
    error_code: Optional[str] = None


class DispatchResult(BaseModel):
    """
    NotificationDispatcher.dispatch() の戻り値。

    部分失敗はエラーではなく、outcomes に記録される。
    """

    sent_count: int = Field(..., ge=0, description="配信に成功したトークン数。")
    failure_count: int = Field(0, ge=0, description="配信に失敗したトークン数。")
    outcomes: List[DeliveryOutcome] = Field(default_factory=list)

    @property
    def failed_tokens(self) -> List[str]:
        return [o.token for o in self.outcomes if not o.success]
