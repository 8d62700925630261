# backend/app/family/schemas.py

"""
family 通知バックエンドで扱うスキーマ定義。

- ストアのドキュメントを内部で扱うためのレコード（UserProfile / PetRecord / TaskRecord）
- 各エンドポイントのリクエスト / レスポンス

ストア上のフィールド名（familyCode, fcmTokens など）は from_document() で吸収し、
サービス層には snake_case のモデルだけを渡す。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.notifications.schemas import NotificationEvent, NotificationEventKind

# Firestore 上のフィールド名
FIELD_FAMILY_CODE = "familyCode"
FIELD_DISPLAY_NAME = "displayName"
FIELD_FCM_TOKENS = "fcmTokens"
FIELD_UPDATED_AT = "updatedAt"


def _extract_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _extract_tokens(data: Dict[str, Any]) -> List[str]:
    """
    fcmTokens を文字列リストとして取り出す。

    配列でない / 要素が文字列でない場合は、その分を無視する。
    """
    raw = data.get(FIELD_FCM_TOKENS)
    if not isinstance(raw, (list, tuple)):
        return []
    return [t for t in raw if isinstance(t, str) and t]


def _extract_stored_tokens(data: Dict[str, Any]) -> List[Any]:
    """fcmTokens を保存されたままの要素で取り出す（配列でなければ空）。"""
    raw = data.get(FIELD_FCM_TOKENS)
    if not isinstance(raw, (list, tuple)):
        return []
    return list(raw)


def _extract_datetime(value: Any) -> Optional[datetime]:
    """
    dueDate のような日時フィールドを datetime に変換する。

    - datetime（Firestore の Timestamp を含む）はそのまま
    - ISO8601 文字列は fromisoformat で変換
    - 数値はエポックミリ秒として扱う
    - それ以外・変換失敗は None
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class UserProfile(BaseModel):
    """users コレクションの 1 ドキュメント。"""

    id: str = Field(..., description="ユーザー ID（Firebase Auth の uid）")
    family_code: Optional[str] = Field(None, description="所属家族の共有コード")
    display_name: Optional[str] = Field(None, description="表示名")
    fcm_tokens: List[str] = Field(default_factory=list, description="端末の登録トークン")
    stored_tokens: List[Any] = Field(
        default_factory=list,
        description="保存されている fcmTokens の要素そのまま（文字列以外も含む）",
    )
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> "UserProfile":
        data = data or {}
        return cls(
            id=doc_id,
            family_code=_extract_str(data, FIELD_FAMILY_CODE),
            display_name=_extract_str(data, FIELD_DISPLAY_NAME),
            fcm_tokens=_extract_tokens(data),
            stored_tokens=_extract_stored_tokens(data),
            updated_at=_extract_datetime(data.get(FIELD_UPDATED_AT)),
        )


class PetRecord(BaseModel):
    """pets コレクションの 1 ドキュメント（読み取り専用）。"""

    id: str
    family_code: Optional[str] = None
    name: Optional[str] = None
    species: Optional[str] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> "PetRecord":
        data = data or {}
        return cls(
            id=doc_id,
            family_code=_extract_str(data, FIELD_FAMILY_CODE),
            name=_extract_str(data, "name"),
            species=_extract_str(data, "species"),
        )


class TaskRecord(BaseModel):
    """pet_tasks コレクションの 1 ドキュメント（読み取り専用）。"""

    id: str
    family_code: Optional[str] = None
    pet_id: Optional[str] = None
    title: Optional[str] = None
    done: bool = False
    due_date: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> "TaskRecord":
        data = data or {}
        return cls(
            id=doc_id,
            family_code=_extract_str(data, FIELD_FAMILY_CODE),
            pet_id=_extract_str(data, "petId"),
            title=_extract_str(data, "title"),
            done=bool(data.get("done", False)),
            due_date=_extract_datetime(data.get("dueDate")),
        )


class FamilyIdentity(BaseModel):
    """呼び出し元の家族コード・表示名・自分の端末トークン。"""

    family_code: str
    display_name: str
    fcm_tokens: List[str] = Field(default_factory=list)


class FamilyStats(BaseModel):
    """家族単位の集計値。"""

    total_pets: int = Field(..., ge=0)
    total_tasks: int = Field(..., ge=0)
    completed_tasks: int = Field(..., ge=0)
    pending_tasks: int = Field(..., ge=0)
    overdue_tasks: int = Field(..., ge=0)


class TokenCleanupResult(BaseModel):
    """トークン掃除の結果件数。"""

    removed_tokens: int = Field(..., ge=0)
    valid_tokens: int = Field(..., ge=0)


# ---- リクエスト -----------------------------------------------------------


class NewTaskRequest(BaseModel):
    pet_id: str = Field(..., min_length=1, description="対象ペットの ID")
    task_title: str = Field(..., min_length=1, description="タスク名")
    message: Optional[str] = Field(None, description="アプリに表示する任意メッセージ")

    def to_event(self) -> NotificationEvent:
        return NotificationEvent(
            kind=NotificationEventKind.NEW_TASK,
            pet_id=self.pet_id,
            task_title=self.task_title,
            message=self.message,
        )


class OverdueTaskRequest(BaseModel):
    pet_id: str = Field(..., min_length=1)
    task_title: str = Field(..., min_length=1)
    due_date: datetime = Field(..., description="本来の期限日時")

    def to_event(self) -> NotificationEvent:
        return NotificationEvent(
            kind=NotificationEventKind.OVERDUE_TASK,
            pet_id=self.pet_id,
            task_title=self.task_title,
            due_date=self.due_date,
        )


class NewVaccineRequest(BaseModel):
    pet_id: str = Field(..., min_length=1)
    vaccine_name: str = Field(..., min_length=1)
    due_date: datetime = Field(..., description="接種予定日時")

    def to_event(self) -> NotificationEvent:
        return NotificationEvent(
            kind=NotificationEventKind.NEW_VACCINE,
            pet_id=self.pet_id,
            vaccine_name=self.vaccine_name,
            due_date=self.due_date,
        )


class NewPetRequest(BaseModel):
    pet_name: str = Field(..., min_length=1)
    pet_species: str = Field(..., min_length=1)

    def to_event(self) -> NotificationEvent:
        return NotificationEvent(
            kind=NotificationEventKind.NEW_PET,
            pet_name=self.pet_name,
            pet_species=self.pet_species,
        )


class TaskCompletedRequest(BaseModel):
    pet_id: str = Field(..., min_length=1)
    task_title: str = Field(..., min_length=1)

    def to_event(self) -> NotificationEvent:
        return NotificationEvent(
            kind=NotificationEventKind.TASK_COMPLETED,
            pet_id=self.pet_id,
            task_title=self.task_title,
        )


class CustomMessageRequest(BaseModel):
    message: str = Field(..., min_length=1)
    title: Optional[str] = Field(None, description="未指定ならアプリ名＋送信者名")

    def to_event(self) -> NotificationEvent:
        return NotificationEvent(
            kind=NotificationEventKind.CUSTOM_MESSAGE,
            message=self.message,
            title=self.title,
        )


# ---- レスポンス -----------------------------------------------------------


class NotifyResponse(BaseModel):
    success: bool = True
    notifications_sent: int = Field(..., ge=0)
    message: Optional[str] = None


class FamilyStatsResponse(BaseModel):
    success: bool = True
    stats: FamilyStats


class TokenCleanupResponse(BaseModel):
    success: bool = True
    removed_tokens: int = Field(..., ge=0)
    valid_tokens: int = Field(..., ge=0)


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail
