# backend/app/notifications/payloads.py

"""
通知イベントから NotificationPayload を組み立てるモジュール。

イベント種別ごとのタイトル / 本文テンプレートをここに集約し、
送信処理（dispatcher）はどの種別でも同じ経路を通るようにする。
アプリが pt-BR 向けのため、文言と日付表記もそれに合わせている。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional

from .schemas import NotificationEvent, NotificationEventKind, NotificationPayload

DEFAULT_APP_NAME = "PetKeeper Lite"

# pet_id を参照するイベント種別（ペット名の解決が必要）
PET_SCOPED_KINDS = frozenset(
    {
        NotificationEventKind.NEW_TASK,
        NotificationEventKind.OVERDUE_TASK,
        NotificationEventKind.NEW_VACCINE,
        NotificationEventKind.TASK_COMPLETED,
    }
)

# 種別ごとの必須フィールド
REQUIRED_FIELDS: Dict[NotificationEventKind, tuple] = {
    NotificationEventKind.NEW_TASK: ("pet_id", "task_title"),
    NotificationEventKind.OVERDUE_TASK: ("pet_id", "task_title", "due_date"),
    NotificationEventKind.NEW_VACCINE: ("pet_id", "vaccine_name", "due_date"),
    NotificationEventKind.NEW_PET: ("pet_name", "pet_species"),
    NotificationEventKind.TASK_COMPLETED: ("pet_id", "task_title"),
    NotificationEventKind.CUSTOM_MESSAGE: ("message",),
}


def missing_fields(event: NotificationEvent) -> list:
    """
    event.kind に対して未設定（None / 空文字）の必須フィールド名を返す。
    """
    missing = []
    for name in REQUIRED_FIELDS[event.kind]:
        value = getattr(event, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_date_br(value: datetime) -> str:
    """日付を UTC に揃えて dd/mm/yyyy 形式で返す。"""
    return _as_utc(value).strftime("%d/%m/%Y")


def format_iso(value: datetime) -> str:
    """data ブロック用の ISO-8601（UTC, ミリ秒, 末尾 Z）表記。"""
    utc = _as_utc(value)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def compose_payload(
    event: NotificationEvent,
    *,
    display_name: str,
    pet_name: Optional[str] = None,
    app_name: str = DEFAULT_APP_NAME,
) -> NotificationPayload:
    """
    イベントと送信者名から通知ペイロードを作る。

    :param event: 通知イベント（必須フィールドは事前に検証済みである前提）
    :param display_name: 送信者の表示名
    :param pet_name: pet_id から解決したペット名（ペット関連イベントのみ）
    :param app_name: タイトルの接頭辞
    """
    kind = event.kind

    if kind is NotificationEventKind.NEW_TASK:
        return NotificationPayload(
            title=f"{app_name}: {pet_name}",
            body=f"{event.task_title} - {display_name}",
            data={
                "type": kind.value,
                "petId": event.pet_id,
                "taskTitle": event.task_title,
                "createdByDisplayName": display_name,
                "message": event.message
                or f"Uma nova tarefa foi adicionada para {pet_name}.",
            },
        )

    if kind is NotificationEventKind.OVERDUE_TASK:
        return NotificationPayload(
            title=f"{app_name}: {pet_name}",
            body=(
                f"Tarefa vencida: {event.task_title} estava prevista para "
                f"{format_date_br(event.due_date)}"
            ),
            data={
                "type": kind.value,
                "petId": event.pet_id,
                "taskTitle": event.task_title,
                "dueDate": format_iso(event.due_date),
                "createdByDisplayName": display_name,
            },
        )

    if kind is NotificationEventKind.NEW_VACCINE:
        return NotificationPayload(
            title=f"{app_name}: {pet_name}",
            body=(
                f"Nova vacina: {event.vaccine_name} agendada para "
                f"{format_date_br(event.due_date)}"
            ),
            data={
                "type": kind.value,
                "petId": event.pet_id,
                "vaccineName": event.vaccine_name,
                "dueDate": format_iso(event.due_date),
                "createdByDisplayName": display_name,
            },
        )

    if kind is NotificationEventKind.NEW_PET:
        return NotificationPayload(
            title=f"{app_name}: {event.pet_name}",
            body=f"{event.pet_name} ({event.pet_species}) foi adicionado por {display_name}!",
            data={
                "type": kind.value,
                "petName": event.pet_name,
                "petSpecies": event.pet_species,
                "createdByDisplayName": display_name,
            },
        )

    if kind is NotificationEventKind.TASK_COMPLETED:
        return NotificationPayload(
            title=f"{app_name}: {pet_name}",
            body=f"Tarefa concluída: {event.task_title} por {display_name}",
            data={
                "type": kind.value,
                "petId": event.pet_id,
                "taskTitle": event.task_title,
                "completedByDisplayName": display_name,
            },
        )

    if kind is NotificationEventKind.CUSTOM_MESSAGE:
        return NotificationPayload(
            title=event.title or f"{app_name}: Mensagem de {display_name}",
            body=event.message,
            data={
                "type": kind.value,
                "message": event.message,
                "sentByDisplayName": display_name,
            },
        )

    raise ValueError(f"Unsupported notification event kind: {kind!r}")
