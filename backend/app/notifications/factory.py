# backend/app/notifications/factory.py

"""
プッシュ配信トランスポートの簡易ファクトリ。

- "firebase": 共有 firebase_admin.App を使う FirebasePushTransport
- "memory": ログ出力のみの LoggingPushTransport
"""

from __future__ import annotations

from .transport import FirebasePushTransport, LoggingPushTransport, PushTransport


def build_push_transport(backend: str) -> PushTransport:
    """
    バックエンド種別に応じた PushTransport を生成する。
    """
    if backend == "firebase":
        from app.utils.firebase import get_firebase_app

        return FirebasePushTransport(get_firebase_app())
    if backend == "memory":
        return LoggingPushTransport()
    raise ValueError(f"Unknown push backend: {backend!r}")


__all__ = [
    "FirebasePushTransport",
    "LoggingPushTransport",
    "PushTransport",
    "build_push_transport",
]
