# backend/app/utils/firebase.py

"""
firebase_admin.App のプロセス共有ハンドル。

- 初回呼び出し時にのみ初期化し、以降は同じ App を使い回す
- 呼び出しごとに initialize_app し直すことはしない
- テスト時は reset_firebase_app() で状態を捨てられる
"""

from __future__ import annotations

import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials

from app.utils.config import get_env

logger = logging.getLogger(__name__)

_firebase_app: Optional[firebase_admin.App] = None


def _build_credentials() -> credentials.Base:
    """
    FIREBASE_CREDENTIALS_PATH があればサービスアカウント JSON を、
    無ければ Application Default Credentials を使う。
    """
    path = get_env("FIREBASE_CREDENTIALS_PATH", required=False)
    if path:
        return credentials.Certificate(path)
    return credentials.ApplicationDefault()


def get_firebase_app() -> firebase_admin.App:
    """
    共有の firebase_admin.App を返す。

    初回呼び出し時にのみ生成し、それ以降は同じインスタンスを返す。
    """
    global _firebase_app
    if _firebase_app is None:
        options = {}
        project_id = get_env("FIREBASE_PROJECT_ID", required=False)
        if project_id:
            options["projectId"] = project_id

        _firebase_app = firebase_admin.initialize_app(
            _build_credentials(),
            options=options or None,
        )
        logger.info("Firebase app initialized (project=%s).", project_id or "default")
    return _firebase_app


def reset_firebase_app() -> None:
    """
    テスト用に共有 App を破棄する。
    """
    global _firebase_app
    if _firebase_app is not None:
        firebase_admin.delete_app(_firebase_app)
    _firebase_app = None
