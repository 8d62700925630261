# backend/app/family/__init__.py

"""
家族共有通知バックエンドのモジュール群。

- identity: 呼び出し元の家族解決とメンバー収集
- tokens: トークン収集と dry-run による無効トークン掃除
- stats: 家族単位のペット / タスク集計
- service: 各エントリーポイントをまとめるサービス層
- store / firestore_store: ドキュメントストア（インメモリ / Firestore）
- auth / router / state: HTTP 入口と共有インスタンス管理
"""

from .errors import (  # noqa: F401
    FailedPreconditionError,
    FamilyServiceError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    UnauthenticatedError,
)
from .service import FamilyService  # noqa: F401
