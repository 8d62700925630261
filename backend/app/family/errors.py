# backend/app/family/errors.py

"""
family 系操作のエラー分類。

code は呼び出し元（アプリ）にそのまま返る機械可読な種別。
internal 以外は呼び出し側で修正可能な決定的エラーなので、メッセージもそのまま返す。
"""


class FamilyServiceError(Exception):
    """family 系操作の基底例外。"""

    code = "internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthenticatedError(FamilyServiceError):
    """検証済みの呼び出し元 ID が無い。"""

    code = "unauthenticated"


class InvalidArgumentError(FamilyServiceError):
    """必須入力が不足している。"""

    code = "invalid-argument"


class NotFoundError(FamilyServiceError):
    """参照したユーザーまたはペットが存在しない。"""

    code = "not-found"


class FailedPreconditionError(FamilyServiceError):
    """呼び出し元がどの家族にも属していない。"""

    code = "failed-precondition"


class InternalError(FamilyServiceError):
    """ストア / トランスポートの想定外エラー。詳細はサーバーログのみに残す。"""

    code = "internal"
