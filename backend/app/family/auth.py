# backend/app/family/auth.py

"""
呼び出し元 ID の解決。

Authorization: Bearer <Firebase ID トークン> を検証して uid を取り出す。
サービス層には検証済みの uid だけを渡す。
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import firebase_admin
from firebase_admin import auth

from .errors import InternalError, UnauthenticatedError

logger = logging.getLogger(__name__)


class IdTokenVerifier(Protocol):
    """ID トークンを検証して uid を返すインターフェース。"""

    def verify(self, id_token: str) -> str:  # pragma: no cover - Protocol
        ...


class FirebaseIdTokenVerifier:
    """firebase_admin.auth.verify_id_token による検証。"""

    def __init__(self, app: Optional[firebase_admin.App] = None) -> None:
        self._app = app

    def verify(self, id_token: str) -> str:
        try:
            decoded = auth.verify_id_token(id_token, app=self._app)
        except (ValueError, auth.InvalidIdTokenError, auth.UserDisabledError) as exc:
            logger.info("Rejected ID token: %s", exc)
            raise UnauthenticatedError("Usuário não autenticado.") from exc
        except auth.CertificateFetchError as exc:
            logger.exception("Failed to fetch ID token certificates.")
            raise InternalError("Erro interno do servidor.") from exc

        uid = decoded.get("uid")
        if not uid:
            raise UnauthenticatedError("Usuário não autenticado.")
        return uid


class StaticIdTokenVerifier:
    """
    開発用の検証器。Bearer の値をそのまま uid とみなす。

    FAMILY_BACKEND=memory のときだけ使う。
    """

    def verify(self, id_token: str) -> str:
        if not id_token:
            raise UnauthenticatedError("Usuário não autenticado.")
        return id_token


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Authorization ヘッダから Bearer トークンを取り出す。

    :raises UnauthenticatedError: ヘッダが無い / 形式が不正
    """
    if not authorization:
        raise UnauthenticatedError("Usuário não autenticado.")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError("Usuário não autenticado.")
    return token.strip()
