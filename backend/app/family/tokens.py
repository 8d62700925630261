# backend/app/family/tokens.py

"""
端末登録トークンの収集と掃除。

- collect_tokens: 家族メンバーのトークンを平坦化・重複排除する
- TokenHygieneEngine: dry-run 送信でトークンの有効性を確かめ、
  無効と確定したものだけをユーザードキュメントから取り除く
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional, Set

from app.notifications.schemas import MulticastRequest
from app.notifications.transport import PushTransport

from .errors import NotFoundError
from .schemas import FIELD_FCM_TOKENS, FIELD_UPDATED_AT, TokenCleanupResult, UserProfile
from .store import DocumentStore

logger = logging.getLogger(__name__)

# 無効と確定するエラー分類。これ以外のエラーは一時的なものとみなしてトークンを残す。
DEAD_TOKEN_CODES = frozenset(
    {
        "invalid-argument",
        "registration-token-not-registered",
        "unregistered",
    }
)

PROBE_DATA = {"test": "true"}


def collect_tokens(
    profiles: Iterable[UserProfile],
    *,
    exclude_id: Optional[str] = None,
    exclude_tokens: Iterable[str] = (),
) -> List[str]:
    """
    メンバー全員のトークンを 1つのリストにまとめる。

    - トークンが無い / 壊れているメンバーは 0件として扱う
    - 同じトークンは 1回だけ（ソート済みで返すので入力順に依存しない）
    - exclude_id のメンバーは常に除外する
    - exclude_tokens（呼び出し元の端末）は他メンバーに登録されていても除外する
    """
    tokens: Set[str] = set()
    for profile in profiles:
        if exclude_id is not None and profile.id == exclude_id:
            continue
        raw = getattr(profile, "fcm_tokens", None)
        if not isinstance(raw, (list, tuple)):
            continue
        tokens.update(t for t in raw if isinstance(t, str) and t)
    tokens.difference_update(exclude_tokens)
    return sorted(tokens)


def _is_probeable(entry: Any) -> bool:
    return isinstance(entry, str) and bool(entry)


def is_dead_token_code(code: Optional[str]) -> bool:
    """エラー分類が「トークン無効」を示すかどうか。"messaging/" 接頭辞は無視する。"""
    if not code:
        return False
    normalized = code.lower()
    if normalized.startswith("messaging/"):
        normalized = normalized[len("messaging/") :]
    return normalized in DEAD_TOKEN_CODES


class TokenHygieneEngine:
    """
    1ユーザー分のトークン掃除を行うサービス。

    - トークンを追加することはなく、無効と確定したものを取り除くだけ
    - 曖昧なエラーはトークンを残す（保守的な削除）
    - 件数に変化が無ければストアへの書き込みは行わない
    """

    def __init__(
        self,
        store: DocumentStore,
        transport: PushTransport,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._transport = transport
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def cleanup_tokens(self, user_id: str) -> TokenCleanupResult:
        """
        user_id のトークンを dry-run で検証し、無効なものを削除する。

        文字列でない / 空の要素は検証できないため、そのまま残す。
        valid_tokens は書き戻すリストの件数。

        :raises NotFoundError: ユーザードキュメントが存在しない
        """
        profile = self._store.get_user(user_id)
        if profile is None:
            raise NotFoundError("Usuário não encontrado.")

        stored = list(profile.stored_tokens or profile.fcm_tokens)
        probeable = [t for t in stored if _is_probeable(t)]
        if not probeable:
            return TokenCleanupResult(removed_tokens=0, valid_tokens=len(stored))

        response = self._transport.send_multicast(
            MulticastRequest(tokens=probeable, data=dict(PROBE_DATA), dry_run=True)
        )

        dead: Set[int] = set()
        for idx, token in enumerate(probeable):
            res = response.responses[idx] if idx < len(response.responses) else None
            if res is None or res.success:
                continue
            if is_dead_token_code(res.error_code):
                logger.info("Invalid/unregistered FCM token for %s: %s", user_id, token)
                dead.add(idx)
            else:
                logger.warning(
                    "Error while checking token %s for %s (kept): %s",
                    token,
                    user_id,
                    res.error_code,
                )

        # 検証した要素は probeable 上の位置で判定し、検証できない要素は残す
        valid: List[Any] = []
        probe_idx = 0
        for entry in stored:
            if _is_probeable(entry):
                if probe_idx not in dead:
                    valid.append(entry)
                probe_idx += 1
            else:
                valid.append(entry)

        if len(valid) != len(stored):
            self._store.update_user(
                user_id,
                {FIELD_FCM_TOKENS: valid, FIELD_UPDATED_AT: self._clock()},
            )
            logger.info(
                "FCM tokens cleaned for %s. Removed: %s, Valid: %s",
                user_id,
                len(dead),
                len(valid),
            )
        else:
            logger.info("No invalid FCM tokens found for %s.", user_id)

        return TokenCleanupResult(removed_tokens=len(dead), valid_tokens=len(valid))
