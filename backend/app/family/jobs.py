# backend/app/family/jobs.py
from __future__ import annotations

import logging
import sys
from typing import Iterable, List, Optional

from .errors import FamilyServiceError
from .service import FamilyService
from .state import get_family_service

logger = logging.getLogger(__name__)


def run_token_cleanup(
    user_ids: Iterable[str],
    *,
    service: Optional[FamilyService] = None,
) -> List[str]:
    """
    指定ユーザーごとにトークン掃除を実行する。

    1ユーザーの失敗で残りを止めないよう、ユーザー単位でエラーを受け止める。
    :return: 失敗したユーザー ID のリスト
    """
    service = service or get_family_service()
    failed: List[str] = []

    for user_id in user_ids:
        try:
            result = service.cleanup_tokens(user_id)
        except FamilyServiceError as exc:
            logger.error("Token cleanup failed for %s: %s (%s)", user_id, exc.code, exc.message)
            print(f"{user_id}: error {exc.code}")
            failed.append(user_id)
            continue

        print(f"{user_id}: removed={result.removed_tokens} valid={result.valid_tokens}")

    return failed


def main(argv: Optional[List[str]] = None) -> int:
    """
    簡易 CLI エントリーポイント。

    例:
        python -m app.family.jobs cleanup-tokens uid-1 uid-2
    """
    import argparse

    parser = argparse.ArgumentParser(description="Family backend jobs runner")
    parser.add_argument(
        "job",
        choices=["cleanup-tokens"],
        help="実行するジョブ種別",
    )
    parser.add_argument("user_ids", nargs="+", help="対象ユーザー ID")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    failed: List[str] = []
    if args.job == "cleanup-tokens":
        failed = run_token_cleanup(args.user_ids)

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
