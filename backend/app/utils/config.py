# backend/app/utils/config.py

"""
環境変数読み取り用のユーティリティ。
family / notifications / Firebase 初期化で共通利用する。
"""

import os
from typing import Optional


class EnvVarMissingError(RuntimeError):
    """必須環境変数が設定されていない場合に投げる例外。"""

    def __init__(self, name: str) -> None:
        super().__init__(f"Required environment variable '{name}' is not set.")
        self.name = name


def get_env(
    name: str,
    default: Optional[str] = None,
    *,
    required: bool = True,
) -> str:
    """
    環境変数を取得するヘルパー。

    :param name: 環境変数名
    :param default: デフォルト値（required=False の場合のみ使用）
    :param required: True の場合、未設定なら例外を投げる
    :return: 文字列値
    """
    value = os.getenv(name)

    if value is None or value.strip() == "":
        if required:
            raise EnvVarMissingError(name)
        return default

    return value.strip()


def get_env_choice(name: str, choices: tuple, default: str) -> str:
    """
    選択肢が決まっている環境変数を取得する。

    未設定なら default、候補外の値なら RuntimeError。
    """
    raw = get_env(name, default=default, required=False)
    value = raw.lower()
    if value not in choices:
        raise RuntimeError(
            f"Invalid value for env var {name}: {raw!r} (expected one of {', '.join(choices)})"
        )
    return value
