# backend/app/family/config.py

"""
family 通知バックエンドの設定値をまとめるモジュール。
"""

from dataclasses import dataclass
from functools import lru_cache

from app.utils.config import get_env, get_env_choice

BACKEND_CHOICES = ("firebase", "memory")


@dataclass(frozen=True)
class FamilySettings:
    """family 通知バックエンド用の設定値コンテナ。"""

    backend: str
    app_name: str
    default_display_name: str
    default_pet_name: str


@lru_cache()
def get_family_settings() -> FamilySettings:
    """
    環境変数から FamilySettings を読み込む。

    任意:
      - FAMILY_BACKEND              (firebase / memory, デフォルト: firebase)
      - FAMILY_APP_NAME             (デフォルト: PetKeeper Lite)
      - FAMILY_DEFAULT_DISPLAY_NAME (デフォルト: Alguém da família)
      - FAMILY_DEFAULT_PET_NAME     (デフォルト: Um pet)

    Firebase の認証情報は app.utils.firebase 側で読む。
    """
    backend = get_env_choice("FAMILY_BACKEND", BACKEND_CHOICES, default="firebase")

    return FamilySettings(
        backend=backend,
        app_name=get_env("FAMILY_APP_NAME", default="PetKeeper Lite", required=False),
        default_display_name=get_env(
            "FAMILY_DEFAULT_DISPLAY_NAME",
            default="Alguém da família",
            required=False,
        ),
        default_pet_name=get_env("FAMILY_DEFAULT_PET_NAME", default="Um pet", required=False),
    )
