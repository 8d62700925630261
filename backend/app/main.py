# backend/app/main.py

"""
バックエンドアプリケーションのエントリーポイント。

主な責務:
- /family/notify/* : 家族メンバーへのプッシュ通知
- /family/stats : 家族のペット / タスク統計
- /family/tokens/cleanup : 無効な FCM トークンの掃除
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from app.family.errors import FamilyServiceError
from app.family.router import family_error_handler, validation_error_handler
from app.family.router import router as family_router


def create_app() -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    - family 通知エンドポイント (/family/...)
    - ヘルスチェックエンドポイント (/health)
    """
    app = FastAPI(title="PetKeeper Family Backend")

    # ルーター登録
    app.include_router(family_router)

    app.add_exception_handler(FamilyServiceError, family_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        モニタリングや動作確認用。
        """
        return {"status": "ok"}

    return app


# uvicorn 実行時のエントリーポイント
app = create_app()
