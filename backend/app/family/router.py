# backend/app/family/router.py

"""
family 通知バックエンドの FastAPI ルーター定義。

- POST /family/notify/{new-task,overdue-task,new-vaccine,new-pet,task-completed,custom-message}
- GET  /family/stats
- POST /family/tokens/cleanup

どのエンドポイントも認証済みの呼び出し元 uid を get_caller_id で受け取る。
エラーは {"success": false, "error": {"code", "message"}} 形式で返す。
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .auth import IdTokenVerifier, extract_bearer_token
from .errors import FamilyServiceError
from .schemas import (
    CustomMessageRequest,
    ErrorDetail,
    ErrorResponse,
    FamilyStatsResponse,
    NewPetRequest,
    NewTaskRequest,
    NewVaccineRequest,
    NotifyResponse,
    OverdueTaskRequest,
    TaskCompletedRequest,
    TokenCleanupResponse,
)
from .service import FamilyService
from .state import get_family_service, get_id_token_verifier


router = APIRouter(prefix="/family", tags=["family"])

# Firebase callable functions と同じ対応付け
ERROR_STATUS = {
    "unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "invalid-argument": status.HTTP_400_BAD_REQUEST,
    "not-found": status.HTTP_404_NOT_FOUND,
    "failed-precondition": status.HTTP_400_BAD_REQUEST,
    "internal": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_caller_id(
    authorization: Optional[str] = Header(None),
    verifier: IdTokenVerifier = Depends(get_id_token_verifier),
) -> str:
    """
    Authorization ヘッダの ID トークンを検証し、呼び出し元 uid を返す。
    """
    return verifier.verify(extract_bearer_token(authorization))


def _error_response(code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(
        status_code=ERROR_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        content=body.model_dump(),
    )


async def family_error_handler(request: Request, exc: FamilyServiceError) -> JSONResponse:
    return _error_response(exc.code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """リクエストの検証エラーは invalid-argument として返す。"""
    fields = sorted(
        {str(err["loc"][-1]) for err in exc.errors() if err.get("loc")}
    )
    message = "Dados obrigatórios não fornecidos"
    if fields:
        message += f": {', '.join(fields)}"
    return _error_response("invalid-argument", message + ".")


@router.post("/notify/new-task", response_model=NotifyResponse, summary="新しいタスクを家族に通知")
def notify_new_task(
    body: NewTaskRequest,
    caller_id: str = Depends(get_caller_id),
    service: FamilyService = Depends(get_family_service),
) -> NotifyResponse:
    return service.notify_family(caller_id, body.to_event())


@router.post("/notify/overdue-task", response_model=NotifyResponse, summary="期限切れタスクを家族に通知")
def notify_overdue_task(
    body: OverdueTaskRequest,
    caller_id: str = Depends(get_caller_id),
    service: FamilyService = Depends(get_family_service),
) -> NotifyResponse:
    return service.notify_family(caller_id, body.to_event())


@router.post("/notify/new-vaccine", response_model=NotifyResponse, summary="新しいワクチン予定を家族に通知")
def notify_new_vaccine(
    body: NewVaccineRequest,
    caller_id: str = Depends(get_caller_id),
    service: FamilyService = Depends(get_family_service),
) -> NotifyResponse:
    return service.notify_family(caller_id, body.to_event())


@router.post("/notify/new-pet", response_model=NotifyResponse, summary="新しいペットを家族に通知")
def notify_new_pet(
    body: NewPetRequest,
    caller_id: str = Depends(get_caller_id),
    service: FamilyService = Depends(get_family_service),
) -> NotifyResponse:
    return service.notify_family(caller_id, body.to_event())


@router.post("/notify/task-completed", response_model=NotifyResponse, summary="タスク完了を家族に通知")
def notify_task_completed(
    body: TaskCompletedRequest,
    caller_id: str = Depends(get_caller_id),
    service: FamilyService = Depends(get_family_service),
) -> NotifyResponse:
    return service.notify_family(caller_id, body.to_event())


@router.post("/notify/custom-message", response_model=NotifyResponse, summary="任意メッセージを家族に送信")
def send_custom_message(
    body: CustomMessageRequest,
    caller_id: str = Depends(get_caller_id),
    service: FamilyService = Depends(get_family_service),
) -> NotifyResponse:
    return service.notify_family(caller_id, body.to_event())


@router.get("/stats", response_model=FamilyStatsResponse, summary="家族のペット / タスク統計")
def get_family_stats(
    caller_id: str = Depends(get_caller_id),
    service: FamilyService = Depends(get_family_service),
) -> FamilyStatsResponse:
    return service.family_stats(caller_id)


@router.post(
    "/tokens/cleanup",
    response_model=TokenCleanupResponse,
    summary="呼び出し元の無効な FCM トークンを削除",
)
def cleanup_tokens(
    caller_id: str = Depends(get_caller_id),
    service: FamilyService = Depends(get_family_service),
) -> TokenCleanupResponse:
    return service.cleanup_tokens(caller_id)
