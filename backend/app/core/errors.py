"""
共通エラーハンドリング（APIで返すエラー形式の統一）

【初心者向け】
- フロントエンドが { "error": "...", "details": ... } でエラーを受け取れるよう、
  共通形式で例外を投げる
- raise_invalid_input 等のヘルパーで、コードごとのHTTPステータスを自動設定
- app_error_handler を main.py で登録すると AppError がJSONレスポンスになる
"""
from typing import Any, Literal, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

# エラーコード一覧（型安全のため Literal で定義）
ErrorCode = Literal[
    "INVALID_INPUT",
    "NOT_FOUND",
    "RATE_LIMITED",
    "INTERNAL_ERROR",
]

# エラーコードとHTTPステータスのマッピング
ERROR_STATUS_MAP: dict[ErrorCode, int] = {
    "INVALID_INPUT": status.HTTP_400_BAD_REQUEST,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "RATE_LIMITED": status.HTTP_429_TOO_MANY_REQUESTS,
    "INTERNAL_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AppError(Exception):
    """アプリケーション共通エラー

    フロントエンドで期待される形式: { "error": "...", "details": ... }
    details は指定された場合のみ含める
    """

    def __init__(self, code: ErrorCode, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details
        self.status_code = ERROR_STATUS_MAP[code]

    def to_content(self) -> dict[str, Any]:
        """レスポンスボディを組み立てる"""
        content: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            content["details"] = self.details
        return content


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """AppErrorをJSONレスポンスに変換する（main.pyで登録）"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    パスやクエリの型エラー（例: /api/media/abc）も { "error": ..., "details": ... } で返す

    FastAPI標準の 422 { "detail": ... } の代わりに INVALID_INPUT（400）にする
    """
    error = AppError("INVALID_INPUT", "Invalid request parameters", jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_content())


def raise_invalid_input(message: str) -> None:
    """INVALID_INPUTエラーを発生させる"""
    raise AppError("INVALID_INPUT", message)


def raise_not_found(message: str) -> None:
    """NOT_FOUNDエラーを発生させる

    HTTP 404と { "error": "..." } を返す
    """
    raise AppError("NOT_FOUND", message)


def raise_internal_error(message: str, details: Optional[Any] = None) -> None:
    """INTERNAL_ERRORエラーを発生させる"""
    raise AppError("INTERNAL_ERROR", message, details)
