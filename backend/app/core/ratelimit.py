"""
IP単位のレート制限（/cors リレー用、slowapi）

【初心者向け】
- slowapi: FastAPI/Starlette用のレート制限ライブラリ（カウンタはメモリ上、期限切れは自動で消える）
- デフォルトは 15分あたり100回（IP単位）。超えたら 429 { "error": "..." }
- CORS_RATE_LIMIT が無効のときは limiter.enabled=False で何もしない
- 使い方: ルーター関数に @limiter.limit(cors_rate_limit_value) を付ける（引数に request が必要）
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.errors import AppError
from app.core.settings import settings

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again after 15 minutes"

limiter = Limiter(key_func=get_remote_address, enabled=settings.cors_rate_limit)


def cors_rate_limit_value() -> str:
    """
    /cors の制限値（例: "100 per 900 seconds"）

    リクエストごとに評価されるので、設定値の変更がそのまま反映される
    """
    return f"{settings.rate_limit_max} per {settings.rate_limit_window_sec} seconds"


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """RateLimitExceeded を { "error": "..." } の429にする（main.pyで登録）"""
    error = AppError("RATE_LIMITED", RATE_LIMIT_MESSAGE)
    return JSONResponse(status_code=error.status_code, content=error.to_content())
