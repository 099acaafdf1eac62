"""
CORSリレーAPIルーター

【初心者向け】
- GET /cors?url=...（または Target-URL ヘッダ）: 対象URLの応答をそのまま中継
- OPTIONS /cors: プリフライト（空の200）
- 全オリジンを許可するので、本番ではレート制限（CORS_RATE_LIMIT）を推奨
"""
import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from app.core.ratelimit import cors_rate_limit_value, limiter
from app.core.settings import settings
from app.relay.proxy import (
    RelayClient,
    RelayNoResponseError,
    RelaySetupError,
    get_relay_client,
    resolve_target_url,
)

# ロガー設定
logger = logging.getLogger(__name__)

router = APIRouter()

ALLOW_METHODS = "GET, PUT, PATCH, POST, DELETE"


def cors_headers(request: Request) -> Dict[str, str]:
    """リレー応答に付けるCORSヘッダ"""
    headers = {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": ALLOW_METHODS,
    }
    requested = request.headers.get("access-control-request-headers")
    if requested:
        headers["Access-Control-Allow-Headers"] = requested
    return headers


@router.api_route("", methods=["GET", "OPTIONS"])
@limiter.limit(cors_rate_limit_value)
async def relay(
    request: Request,
    relay_client: RelayClient = Depends(get_relay_client),
) -> Response:
    """
    対象URLにGETして応答を中継する

    Args:
        request: Target-URL ヘッダ / url クエリ取得用
        relay_client: リレー用クライアント（テストで差し替え可能）

    Returns:
        対象URLのステータス・ボディ（JSONならJSONのまま）
    """
    headers = cors_headers(request)

    if request.method == "OPTIONS":
        return Response(status_code=200, headers=headers)

    raw_url = request.headers.get("target-url") or request.query_params.get("url")
    if not raw_url:
        if settings.cors_debug:
            logger.error("400: Target-URL ヘッダまたは url クエリがありません")
        return JSONResponse(
            status_code=400,
            content={"error": "Target-URL header or url query parameter is missing"},
            headers=headers,
        )

    try:
        target_url = resolve_target_url(raw_url)
    except RelaySetupError as e:
        if settings.cors_debug:
            logger.error(f"リレー先URLが不正です: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Error in setting up the request"},
            headers=headers,
        )

    if settings.cors_debug:
        logger.info(f"リレー: {target_url}")

    try:
        relayed = await relay_client.fetch(target_url)
    except RelayNoResponseError as e:
        if settings.cors_debug:
            logger.error(f"リレー先から応答がありません: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "No response received from target URL"},
            headers=headers,
        )

    if relayed.status_code != 200 and settings.cors_debug:
        logger.error(f"リレー先がHTTP {relayed.status_code} を返しました: {target_url}")

    if relayed.is_json:
        return JSONResponse(status_code=relayed.status_code, content=relayed.body, headers=headers)
    return Response(
        content=relayed.body,
        status_code=relayed.status_code,
        media_type=relayed.content_type,
        headers=headers,
    )
