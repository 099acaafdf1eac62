"""
OAuth APIルーター（認可コード → アクセストークン）

【初心者向け】
- POST /api/exchange-token: { "code": "..." } を受け取り { "accessToken": "..." } を返す
- code がなければ 400、交換に失敗したら 500 { "error": "Failed to exchange token", "details": ... }
"""
import logging

from fastapi import APIRouter, Depends

from app.anilist.oauth import OAuthClient, TokenExchangeError, get_oauth_client
from app.core.errors import raise_internal_error, raise_invalid_input
from app.schemas.auth import TokenExchangeRequest, TokenExchangeResponse
from app.schemas.common import ErrorResponse

# ロガー設定
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/exchange-token",
    response_model=TokenExchangeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def exchange_token(
    request: TokenExchangeRequest,
    oauth_client: OAuthClient = Depends(get_oauth_client),
) -> TokenExchangeResponse:
    """
    認可コードをアクセストークンに交換する

    Args:
        request: { "code": "..." }
        oauth_client: OAuthクライアント（テストで差し替え可能）

    Returns:
        { "accessToken": "..." }
    """
    if not request.code:
        logger.error("認可コードがありません")
        raise_invalid_input("Authorization code is required")

    # client_secret はログに出さない
    logger.info(
        f"AniListにトークン交換リクエストを送信: url={oauth_client.token_url}, "
        f"client_id={oauth_client.client_id}, redirect_uri={oauth_client.redirect_uri}"
    )

    try:
        access_token = await oauth_client.exchange_code(request.code)
    except TokenExchangeError as e:
        logger.error(f"トークン交換に失敗しました: {e.message}")
        if e.status_code is not None:
            logger.error(f"上流ステータス: {e.status_code}, 詳細: {e.detail}")
        raise_internal_error("Failed to exchange token", details=e.detail)

    logger.info("AniListからアクセストークンを取得しました")
    return TokenExchangeResponse(access_token=access_token)
