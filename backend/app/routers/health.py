"""
Health check APIルーター（死活確認用）

【初心者向け】
- GET /health: サーバーが生きているか確認するだけのエンドポイント
- 上流には問い合わせない（設定されている上流URLを返すだけ）
"""
from fastapi import APIRouter

from app.core.settings import settings

router = APIRouter()


@router.get("")
async def health_check():
    """ヘルスチェック用エンドポイント"""
    return {
        "status": "ok",
        "upstream": settings.anilist_graphql_url,
        "rate_limit": settings.cors_rate_limit,
    }
