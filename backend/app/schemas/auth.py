"""
OAuthトークン交換API用スキーマ
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenExchangeRequest(BaseModel):
    """トークン交換リクエスト（code がない場合はルーター側で400）"""
    code: Optional[str] = Field(default=None, description="AniListの認可コード")


class TokenExchangeResponse(BaseModel):
    """トークン交換レスポンス"""
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")
