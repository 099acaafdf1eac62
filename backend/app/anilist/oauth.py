"""
AniList OAuth: 認可コード → アクセストークンの交換

【初心者向け】
- フロントエンドが受け取った認可コード（code）をサーバー側でトークンに交換する
- client_secret をフロントエンドに持たせないためにサーバーを経由する
- 失敗時は TokenExchangeError（detail に上流のボディ or メッセージ）
"""
from functools import lru_cache
from typing import Any, Dict, Optional

import httpx

from app.core.settings import settings


class TokenExchangeError(Exception):
    """トークン交換の失敗"""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail if detail is not None else message


class OAuthClient:
    """
    AniList OAuthトークンエンドポイントのクライアント

    - transport はテストで httpx.MockTransport を差し込むためのもの
    """

    def __init__(
        self,
        token_url: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        redirect_uri: str | None = None,
        timeout_sec: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token_url = token_url or settings.anilist_oauth_token_url
        self.client_id = client_id if client_id is not None else settings.client_id
        self.client_secret = client_secret if client_secret is not None else settings.client_secret
        self.redirect_uri = redirect_uri if redirect_uri is not None else settings.redirect_uri
        self.timeout_sec = timeout_sec if timeout_sec is not None else settings.anilist_timeout_sec
        self.transport = transport

    def build_payload(self, code: str) -> Dict[str, str]:
        """トークン交換リクエストのボディ"""
        return {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }

    async def exchange_code(self, code: str) -> str:
        """
        認可コードをアクセストークンに交換する

        Args:
            code: 認可コード

        Returns:
            アクセストークン

        Raises:
            TokenExchangeError: 通信失敗、非2xx応答、access_token がない場合
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Accept-Encoding": "identity",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout_sec, transport=self.transport) as client:
                response = await client.post(self.token_url, json=self.build_payload(code), headers=headers)
        except httpx.RequestError as e:
            raise TokenExchangeError(f"token request failed: {e}")

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if not response.is_success:
            raise TokenExchangeError(
                f"token endpoint returned HTTP {response.status_code}",
                status_code=response.status_code,
                detail=body,
            )

        access_token = body.get("access_token") if isinstance(body, dict) else None
        if not access_token:
            raise TokenExchangeError(
                "Access token not found in the response",
                status_code=response.status_code,
            )
        return access_token


@lru_cache(maxsize=1)
def get_oauth_client() -> OAuthClient:
    """OAuthクライアントのシングルトンインスタンスを取得"""
    return OAuthClient()
