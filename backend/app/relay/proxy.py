"""
CORSリレー（ブラウザから直接呼べないURLをサーバー経由でGETする）

【初心者向け】
- resolve_target_url(): Target-URL ヘッダ or url クエリをデコードして検証
- RelayClient.fetch(): 対象URLにGETし、ステータス・ボディ・Content-Typeを返す
  （JSON以外のボディはバイト列のまま中継する）
- 上流が 4xx/5xx を返しても例外にせず、そのまま中継する
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional
from urllib.parse import unquote, urlsplit

import httpx

from app.core.settings import settings


class RelaySetupError(Exception):
    """リクエストを組み立てられない（URL不正など）"""
    pass


class RelayNoResponseError(Exception):
    """対象URLから応答がなかった（接続失敗・タイムアウト等）"""
    pass


@dataclass
class RelayResponse:
    """中継する応答"""
    status_code: int
    body: Any
    is_json: bool
    content_type: Optional[str] = None


def resolve_target_url(raw_url: Optional[str]) -> str:
    """
    リレー先URLをデコードして検証する

    Args:
        raw_url: Target-URL ヘッダ or url クエリの値（URLエンコード済みでも可）

    Returns:
        正規化済みの絶対URL

    Raises:
        RelaySetupError: http(s) の絶対URLでない場合
    """
    if not raw_url:
        raise RelaySetupError("target url is empty")

    url = unquote(raw_url).strip()
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise RelaySetupError(f"invalid target url: {url}")
    return parts.geturl()


class RelayClient:
    """
    リレー用HTTPクライアント

    - transport はテストで httpx.MockTransport を差し込むためのもの
    """

    def __init__(
        self,
        user_agent: str | None = None,
        timeout_sec: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.user_agent = user_agent or settings.relay_user_agent
        self.timeout_sec = timeout_sec if timeout_sec is not None else settings.relay_timeout_sec
        self.transport = transport

    async def fetch(self, url: str) -> RelayResponse:
        """
        対象URLにGETする（リダイレクトは追従）

        Args:
            url: resolve_target_url() 済みのURL

        Returns:
            RelayResponse（JSONとして読めればパース済み、読めなければ生のバイト列）

        Raises:
            RelayNoResponseError: 応答を受け取れなかった場合
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_sec,
                transport=self.transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url, headers={"User-Agent": self.user_agent})
        except httpx.RequestError as e:
            raise RelayNoResponseError(str(e))

        content_type = response.headers.get("content-type")
        try:
            return RelayResponse(
                status_code=response.status_code,
                body=response.json(),
                is_json=True,
                content_type=content_type,
            )
        except ValueError:
            return RelayResponse(
                status_code=response.status_code,
                body=response.content,
                is_json=False,
                content_type=content_type,
            )


@lru_cache(maxsize=1)
def get_relay_client() -> RelayClient:
    """リレー用クライアントのシングルトンインスタンスを取得"""
    return RelayClient()
