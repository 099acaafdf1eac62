"""
AniList GraphQLクライアント（上流への通信だけを担当）

【初心者向け】
- httpx.AsyncClient で {query, variables} をJSONでPOSTする
- 非2xx応答はボディを detail に入れて BadUpstream にする
- 接続失敗・タイムアウトなど、応答を受け取る前の失敗は NetworkFailure にする
- リトライ・キャッシュはしない（1回の呼び出しで1回だけ通信）
"""
from functools import lru_cache
from typing import Any, Dict, Optional

import httpx

from app.anilist.base import BadUpstream, NetworkFailure
from app.core.settings import settings

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class AniListClient:
    """
    GraphQLエンドポイントのクライアント

    - endpoint は設定値から渡す（モジュール定数にしない）
    - transport はテストで httpx.MockTransport を差し込むためのもの
    """

    def __init__(
        self,
        endpoint: str | None = None,
        timeout_sec: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        クライアントを初期化

        Args:
            endpoint: GraphQLエンドポイント（デフォルト: settingsから取得）
            timeout_sec: タイムアウト秒数（デフォルト: settingsから取得、Noneならタイムアウトなし）
            transport: httpxのトランスポート（テスト用）
        """
        self.endpoint = endpoint or settings.anilist_graphql_url
        self.timeout_sec = timeout_sec if timeout_sec is not None else settings.anilist_timeout_sec
        self.transport = transport

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        クエリを1回送信し、パース済みのボディを返す

        Args:
            query: GraphQLクエリ文字列
            variables: GraphQL変数

        Returns:
            上流のレスポンスボディ（dict）

        Raises:
            BadUpstream: 非2xx応答、またはボディがJSONオブジェクトでない場合
            NetworkFailure: 応答を受け取る前に通信が失敗した場合
        """
        payload = {"query": query, "variables": variables or {}}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_sec, transport=self.transport) as client:
                response = await client.post(self.endpoint, json=payload, headers=JSON_HEADERS)
        except httpx.TimeoutException as e:
            raise NetworkFailure(f"request to {self.endpoint} timed out", detail=str(e))
        except httpx.RequestError as e:
            raise NetworkFailure(f"request to {self.endpoint} failed", detail=str(e))

        try:
            body = response.json()
        except ValueError:
            raise BadUpstream(
                f"upstream returned non-JSON body (HTTP {response.status_code})",
                detail=response.text,
            )

        if not response.is_success:
            raise BadUpstream(f"upstream returned HTTP {response.status_code}", detail=body)

        if not isinstance(body, dict):
            raise BadUpstream("upstream body is not an object", detail=body)

        return body


@lru_cache(maxsize=1)
def get_anilist_client() -> AniListClient:
    """
    AniListクライアントのシングルトンインスタンスを取得（@lru_cacheで生成を抑える）

    Returns:
        AniListClientインスタンス
    """
    return AniListClient()
