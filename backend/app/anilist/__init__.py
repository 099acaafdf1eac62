"""
AniList連携層

【初心者向け】
- queries: GraphQLクエリ組み立て
- normalizer: 上流の作品データ → MediaSummary
- advance_search: 検索・一覧の実行（通信 + 正規化）
- client / oauth: 上流との通信
"""
from app.anilist.advance_search import get_media_detail, list_media, search
from app.anilist.base import (
    BadUpstream,
    CatalogError,
    MalformedUpstream,
    NetworkFailure,
    NotFound,
)
from app.anilist.client import AniListClient, get_anilist_client

__all__ = [
    "AniListClient",
    "BadUpstream",
    "CatalogError",
    "MalformedUpstream",
    "NetworkFailure",
    "NotFound",
    "get_anilist_client",
    "get_media_detail",
    "list_media",
    "search",
]
