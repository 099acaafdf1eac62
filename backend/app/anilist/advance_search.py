"""
詳細検索・一覧取得（Search Orchestrator）

【初心者向け】
- search(): ゲートウェイから受け取ったクエリパラメータで検索し、SearchResultPage を返す
  1. page / perPage を正の整数に（デフォルト 1 / 20）
  2. year があれば seasonYear に、なければ今年（year は変数から取り除く）
  3. query（検索語）があればフリーテキスト検索、なければ詳細検索のクエリを使う
  4. 上流に1回だけPOSTし、media を1件ずつ正規化する
- list_media(): トレンド・人気・ジャンル一覧（ページ処理は search と共通）
- get_media_detail(): 作品詳細（生データのまま返す）
- このモジュールではログを出さない（ログはrouters側の担当）
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Literal, Mapping, Optional, Sequence

from app.anilist.base import BadUpstream, MalformedUpstream, NotFound
from app.anilist.client import AniListClient, get_anilist_client
from app.anilist.normalizer import normalize_media
from app.anilist.queries import (
    advanced_query,
    genres_query,
    media_detail_query,
    popular_query,
    search_query,
    trending_query,
)
from app.schemas.catalog import SearchResultPage

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20
DEFAULT_MEDIA_TYPE = "ANIME"

ListIntent = Literal["trending", "popular", "genres"]


@dataclass
class SearchParams:
    """正規化済みの検索パラメータ"""
    page: int
    per_page: int
    season_year: int
    query: Optional[str] = None
    media_type: str = DEFAULT_MEDIA_TYPE
    # 上流に送る GraphQL variables（フィルタ類はそのまま入る）
    variables: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_text_search(self) -> bool:
        """フリーテキスト検索かどうか"""
        return bool(self.query)


def _positive_int(value: Any, default: int) -> int:
    """正の整数に変換する（未指定・空・変換不可・0以下ならデフォルト）"""
    if not value:
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        return default
    return number if number > 0 else default


def _season_year(value: Any, current_year: int) -> int:
    """year を seasonYear に変換する（未指定・変換不可なら今年）"""
    if not value:
        return current_year
    try:
        return int(str(value).strip())
    except ValueError:
        return current_year


def prepare_search_params(params: Mapping[str, Any], current_year: Optional[int] = None) -> SearchParams:
    """
    ゲートウェイから受け取ったパラメータを正規化する

    Args:
        params: クエリパラメータ（文字列 or リスト）のフラットな辞書
        current_year: 今年（テスト用、未指定なら date.today()）

    Returns:
        SearchParams
    """
    if current_year is None:
        current_year = date.today().year

    variables = dict(params)
    year = variables.pop("year", None)

    page = _positive_int(variables.get("page"), DEFAULT_PAGE)
    per_page = _positive_int(variables.get("perPage"), DEFAULT_PER_PAGE)
    season_year = _season_year(year, current_year)

    variables["page"] = page
    variables["perPage"] = per_page
    variables["seasonYear"] = season_year
    # 詳細検索クエリはページサイズを $size で受け取る
    variables.setdefault("size", per_page)

    query = variables.get("query") or None
    media_type = variables.get("type") or DEFAULT_MEDIA_TYPE

    return SearchParams(
        page=page,
        per_page=per_page,
        season_year=season_year,
        query=str(query) if query is not None else None,
        media_type=str(media_type),
        variables=variables,
    )


def build_search_document(params: SearchParams) -> str:
    """検索語があればフリーテキスト検索、なければ詳細検索のクエリを返す"""
    if params.is_text_search:
        return search_query(params.query, params.page, params.per_page, params.media_type)
    return advanced_query()


def build_result_page(body: Mapping[str, Any]) -> SearchResultPage:
    """
    上流のレスポンスボディから SearchResultPage を組み立てる

    Args:
        body: 上流のレスポンスボディ

    Returns:
        SearchResultPage（results は上流の並び順のまま）

    Raises:
        BadUpstream: data がない
        NotFound: data.Page がない
        MalformedUpstream: pageInfo / media の型が想定外
    """
    data = body.get("data")
    if not isinstance(data, Mapping):
        raise BadUpstream("upstream response has no data", detail=dict(body))

    page = data.get("Page")
    if page is None:
        raise NotFound("upstream response has no Page", detail=dict(data))

    info = page.get("pageInfo") if isinstance(page, Mapping) else None
    media = page.get("media") if isinstance(page, Mapping) else None
    if not isinstance(info, Mapping) or not isinstance(media, list):
        raise MalformedUpstream("Page.pageInfo or Page.media is malformed", detail=page)

    current_page = info.get("currentPage")
    last_page = info.get("lastPage")
    has_next_page = info.get("hasNextPage")
    if has_next_page is None:
        has_next_page = current_page != last_page

    return SearchResultPage(
        current_page=current_page,
        has_next_page=has_next_page,
        total_pages=last_page,
        total_results=info.get("total"),
        results=[normalize_media(item) for item in media],
    )


async def search(
    params: Mapping[str, Any],
    client: Optional[AniListClient] = None,
    current_year: Optional[int] = None,
) -> SearchResultPage:
    """
    詳細検索 / フリーテキスト検索を実行する

    Args:
        params: クエリパラメータのフラットな辞書
        client: AniListクライアント（デフォルト: シングルトン）
        current_year: 今年（テスト用）

    Returns:
        SearchResultPage

    Raises:
        CatalogError: BadUpstream / NotFound / MalformedUpstream / NetworkFailure
    """
    client = client or get_anilist_client()
    search_params = prepare_search_params(params, current_year=current_year)
    document = build_search_document(search_params)

    body = await client.execute(document, search_params.variables)
    return build_result_page(body)


def build_list_document(
    intent: ListIntent,
    page: int = DEFAULT_PAGE,
    per_page: int = DEFAULT_PER_PAGE,
    media_type: str = DEFAULT_MEDIA_TYPE,
    genres: Optional[Sequence[str]] = None,
) -> str:
    """一覧の種類に応じたクエリを返す（未知の種類は ValueError）"""
    if intent == "trending":
        return trending_query(page, per_page, media_type)
    if intent == "popular":
        return popular_query(page, per_page, media_type)
    if intent == "genres":
        return genres_query(list(genres or []), page, per_page)
    raise ValueError(f"未知の一覧種別: {intent!r}")


async def list_media(
    intent: ListIntent,
    page: Any = None,
    per_page: Any = None,
    media_type: Optional[str] = None,
    genres: Optional[Sequence[str]] = None,
    client: Optional[AniListClient] = None,
) -> SearchResultPage:
    """
    トレンド・人気・ジャンルの一覧を取得する

    Args:
        intent: "trending" / "popular" / "genres"
        page: ページ番号（不正値はデフォルト）
        per_page: 1ページあたりの件数（不正値はデフォルト）
        media_type: ANIME / MANGA（genres は ANIME 固定）
        genres: ジャンル名のリスト（intent="genres" のとき）
        client: AniListクライアント

    Returns:
        SearchResultPage
    """
    client = client or get_anilist_client()
    document = build_list_document(
        intent,
        page=_positive_int(page, DEFAULT_PAGE),
        per_page=_positive_int(per_page, DEFAULT_PER_PAGE),
        media_type=media_type or DEFAULT_MEDIA_TYPE,
        genres=genres,
    )

    body = await client.execute(document)
    return build_result_page(body)


async def get_media_detail(media_id: Any, client: Optional[AniListClient] = None) -> Dict[str, Any]:
    """
    作品詳細を取得する（正規化せず data.Media をそのまま返す）

    Raises:
        ValueError: media_id が整数でない
        BadUpstream: data がない
        NotFound: data.Media がない
    """
    client = client or get_anilist_client()
    document = media_detail_query(media_id)

    body = await client.execute(document)
    data = body.get("data")
    if not isinstance(data, Mapping):
        raise BadUpstream("upstream response has no data", detail=body)

    media = data.get("Media")
    if not media:
        raise NotFound(f"media {media_id} not found", detail=dict(data))
    return media
