"""
一覧・検索APIルーター

【初心者向け】
- GET /api/list/advance: 詳細検索 / フリーテキスト検索（クエリパラメータをそのまま渡す）
  - sort: JSON配列（なし・パース失敗なら ["POPULARITY_DESC"]）
  - genres: JSON配列（なし・パース失敗なら送らない）
- GET /api/list/trending | popular | genres: 一覧
- GET /api/media/{media_id}: 作品詳細
- 失敗時は 500 { "error": "<失敗内容のJSON文字列>" }、未知の一覧は 404
"""
import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request

from app.anilist.advance_search import get_media_detail, list_media, search
from app.anilist.base import CatalogError, NotFound
from app.anilist.client import AniListClient, get_anilist_client
from app.core.errors import AppError, raise_internal_error, raise_invalid_input, raise_not_found
from app.core.settings import settings
from app.schemas.catalog import SearchResultPage
from app.schemas.common import ErrorResponse

# ロガー設定
logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_SORT = ["POPULARITY_DESC"]
LIST_ROUTES = ("trending", "popular", "genres")


def flatten_query_params(request: Request) -> Dict[str, Any]:
    """
    クエリパラメータをフラットな辞書にする

    同じキーが複数回あればリスト、1回なら文字列
    """
    params: Dict[str, Any] = {}
    for key in request.query_params.keys():
        values = request.query_params.getlist(key)
        params[key] = values[0] if len(values) == 1 else values
    return params


def parse_json_array(value: Any) -> Optional[List[Any]]:
    """JSON配列の文字列をリストにする（文字列でない・パース失敗・配列でなければ None）"""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = json.loads(value)
    except ValueError:
        return None
    return parsed if isinstance(parsed, list) else None


def prepare_advance_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """sort / genres をJSON配列として解釈する"""
    prepared = dict(params)
    prepared["sort"] = parse_json_array(prepared.get("sort")) or list(DEFAULT_SORT)

    genres = parse_json_array(prepared.pop("genres", None))
    if genres is not None:
        prepared["genres"] = genres
    return prepared


def _failure_text(error: Exception) -> str:
    """失敗をレスポンス用の文字列にする"""
    if isinstance(error, CatalogError):
        return error.to_json()
    return json.dumps({"kind": type(error).__name__, "message": str(error)}, ensure_ascii=False)


@router.get(
    "/list/{route}",
    response_model=SearchResultPage,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_list(
    route: str,
    request: Request,
    client: AniListClient = Depends(get_anilist_client),
) -> SearchResultPage:
    """
    一覧・検索を実行する

    Args:
        route: advance / trending / popular / genres
        request: クエリパラメータ取得用
        client: AniListクライアント（テストで差し替え可能）

    Returns:
        SearchResultPage
    """
    params = flatten_query_params(request)

    if route != "advance" and route not in LIST_ROUTES:
        raise_not_found("API NOT FOUND!")

    if route == "genres" and parse_json_array(params.get("genres")) is None:
        raise_invalid_input("genres must be a JSON array")

    try:
        if route == "advance":
            return await search(prepare_advance_params(params), client=client)
        return await list_media(
            route,
            page=params.get("page"),
            per_page=params.get("perPage"),
            media_type=params.get("type"),
            genres=parse_json_array(params.get("genres")),
            client=client,
        )
    except (CatalogError, ValueError) as e:
        error_text = _failure_text(e)
        if settings.cors_debug:
            logger.error(f"一覧の取得に失敗しました: route={route}, error={error_text}")
        raise_internal_error(error_text)
    except Exception as e:
        logger.exception(f"一覧の取得で予期しないエラーが発生しました: route={route}")
        raise_internal_error(_failure_text(e))


@router.get(
    "/media/{media_id}",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_media(
    media_id: int,
    client: AniListClient = Depends(get_anilist_client),
) -> Dict[str, Any]:
    """
    作品詳細を取得する（上流の Media をそのまま返す）

    Args:
        media_id: AniListの作品ID
        client: AniListクライアント
    """
    try:
        return await get_media_detail(media_id, client=client)
    except NotFound as e:
        raise AppError("NOT_FOUND", e.to_json())
    except CatalogError as e:
        logger.error(f"作品詳細の取得に失敗しました: id={media_id}, kind={e.kind}")
        raise_internal_error(e.to_json())
