"""
フロントエンド配信ルーター（ビルド済みSPAの静的ファイル）

【初心者向け】
- DIST_DIR にファイルがあれば StaticFiles がそのファイルを返す
- なければ index.html を返す（SPAのクライアントサイドルーティング用）
- 他のルーターより後に登録すること（何にでもマッチするため）
"""
import logging
from functools import lru_cache
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException

from app.core.paths import resolve_dist_dir
from app.core.settings import settings

# ロガー設定
logger = logging.getLogger(__name__)

router = APIRouter()

INDEX_FILE = "index.html"


@lru_cache(maxsize=4)
def get_static_files(dist_path: Path) -> StaticFiles:
    """
    DIST_DIR 用の StaticFiles を取得（ディレクトリごとに1つ）

    DIST_DIR がまだビルドされていなくても起動できるよう check_dir=False
    """
    return StaticFiles(directory=dist_path, check_dir=False)


@router.get("/{full_path:path}", include_in_schema=False)
async def serve_frontend(full_path: str, request: Request) -> Response:
    """
    静的ファイル or index.html を返す

    Args:
        full_path: リクエストパス
        request: StaticFiles に渡すASGIスコープ取得用
    """
    dist_path = resolve_dist_dir(settings.dist_dir)

    try:
        return await get_static_files(dist_path).get_response(full_path, request.scope)
    except HTTPException as e:
        # 404（ファイルなし・ディレクトリ・DIST_DIR の外）は index.html にフォールバック
        if e.status_code != 404:
            raise

    index_file = dist_path / INDEX_FILE
    if not index_file.is_file():
        logger.error(f"index.html の配信に失敗しました: {index_file} が存在しません")
        return PlainTextResponse(
            "An error occurred while serving the application",
            status_code=500,
        )
    return FileResponse(index_file)
