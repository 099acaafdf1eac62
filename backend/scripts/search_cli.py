"""
検索スクリプト（サーバーを立てずに AniList 検索を試す）

使い方:
    python scripts/search_cli.py --query bleach
    python scripts/search_cli.py --genres '["Action"]' --year 2024 --per-page 5
    python scripts/search_cli.py --list trending
"""
import asyncio
import json
import logging
import sys
from pathlib import Path

# プロジェクトルートをパスに追加
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

from app.anilist.advance_search import list_media, search
from app.anilist.base import CatalogError

# ロガー設定
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def run(args) -> int:
    """検索を実行して結果をJSONで出力する"""
    try:
        if args.list:
            page = await list_media(
                args.list,
                page=args.page,
                per_page=args.per_page,
                media_type=args.type,
                genres=json.loads(args.genres) if args.genres else None,
            )
        else:
            params = {"page": args.page, "perPage": args.per_page, "type": args.type}
            if args.query:
                params["query"] = args.query
            if args.year:
                params["year"] = args.year
            if args.genres:
                params["genres"] = json.loads(args.genres)
            params["sort"] = json.loads(args.sort)
            page = await search(params)
    except CatalogError as e:
        logger.error(f"検索に失敗しました: {e.to_json()}")
        return 1

    print(json.dumps(page.model_dump(by_alias=True, mode="json"), ensure_ascii=False, indent=2))
    logger.info(f"{len(page.results)}件 / 全{page.total_results}件")
    return 0


def main():
    import argparse

    parser = argparse.ArgumentParser(description='AniList検索スクリプト')
    parser.add_argument('--query', help='検索語（指定するとフリーテキスト検索）')
    parser.add_argument('--type', default='ANIME', help='ANIME または MANGA')
    parser.add_argument('--page', type=int, default=1)
    parser.add_argument('--per-page', type=int, default=20)
    parser.add_argument('--year', help='放送年（未指定なら今年）')
    parser.add_argument('--genres', help='ジャンルのJSON配列（例: \'["Action"]\'）')
    parser.add_argument('--sort', default='["POPULARITY_DESC"]', help='並び順のJSON配列')
    parser.add_argument(
        '--list',
        choices=['trending', 'popular', 'genres'],
        help='検索ではなく一覧を取得する'
    )
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
