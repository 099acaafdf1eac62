"""
上流の作品データを MediaSummary に正規化する（Response Normalizer）

【初心者向け】
- is_mirror_media(): anilistId があればミラー（ShapeB）、なければ本家（ShapeA）と判定
- parse_media(): dict を ShapeA / ShapeB のどちらかのモデルに変換
- map_shape_a() / map_shape_b(): それぞれの形から MediaSummary を作る
- 欠けているフィールドは None のまま（プレースホルダーで埋めない）
- ただし imageHash / coverHash はクライアント互換のため常に "hash"
"""
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from app.anilist.base import MalformedUpstream
from app.anilist.models import CoverImage, NextAiringEpisode, RawMedia, ShapeA, ShapeB
from app.schemas.catalog import MediaStatus, MediaSummary

# 上流の状態 → 正規化後の状態（ここにない値はすべて UNKNOWN）
STATUS_MAP: dict[str, MediaStatus] = {
    "RELEASING": MediaStatus.ONGOING,
    "FINISHED": MediaStatus.COMPLETED,
    "NOT_YET_RELEASED": MediaStatus.NOT_YET_AIRED,
    "CANCELLED": MediaStatus.CANCELLED,
    "HIATUS": MediaStatus.HIATUS,
}

# ミラーだけが持つ相互参照フィールド
MIRROR_ID_FIELD = "anilistId"

PLACEHOLDER_HASH = "hash"


def map_status(raw_status: Optional[str]) -> MediaStatus:
    """上流の状態文字列を MediaStatus に変換する"""
    if raw_status is None:
        return MediaStatus.UNKNOWN
    return STATUS_MAP.get(raw_status, MediaStatus.UNKNOWN)


def is_mirror_media(raw: Mapping[str, Any]) -> bool:
    """ミラー（ShapeB）の作品データかどうか"""
    return bool(raw.get(MIRROR_ID_FIELD))


def parse_media(raw: Any) -> RawMedia:
    """
    生の作品データを ShapeA / ShapeB に変換する

    Args:
        raw: 上流の media 配列の1要素

    Returns:
        ShapeA または ShapeB

    Raises:
        MalformedUpstream: dictでない、またはIDがないなど作品として読めない場合
    """
    if not isinstance(raw, Mapping):
        raise MalformedUpstream("media item is not an object", detail=raw)

    try:
        if is_mirror_media(raw):
            return ShapeB.model_validate(raw)
        return ShapeA.model_validate(raw)
    except ValidationError as e:
        raise MalformedUpstream("media item could not be parsed", detail=e.errors(include_url=False))


def _best_cover(cover: Optional[CoverImage]) -> Optional[str]:
    """解像度の高い順（extraLarge → large → medium）に画像URLを選ぶ"""
    if cover is None:
        return None
    return cover.extra_large or cover.large or cover.medium


def _aired_episodes(next_airing: Optional[NextAiringEpisode]) -> Optional[int]:
    """次回放送話 - 1（= 放送済みの話数）。次回放送情報がなければ None"""
    if next_airing is None or next_airing.episode is None:
        return None
    return next_airing.episode - 1


def map_shape_a(media: ShapeA) -> MediaSummary:
    """
    本家スキーマから MediaSummary を作る

    totalEpisodes は episodes 優先、currentEpisodeCount は次回放送話-1 優先
    （2つのフィールドでフォールバック順が逆になっている点はクライアント互換のため維持）
    """
    aired = _aired_episodes(media.next_airing_episode)
    total_episodes = media.episodes if media.episodes is not None else aired
    current_episode_count = aired if aired is not None else media.episodes

    return MediaSummary(
        id=str(media.id),
        mal_id=media.id_mal,
        title=media.title,
        status=map_status(media.status),
        image=_best_cover(media.cover_image),
        image_hash=PLACEHOLDER_HASH,
        cover=media.banner_image,
        cover_hash=PLACEHOLDER_HASH,
        popularity=media.popularity,
        total_episodes=total_episodes,
        current_episode_count=current_episode_count,
        country_of_origin=media.country_of_origin,
        description=media.description,
        genres=media.genres,
        rating=media.average_score,
        color=media.cover_image.color if media.cover_image else None,
        media_format=media.format,
        release_date=media.season_year,
    )


def map_shape_b(media: ShapeB) -> MediaSummary:
    """
    ミラースキーマから MediaSummary を作る

    画像は coverImage 優先、なければ bannerImage
    """
    if isinstance(media.cover_image, CoverImage):
        image = _best_cover(media.cover_image)
    else:
        image = media.cover_image
    if image is None:
        image = media.banner_image

    aired = _aired_episodes(media.next_airing_episode)
    current_episode_count = aired if media.next_airing_episode is not None else media.current_episode

    return MediaSummary(
        id=str(media.anilist_id),
        mal_id=(media.mappings or {}).get("mal"),
        title=media.title,
        status=map_status(media.status),
        image=image,
        image_hash=PLACEHOLDER_HASH,
        cover=media.banner_image,
        cover_hash=PLACEHOLDER_HASH,
        popularity=media.popularity,
        description=media.description,
        rating=media.average_score,
        genres=media.genres,
        color=media.color,
        total_episodes=media.current_episode,
        current_episode_count=current_episode_count,
        media_format=media.format,
        release_date=media.year,
    )


def normalize_media(raw: Any) -> MediaSummary:
    """
    生の作品データ1件を MediaSummary に正規化する

    Args:
        raw: 上流の media 配列の1要素

    Returns:
        MediaSummary

    Raises:
        MalformedUpstream: 作品として読めない場合
    """
    media = parse_media(raw)
    if isinstance(media, ShapeB):
        return map_shape_b(media)
    return map_shape_a(media)
