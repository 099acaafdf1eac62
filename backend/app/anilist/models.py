"""
上流（AniList / ミラー）から返る生データの型

【初心者向け】
- ShapeA: AniList本家のスキーマ（id, idMal, coverImage{...}, episodes ...）
- ShapeB: ミラー（マッピング層）のスキーマ（anilistId, mappings{mal}, currentEpisode ...）
- どちらも「ほぼ全部省略可能」。欠けたフィールドは None になり、例外にはしない
- kind フィールドで ShapeA / ShapeB を区別する（タグ付きユニオン）
"""
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# タイトルは構造化（romaji/english/...）でも文字列でもそのまま返す
RawTitle = Union[Dict[str, Any], str, None]
Number = Union[int, float]


class RawModel(BaseModel):
    """生データ用の基底モデル（未知のフィールドは無視、キー名はcamelCase）"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CoverImage(RawModel):
    """カバー画像（解像度別URLとテーマカラー）"""
    extra_large: Optional[str] = Field(default=None, alias="extraLarge")
    large: Optional[str] = None
    medium: Optional[str] = None
    color: Optional[str] = None


class NextAiringEpisode(RawModel):
    """次回放送予定のエピソード"""
    airing_at: Optional[int] = Field(default=None, alias="airingAt")
    time_until_airing: Optional[int] = Field(default=None, alias="timeUntilAiring")
    episode: Optional[int] = None


class ShapeA(RawModel):
    """AniList本家スキーマ"""
    kind: Literal["A"] = "A"

    id: Union[int, str]
    id_mal: Optional[Union[int, str]] = Field(default=None, alias="idMal")
    title: RawTitle = None
    status: Optional[str] = None
    banner_image: Optional[str] = Field(default=None, alias="bannerImage")
    cover_image: Optional[CoverImage] = Field(default=None, alias="coverImage")
    episodes: Optional[int] = None
    popularity: Optional[Number] = None
    description: Optional[str] = None
    format: Optional[str] = None
    season_year: Optional[int] = Field(default=None, alias="seasonYear")
    genres: Optional[List[str]] = None
    average_score: Optional[Number] = Field(default=None, alias="averageScore")
    country_of_origin: Optional[str] = Field(default=None, alias="countryOfOrigin")
    next_airing_episode: Optional[NextAiringEpisode] = Field(default=None, alias="nextAiringEpisode")


class ShapeB(RawModel):
    """ミラー（マッピング層）スキーマ"""
    kind: Literal["B"] = "B"

    anilist_id: Union[int, str] = Field(alias="anilistId")
    mappings: Optional[Dict[str, Any]] = None
    title: RawTitle = None
    status: Optional[str] = None
    # ミラーは画像URLを文字列で返すが、構造化されている場合にも対応
    cover_image: Optional[Union[CoverImage, str]] = Field(default=None, alias="coverImage")
    banner_image: Optional[str] = Field(default=None, alias="bannerImage")
    popularity: Optional[Number] = None
    description: Optional[str] = None
    average_score: Optional[Number] = Field(default=None, alias="averageScore")
    genres: Optional[List[str]] = Field(
        default=None,
        validation_alias=AliasChoices("genre", "genres"),
    )
    color: Optional[str] = None
    current_episode: Optional[int] = Field(default=None, alias="currentEpisode")
    next_airing_episode: Optional[NextAiringEpisode] = Field(default=None, alias="nextAiringEpisode")
    format: Optional[str] = None
    year: Optional[int] = None


RawMedia = Union[ShapeA, ShapeB]
