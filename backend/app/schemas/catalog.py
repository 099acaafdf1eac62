"""
カタログAPI用スキーマ（フロントエンドに返す正規化済みの型）

【初心者向け】
- MediaStatus: 放送状態（上流の値をそのまま返さず、必ずこのどれかにする）
- MediaSummary: 作品1件分。JSONのキー名はフロントエンドに合わせてcamelCase（alias）
- SearchResultPage: ページ情報 + results（上流の並び順のまま）
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class MediaStatus(str, Enum):
    """放送状態"""
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    NOT_YET_AIRED = "NOT_YET_AIRED"
    CANCELLED = "CANCELLED"
    HIATUS = "HIATUS"
    UNKNOWN = "UNKNOWN"


class CamelModel(BaseModel):
    """aliasでもフィールド名でも生成できるモデル"""
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class MediaSummary(CamelModel):
    """作品サマリー"""
    id: str
    mal_id: Optional[Union[int, str]] = Field(default=None, alias="malId")
    title: Union[Dict[str, Any], str, None] = None
    status: MediaStatus = MediaStatus.UNKNOWN
    image: Optional[str] = None
    image_hash: str = Field(default="hash", alias="imageHash")  # クライアント互換のため固定値
    cover: Optional[str] = None
    cover_hash: str = Field(default="hash", alias="coverHash")  # 同上
    popularity: Optional[Union[int, float]] = None
    description: Optional[str] = None
    rating: Optional[Union[int, float]] = None
    genres: Optional[List[str]] = None
    color: Optional[str] = None
    total_episodes: Optional[int] = Field(default=None, alias="totalEpisodes")
    current_episode_count: Optional[int] = Field(default=None, alias="currentEpisodeCount")
    media_format: Optional[str] = Field(default=None, alias="type")
    release_date: Optional[int] = Field(default=None, alias="releaseDate")
    country_of_origin: Optional[str] = Field(default=None, alias="countryOfOrigin")


class SearchResultPage(CamelModel):
    """検索結果の1ページ"""
    current_page: Optional[int] = Field(default=None, alias="currentPage")
    has_next_page: bool = Field(default=False, alias="hasNextPage")
    total_pages: Optional[int] = Field(default=None, alias="totalPages")
    total_results: Optional[int] = Field(default=None, alias="totalResults")
    results: List[MediaSummary] = Field(default_factory=list)
