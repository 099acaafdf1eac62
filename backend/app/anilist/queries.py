"""
AniList GraphQLクエリ組み立て（Query Builder）

【初心者向け】
- 用途（intent）ごとに1つの関数があり、GraphQLのクエリ文字列を返すだけ（通信はしない）
- 変数宣言は _declare() で組み立て、デフォルト値の埋め込みは必ず
  graphql_string() などのリテラル変換関数を通す
  （検索語に " や改行が入ってもクエリが壊れないようにするため）
- 取得するフィールド（selection set）は用途ごとに固定
"""
import json
from typing import Any, Iterable, Optional, Sequence, Tuple

MEDIA_TYPES = ("ANIME", "MANGA")

PAGE_INFO = "pageInfo { total perPage currentPage lastPage hasNextPage }"

TITLE_FIELDS = "title { userPreferred romaji english native }"
COVER_IMAGE_FIELDS = "coverImage { extraLarge large medium color }"
NEXT_AIRING_FIELDS = "nextAiringEpisode { airingAt timeUntilAiring episode }"
TRAILER_FIELDS = "trailer { id site thumbnail }"

# 変数宣言: (変数名, GraphQL型, 埋め込み済みデフォルト値 or None)
Declaration = Tuple[str, str, Optional[str]]


# --- リテラル変換 ---

def graphql_string(value: Any) -> str:
    """
    値をGraphQLの文字列リテラルに変換する（エスケープ込み）

    JSONの文字列エスケープはGraphQLの文字列リテラルとして有効なので json.dumps を使う

    Args:
        value: 埋め込む値（strに変換される）

    Returns:
        ダブルクォート付きの文字列リテラル
    """
    return json.dumps(str(value), ensure_ascii=False)


def graphql_int(value: Any) -> str:
    """整数リテラルに変換する（変換できなければ ValueError）"""
    if isinstance(value, bool):
        raise ValueError(f"整数ではありません: {value!r}")
    return str(int(value))


def graphql_bool(value: Any) -> str:
    """真偽値リテラルに変換する（"true"/"false" の文字列も受け付ける）"""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered not in ("true", "false"):
            raise ValueError(f"真偽値ではありません: {value!r}")
        return lowered
    return "true" if value else "false"


def graphql_string_list(values: Iterable[Any]) -> str:
    """文字列リストのリテラルに変換する"""
    return "[" + ", ".join(graphql_string(v) for v in values) + "]"


def media_type_literal(value: Optional[str]) -> str:
    """
    MediaType（ANIME / MANGA）のenumリテラルに変換する

    未指定なら ANIME、文字列でない値（同じクエリパラメータの重複など）や
    ANIME / MANGA 以外は ValueError
    """
    if value is not None and not isinstance(value, str):
        raise ValueError(f"MediaTypeは文字列で指定してください: {value!r}")
    media_type = (value or "ANIME").strip().upper()
    if media_type not in MEDIA_TYPES:
        raise ValueError(f"無効なMediaType: {value!r}（ANIME または MANGA）")
    return media_type


def _declare(declarations: Sequence[Declaration]) -> str:
    """変数宣言部 "$page: Int = 1, $id: Int, ..." を組み立てる"""
    parts = []
    for name, gql_type, default in declarations:
        if default is None:
            parts.append(f"${name}: {gql_type}")
        else:
            parts.append(f"${name}: {gql_type} = {default}")
    return ", ".join(parts)


# --- 詳細検索（Advanced） ---

ADVANCED_DECLARATIONS: Tuple[Declaration, ...] = (
    ("page", "Int", None),
    ("id", "Int", None),
    ("type", "MediaType", None),
    ("isAdult", "Boolean", "false"),
    ("search", "String", None),
    ("format", "[MediaFormat]", None),
    ("status", "MediaStatus", None),
    ("size", "Int", None),
    ("countryOfOrigin", "CountryCode", None),
    ("source", "MediaSource", None),
    ("season", "MediaSeason", None),
    ("seasonYear", "Int", None),
    ("year", "String", None),
    ("onList", "Boolean", None),
    ("yearLesser", "FuzzyDateInt", None),
    ("yearGreater", "FuzzyDateInt", None),
    ("episodeLesser", "Int", None),
    ("episodeGreater", "Int", None),
    ("durationLesser", "Int", None),
    ("durationGreater", "Int", None),
    ("chapterLesser", "Int", None),
    ("chapterGreater", "Int", None),
    ("volumeLesser", "Int", None),
    ("volumeGreater", "Int", None),
    ("licensedBy", "[String]", None),
    ("isLicensed", "Boolean", None),
    ("genres", "[String]", None),
    ("excludedGenres", "[String]", None),
    ("tags", "[String]", None),
    ("excludedTags", "[String]", None),
    ("minimumTagRank", "Int", None),
    ("sort", "[MediaSort]", "[POPULARITY_DESC, SCORE_DESC]"),
)

ADVANCED_MEDIA_ARGS = (
    "id: $id, type: $type, season: $season, format_in: $format, status: $status, "
    "countryOfOrigin: $countryOfOrigin, source: $source, search: $search, onList: $onList, "
    "seasonYear: $seasonYear, startDate_like: $year, startDate_lesser: $yearLesser, "
    "startDate_greater: $yearGreater, episodes_lesser: $episodeLesser, "
    "episodes_greater: $episodeGreater, duration_lesser: $durationLesser, "
    "duration_greater: $durationGreater, chapters_lesser: $chapterLesser, "
    "chapters_greater: $chapterGreater, volumes_lesser: $volumeLesser, "
    "volumes_greater: $volumeGreater, licensedBy_in: $licensedBy, isLicensed: $isLicensed, "
    "genre_in: $genres, genre_not_in: $excludedGenres, tag_in: $tags, "
    "tag_not_in: $excludedTags, minimumTagRank: $minimumTagRank, sort: $sort, isAdult: $isAdult"
)

ADVANCED_MEDIA_FIELDS = (
    f"id idMal status(version: 2) {TITLE_FIELDS} bannerImage {COVER_IMAGE_FIELDS} "
    "episodes season popularity description format seasonYear genres averageScore "
    f"countryOfOrigin {NEXT_AIRING_FIELDS}"
)


def advanced_query() -> str:
    """
    詳細検索クエリ（フィルタ条件はすべて送信時の variables で渡す）

    Returns:
        GraphQLクエリ文字列
    """
    return (
        f"query ({_declare(ADVANCED_DECLARATIONS)}) "
        f"{{ Page(page: $page, perPage: $size) {{ {PAGE_INFO} "
        f"media({ADVANCED_MEDIA_ARGS}) {{ {ADVANCED_MEDIA_FIELDS} }} }} }}"
    )


# --- フリーテキスト検索 ---

SEARCH_MEDIA_FIELDS = (
    f"id idMal status(version: 2) {TITLE_FIELDS} bannerImage popularity {COVER_IMAGE_FIELDS} "
    "episodes format season description seasonYear chapters volumes averageScore genres "
    f"{NEXT_AIRING_FIELDS}"
)


def search_query(text: str, page: int, per_page: int, media_type: str = "ANIME") -> str:
    """
    フリーテキスト検索クエリ

    検索語・ページ・件数・種別は変数のデフォルト値としてクエリに埋め込む

    Args:
        text: 検索語
        page: ページ番号
        per_page: 1ページあたりの件数
        media_type: ANIME または MANGA

    Returns:
        GraphQLクエリ文字列
    """
    declarations: Tuple[Declaration, ...] = (
        ("page", "Int", graphql_int(page)),
        ("id", "Int", None),
        ("type", "MediaType", media_type_literal(media_type)),
        ("search", "String", graphql_string(text)),
        ("isAdult", "Boolean", "false"),
        ("size", "Int", graphql_int(per_page)),
    )
    return (
        f"query ({_declare(declarations)}) "
        f"{{ Page(page: $page, perPage: $size) {{ {PAGE_INFO} "
        f"media(id: $id, type: $type, search: $search, isAdult: $isAdult) "
        f"{{ {SEARCH_MEDIA_FIELDS} }} }} }}"
    )


# --- トレンド・人気・ジャンル一覧 ---

TRENDING_MEDIA_FIELDS = (
    f"id idMal status(version: 2) {TITLE_FIELDS} genres {TRAILER_FIELDS} description format "
    f"bannerImage {COVER_IMAGE_FIELDS} episodes meanScore duration season seasonYear "
    f"averageScore {NEXT_AIRING_FIELDS}"
)

POPULAR_MEDIA_FIELDS = (
    f"id idMal status(version: 2) {TITLE_FIELDS} {TRAILER_FIELDS} format genres bannerImage "
    f"description {COVER_IMAGE_FIELDS} episodes meanScore duration season seasonYear "
    f"averageScore {NEXT_AIRING_FIELDS}"
)

GENRE_MEDIA_FIELDS = (
    f"id idMal status(version: 2) {TITLE_FIELDS} {TRAILER_FIELDS} format bannerImage "
    f"description {COVER_IMAGE_FIELDS} episodes meanScore duration season seasonYear "
    f"averageScore {NEXT_AIRING_FIELDS}"
)


def _sorted_list_query(page: int, per_page: int, media_type: str, sort: str, fields: str) -> str:
    """並び順だけが違う一覧クエリを組み立てる"""
    declarations: Tuple[Declaration, ...] = (
        ("page", "Int", graphql_int(page)),
        ("id", "Int", None),
        ("type", "MediaType", media_type_literal(media_type)),
        ("isAdult", "Boolean", "false"),
        ("size", "Int", graphql_int(per_page)),
        ("sort", "[MediaSort]", sort),
    )
    return (
        f"query ({_declare(declarations)}) "
        f"{{ Page(page: $page, perPage: $size) {{ {PAGE_INFO} "
        f"media(id: $id, type: $type, isAdult: $isAdult, sort: $sort) {{ {fields} }} }} }}"
    )


def trending_query(page: int = 1, per_page: int = 20, media_type: str = "ANIME") -> str:
    """トレンド順の一覧クエリ"""
    return _sorted_list_query(
        page, per_page, media_type, "[TRENDING_DESC, POPULARITY_DESC]", TRENDING_MEDIA_FIELDS
    )


def popular_query(page: int = 1, per_page: int = 20, media_type: str = "ANIME") -> str:
    """人気順の一覧クエリ"""
    return _sorted_list_query(
        page, per_page, media_type, "[POPULARITY_DESC]", POPULAR_MEDIA_FIELDS
    )


def genres_query(genres: Sequence[str], page: int = 1, per_page: int = 20) -> str:
    """
    ジャンル指定の一覧クエリ（種別は ANIME 固定）

    Args:
        genres: ジャンル名のリスト
        page: ページ番号
        per_page: 1ページあたりの件数
    """
    declarations: Tuple[Declaration, ...] = (
        ("genres", "[String]", graphql_string_list(genres)),
        ("page", "Int", graphql_int(page)),
        ("type", "MediaType", "ANIME"),
        ("isAdult", "Boolean", "false"),
        ("size", "Int", graphql_int(per_page)),
    )
    return (
        f"query ({_declare(declarations)}) "
        f"{{ Page(page: $page, perPage: $size) {{ {PAGE_INFO} "
        f"media(type: $type, isAdult: $isAdult, genre_in: $genres) {{ {GENRE_MEDIA_FIELDS} }} }} }}"
    )


# --- 放送スケジュール ---

def airing_schedule_query(
    page: int,
    per_page: int,
    week_start: int,
    week_end: int,
    not_yet_aired: bool,
) -> str:
    """
    放送スケジュールのクエリ（期間はUNIX秒）

    Args:
        page: ページ番号
        per_page: 1ページあたりの件数
        week_start: 開始時刻（この時刻より後）
        week_end: 終了時刻（この時刻より前）
        not_yet_aired: 未放送のみに絞るかどうか
    """
    return (
        f"query {{ Page(page: {graphql_int(page)}, perPage: {graphql_int(per_page)}) "
        f"{{ {PAGE_INFO} airingSchedules( notYetAired: {graphql_bool(not_yet_aired)}, "
        f"airingAt_greater: {graphql_int(week_start)}, airingAt_lesser: {graphql_int(week_end)}) "
        f"{{ airingAt episode media {{ id description idMal "
        f"title {{ romaji english userPreferred native }} countryOfOrigin description popularity "
        f"bannerImage {COVER_IMAGE_FIELDS} genres averageScore seasonYear format }} }} }} }}"
    )


# --- 詳細（作品・キャラクター・スタッフ） ---

MEDIA_DETAIL_FIELDS = (
    "id idMal title { english native romaji } synonyms countryOfOrigin isLicensed isAdult "
    "externalLinks { url site type language } coverImage { extraLarge large color } "
    "startDate { year month day } endDate { year month day } bannerImage season seasonYear "
    "description type format status(version: 2) episodes duration chapters volumes "
    f"{TRAILER_FIELDS} genres source averageScore popularity meanScore {NEXT_AIRING_FIELDS} "
    "characters(sort: ROLE) { edges { role node { id name { first middle last full native "
    "userPreferred } image { large medium } } voiceActors(sort: LANGUAGE) { id languageV2 "
    "name { first middle last full native userPreferred } image { large medium } } } } "
    "recommendations { edges { node { id mediaRecommendation { id idMal "
    "title { romaji english native userPreferred } status episodes "
    f"{COVER_IMAGE_FIELDS} bannerImage format chapters meanScore "
    "nextAiringEpisode { episode timeUntilAiring airingAt } } } } } "
    "relations { edges { id relationType node { id idMal status "
    f"{COVER_IMAGE_FIELDS} bannerImage title {{ romaji english native userPreferred }} "
    f"episodes chapters format {NEXT_AIRING_FIELDS} meanScore }} }} }} "
    "studios(isMain: true) { edges { isMain node { id name } } }"
)


def media_detail_query(media_id: Any) -> str:
    """
    作品詳細のクエリ

    Args:
        media_id: AniListの作品ID（整数に変換できること）
    """
    return (
        f"query ($id: Int = {graphql_int(media_id)}) "
        f"{{ Media(id: $id) {{ {MEDIA_DETAIL_FIELDS} }} }}"
    )


def character_query() -> str:
    """キャラクター詳細のクエリ（$id は variables で渡す）"""
    return (
        "query character($id: Int) { Character(id: $id) { id "
        "name { first middle last full native userPreferred alternative alternativeSpoiler } "
        "image { large medium } description gender dateOfBirth { year month day } bloodType "
        "age favourites media { edges { characterRole node { id idMal "
        f"title {{ romaji english native userPreferred }} {COVER_IMAGE_FIELDS} averageScore "
        "startDate { year month day } episodes format status } } } } }"
    )


def staff_query() -> str:
    """スタッフ詳細のクエリ（出演・制作作品は variables のフラグで取得）"""
    return (
        "query staff($id: Int, $sort: [MediaSort], $characterPage: Int, $staffPage: Int, "
        "$onList: Boolean, $type: MediaType, $withCharacterRoles: Boolean = false, "
        "$withStaffRoles: Boolean = false) { Staff(id: $id) { id "
        "name { first middle last full native userPreferred alternative } image { large } "
        "description favourites isFavourite isFavouriteBlocked age gender yearsActive homeTown "
        "bloodType primaryOccupations dateOfBirth { year month day } "
        "dateOfDeath { year month day } language: languageV2 "
        "characterMedia(page: $characterPage, sort: $sort, onList: $onList) "
        f"@include(if: $withCharacterRoles) {{ {PAGE_INFO} edges {{ characterRole characterName "
        "node { id type bannerImage isAdult title { userPreferred } coverImage { large } "
        "startDate { year } mediaListEntry { id status } } characters { id "
        "name { userPreferred } image { large } } } } "
        "staffMedia(page: $staffPage, type: $type, sort: $sort, onList: $onList) "
        f"@include(if: $withStaffRoles) {{ {PAGE_INFO} edges {{ staffRole node {{ id type "
        "isAdult title { userPreferred } coverImage { large } mediaListEntry { id status } "
        "} } } } }"
    )


def site_statistics_query() -> str:
    """サイト統計（アニメ件数）のクエリ"""
    return "query { SiteStatistics { anime { nodes { count } } } }"


# --- 別カタログ（Kitsu） ---

def kitsu_search_query(text: str) -> str:
    """
    Kitsu GraphQL のタイトル検索クエリ（上位5件、エピソード一覧付き）

    Args:
        text: 検索語
    """
    return (
        f"query{{searchAnimeByTitle(first:5, title:{graphql_string(text)})"
        "{ nodes {id season startDate titles { localized } episodes(first: 2000)"
        "{ nodes { number createdAt titles { canonical } description "
        "thumbnail { original { url } } } } } } }"
    )
