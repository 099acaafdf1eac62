"""
アプリケーション設定（環境変数・定数の一元管理）

【初心者向け】
- Pydantic Settings: 環境変数や.envを読んで型付きで扱うための仕組み
- ここで定義した値は app.core.settings.settings から参照できる
- 主な分類: サーバー, OAuth(AniList), GraphQL(AniList), CORSリレー, 静的ファイル
"""
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    アプリケーション設定クラス
    環境変数（または.env）の値が自動でここにマッピングされる
    """

    # CORS設定（フロントエンドの開発サーバーから呼ぶ場合）
    cors_origins: List[str] = ["http://localhost:5173"]

    # サーバー設定（フロントエンドと同じ VITE_ 系の変数名を使う）
    port: int = Field(
        default=5173,
        alias="VITE_PORT",
        description="待ち受けポート番号"
    )
    host: str = Field(
        default="0.0.0.0",
        alias="HOST",
        description="待ち受けアドレス"
    )

    # OAuth設定（AniListのアプリ登録情報）
    client_id: str = Field(
        default="",
        alias="VITE_CLIENT_ID",
        description="AniList OAuthクライアントID"
    )
    client_secret: str = Field(
        default="",
        alias="VITE_CLIENT_SECRET",
        description="AniList OAuthクライアントシークレット（ログに出さないこと）"
    )
    redirect_uri: str = Field(
        default="",
        alias="VITE_REDIRECT_URI",
        description="AniList OAuthリダイレクトURI"
    )
    anilist_oauth_token_url: str = Field(
        default="https://anilist.co/api/v2/oauth/token",
        alias="ANILIST_OAUTH_TOKEN_URL",
        description="認可コードをアクセストークンに交換するエンドポイント"
    )

    # GraphQL設定（メディアカタログ）
    anilist_graphql_url: str = Field(
        default="https://graphql.anilist.co",
        alias="ANILIST_GRAPHQL_URL",
        description="AniList GraphQLエンドポイント"
    )
    anilist_timeout_sec: Optional[float] = Field(
        default=None,
        alias="ANILIST_TIMEOUT_SEC",
        description="GraphQL呼び出しのタイムアウト秒数（未指定ならタイムアウトなし）"
    )

    # CORSリレー設定
    cors_debug: bool = Field(
        default=False,
        alias="CORS_DEBUG",
        description="CORSリレーと一覧APIのデバッグログを出す"
    )
    cors_rate_limit: bool = Field(
        default=False,
        alias="CORS_RATE_LIMIT",
        description="/cors にIP単位のレート制限をかける"
    )
    rate_limit_window_sec: int = Field(
        default=15 * 60,
        alias="RATE_LIMIT_WINDOW_SEC",
        description="レート制限のウィンドウ秒数（15分）"
    )
    rate_limit_max: int = Field(
        default=100,
        alias="RATE_LIMIT_MAX",
        description="ウィンドウあたりの最大リクエスト数（IP単位）"
    )
    relay_timeout_sec: Optional[float] = Field(
        default=None,
        alias="RELAY_TIMEOUT_SEC",
        description="CORSリレーのタイムアウト秒数（未指定ならタイムアウトなし）"
    )
    relay_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.3"
        ),
        alias="RELAY_USER_AGENT",
        description="リレー先に送るUser-Agent"
    )

    # 静的ファイル（ビルド済みフロントエンド、リポジトリルートからの相対パス）
    dist_dir: str = Field(
        default="dist",
        alias="DIST_DIR",
        description="ビルド済みフロントエンドのディレクトリ"
    )

    # Pydantic v2の設定（Configクラスの代わりにmodel_configを使用）
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,  # Fieldのaliasとフィールド名の両方で読み込み可能
        extra="ignore"  # 未定義の環境変数を無視
    )


# グローバル設定インスタンス
settings = Settings()
