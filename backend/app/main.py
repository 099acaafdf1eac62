"""
FastAPIアプリケーションのエントリーポイント（アプリの起動入口）

【初心者向け】
このファイルはメディアカタログ用プロキシサーバーを起動する「玄関」です。
- FastAPI: PythonのWebフレームワーク。REST APIを簡単に作れる
- /api（OAuth・一覧検索）, /cors（CORSリレー）, /health のルートを登録し、
  それ以外のパスはビルド済みフロントエンド（DIST_DIR）を返します

実行方法:
    venv有効化後:
    pip install -e .
    uvicorn app.main:app --reload --port 5173
    または（backend/ で）python -m app.main
"""
import logging
import socket
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded

from app.core.errors import AppError, app_error_handler, validation_error_handler
from app.core.middleware import AppCORSMiddleware
from app.core.ratelimit import limiter, rate_limit_exceeded_handler
from app.core.settings import settings
from app.routers import auth, cors, frontend, health, lists

# ロガー設定
logger = logging.getLogger(__name__)


def get_local_ip_address() -> str:
    """
    LAN側のIPv4アドレスを取得する（取れなければ localhost）

    UDPソケットの接続先を決めるだけで、パケットは送らない
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(("10.255.255.255", 1))
        address = sock.getsockname()[0]
    except OSError:
        return "localhost"
    finally:
        sock.close()
    return address if not address.startswith("127.") else "localhost"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """起動時の処理: 待ち受けURLと上流の設定をログに出す"""
    logger.info(
        f"Server is running at:\n"
        f"- Localhost: http://localhost:{settings.port}\n"
        f"- Local IP: http://{get_local_ip_address()}:{settings.port}"
    )
    logger.info(f"GraphQL上流: {settings.anilist_graphql_url}")
    if not settings.client_id or not settings.client_secret:
        logger.warning("VITE_CLIENT_ID / VITE_CLIENT_SECRET が未設定です。トークン交換は失敗します。")
    yield


app = FastAPI(
    title="Anime Catalog Proxy API",
    description="AniList OAuth / GraphQL search / CORS relay",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS設定: 開発中のフロントエンド（Vite）からAPIを呼ぶ際の跨域通信を許可
# /cors リレーはこのミドルウェアを通らず、自前で全オリジン許可のヘッダを付ける
app.add_middleware(
    AppCORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# AppError → { "error": "...", "details": ... }
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

# /cors のレート制限（CORS_RATE_LIMIT が有効なときだけ働く）
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# ルーター登録: 各APIの「窓口」をURLパスに割り当て
# /health=死活確認, /api=OAuth・一覧検索, /cors=CORSリレー
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(lists.router, prefix="/api", tags=["list"])
app.include_router(cors.router, prefix="/cors", tags=["cors"])
# フロントエンド配信は何にでもマッチするので最後に登録
app.include_router(frontend.router)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    uvicorn.run(app, host=settings.host, port=settings.port)
