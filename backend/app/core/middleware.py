"""
アプリ全体のCORSミドルウェア

【初心者向け】
- 通常のAPI（/api 等）は cors_origins に登録したオリジンだけ許可する
- /cors リレーは全オリジン許可のヘッダを自分で付けるので、このミドルウェアを素通りさせる
  （素通りさせないと、未登録オリジンからのプリフライトがここで 400 になる）
"""
from starlette.middleware.cors import CORSMiddleware
from starlette.types import Receive, Scope, Send

RELAY_PATH = "/cors"


def is_relay_path(path: str) -> bool:
    """/cors 配下のパスかどうか"""
    return path == RELAY_PATH or path.startswith(RELAY_PATH + "/")


class AppCORSMiddleware(CORSMiddleware):
    """/cors 以外にだけ CORSMiddleware を適用する"""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and is_relay_path(scope["path"]):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
