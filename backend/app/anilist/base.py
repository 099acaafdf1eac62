"""
AniList連携層の例外定義

【初心者向け】
- CatalogError: 上流（GraphQL API）呼び出し失敗の基底例外
- kind で失敗の種類を区別する（BadUpstream / NotFound / MalformedUpstream / NetworkFailure）
- detail には上流が返したボディなど、分かる範囲の詳細を入れる
- いずれもリトライせず、そのまま呼び出し元（routers）に伝える
"""
import json
from typing import Any, Literal, Optional

FailureKind = Literal[
    "BadUpstream",
    "NotFound",
    "MalformedUpstream",
    "NetworkFailure",
]


class CatalogError(Exception):
    """上流カタログ関連の基底例外"""

    kind: FailureKind = "BadUpstream"

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        """kind / message / detail を辞書にする"""
        return {
            "kind": self.kind,
            "message": self.message,
            "detail": self.detail,
        }

    def to_json(self) -> str:
        """レスポンス用に文字列化する（detailがJSON化できない場合は文字列にする）"""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)


class BadUpstream(CatalogError):
    """非2xx応答、またはボディに data がない"""
    kind: FailureKind = "BadUpstream"


class NotFound(CatalogError):
    """data に Page（または Media）がない"""
    kind: FailureKind = "NotFound"


class MalformedUpstream(CatalogError):
    """pageInfo / media の型が想定外"""
    kind: FailureKind = "MalformedUpstream"


class NetworkFailure(CatalogError):
    """応答を受け取る前の通信エラー（接続失敗・タイムアウト等）"""
    kind: FailureKind = "NetworkFailure"
