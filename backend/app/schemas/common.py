"""
共通スキーマ定義（APIで共通利用する型）

【初心者向け】
- ErrorResponse: エラー時のボディ { "error": "...", "details": ... }
"""
from typing import Any, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """エラーレスポンス"""
    error: str
    details: Optional[Any] = None
