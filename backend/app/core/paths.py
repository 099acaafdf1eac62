"""
パス解決ユーティリティ
"""
from pathlib import Path


def find_repo_root() -> Path:
    """
    リポジトリルートを取得する（backend/app/core/paths.py から4階層上）

    Returns:
        リポジトリルートのPathオブジェクト（絶対パス）
    """
    # paths.py -> core/ -> app/ -> backend/ -> repo_root
    current_file = Path(__file__).resolve()
    repo_root = current_file.parent.parent.parent.parent

    # 検証: backend/ディレクトリが存在するか確認
    backend_dir = repo_root / "backend"
    if not backend_dir.exists() or not backend_dir.is_dir():
        # フォールバック: parentsを辿ってbackend/を探す
        for parent in current_file.parents:
            backend_check = parent / "backend"
            if backend_check.exists() and backend_check.is_dir():
                repo_root = parent
                break

    return repo_root.resolve()


def resolve_dist_dir(dist_dir: str) -> Path:
    """
    ビルド済みフロントエンドのディレクトリを絶対パスにする

    Args:
        dist_dir: 絶対パス、またはリポジトリルートからの相対パス
    """
    path = Path(dist_dir)
    if not path.is_absolute():
        path = find_repo_root() / path
    return path.resolve()
