"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

DEFAULT_NAVIGATION_ORDER: Tuple[str, ...] = (
    "操作說明＿名詞定義",
    "操作說明＿基礎操作",
    "操作說明＿活動及場次管理",
    "操作說明＿貴賓出席名單管理及邀約",
    "操作說明＿信件模板管理",
    "操作說明＿角色管理及角色分派",
    "操作說明＿票務分派",
    "操作說明＿貴賓資料庫管理",
    "操作說明＿標籤管理",
)


def _get_default_content_dir() -> Path:
    """Get the default markdown directory for the current working copy."""
    # When running from a checkout, prefer a local content/ folder
    local_dir = Path("content")
    if local_dir.exists():
        return local_dir

    return Path.home() / "Documents" / "HelpCenter"


@dataclass(slots=True)
class AppConfig:
    content_dir: Path | None = None
    pattern: str = "*.md"
    navigation_order: Tuple[str, ...] = field(default=DEFAULT_NAVIGATION_ORDER)
    search_limit: int = 20

    def __post_init__(self) -> None:
        if self.content_dir is None:
            self.content_dir = _get_default_content_dir()

    def resolve_content_dir(self, base_dir: Path | None = None) -> Path:
        if self.content_dir is None:
            self.content_dir = _get_default_content_dir()
        if Path(self.content_dir).is_absolute() or base_dir is None:
            return Path(self.content_dir)
        return base_dir / self.content_dir
