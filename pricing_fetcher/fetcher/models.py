"""
Pricing Fetcher - Fetch Models
"""
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass
class FetchResult:
    """Result of one scheduled download."""
    success: bool
    url: str = ""
    path: Optional[Path] = None          # Written file, if any
    status_code: Optional[int] = None    # Last HTTP status seen
    size_bytes: Optional[int] = None
    error: Optional[str] = None          # Error message if failed
    attempts: int = 0
    fetched_at: Optional[datetime] = None

    @classmethod
    def ok(
        cls,
        url: str,
        path: Path,
        status_code: int,
        size_bytes: int,
        attempts: int = 1,
        fetched_at: datetime = None,
    ) -> "FetchResult":
        return cls(
            success=True,
            url=url,
            path=path,
            status_code=status_code,
            size_bytes=size_bytes,
            attempts=attempts,
            fetched_at=fetched_at,
        )

    @classmethod
    def fail(
        cls,
        error: str,
        url: str = "",
        status_code: Optional[int] = None,
        attempts: int = 1,
        fetched_at: datetime = None,
    ) -> "FetchResult":
        return cls(
            success=False,
            url=url,
            error=error,
            status_code=status_code,
            attempts=attempts,
            fetched_at=fetched_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "url": self.url,
            "path": str(self.path) if self.path else None,
            "status_code": self.status_code,
            "size_bytes": self.size_bytes,
            "error": self.error,
            "attempts": self.attempts,
            "fetched_at": self.fetched_at.isoformat() if self.fetched_at else None,
        }
