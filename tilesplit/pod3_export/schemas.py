"""
Schemas for export module
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field


class ExportResult(BaseModel):
    """Result of writing tiles to a directory or archive"""
    tile_count: int
    files: List[str] = Field(default_factory=list)
    output_dir: Optional[Path] = None
    archive_path: Optional[Path] = None
    bytes_written: int = 0
    created_at: datetime = Field(default_factory=datetime.now)
