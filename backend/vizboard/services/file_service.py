"""
File upload parsing service.
Turns uploaded CSV, JSON and Excel files into data source payloads.
"""
import io
import json
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from vizboard.core.logger import logger
from vizboard.services.data_resolver import extract_rows


@dataclass
class ParsedFile:
    """Result of parsing one upload; ``raw_data`` is None when parsing failed."""
    file_type: str
    raw_data: Optional[Any] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def status(self) -> str:
        return "ready" if self.raw_data else "pending"


class FileService:
    """Service for parsing uploaded data files."""

    SUPPORTED_EXTENSIONS = {'.csv', '.json', '.xlsx', '.xls'}

    def file_type_for(self, filename: str) -> str:
        """
        Extension-derived file type tag.

        Raises:
            ValueError: If file type is not supported
        """
        file_ext = Path(filename or "").suffix.lower()
        if file_ext not in self.SUPPORTED_EXTENSIONS:
            raise ValueError(
                f"Unsupported file type: {file_ext or filename}. "
                f"Supported types: {', '.join(sorted(self.SUPPORTED_EXTENSIONS))}"
            )
        return file_ext.lstrip('.')

    async def parse_upload(self, filename: str, content: bytes) -> ParsedFile:
        """
        Parse an uploaded file into rows.

        Args:
            filename: Original file name, used for the type tag
            content: Raw file bytes

        Returns:
            ParsedFile with payload and metadata (size, rows, columns, columnNames)

        Raises:
            ValueError: If file type is not supported
        """
        file_type = self.file_type_for(filename)
        parsed = ParsedFile(file_type=file_type, metadata={"size": len(content)})

        try:
            if file_type == 'csv':
                parsed.raw_data = await self._parse_csv(content)
            elif file_type == 'json':
                parsed.raw_data = await self._parse_json(content)
            else:
                parsed.raw_data = await self._parse_excel(content)
        except (ValueError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError, zipfile.BadZipFile) as e:
            logger.warning(f"[UPLOAD] Could not parse {filename}: {e}")
            parsed.error = f"Could not parse {file_type.upper()} file: {e}"
            return parsed

        parsed.metadata.update(self.describe(parsed.raw_data))
        return parsed

    def describe(self, raw_data: Any) -> Dict[str, Any]:
        """Row count, column count and column names of a payload."""
        rows = extract_rows(raw_data, limit=None).rows
        columns: List[str] = list(rows[0].keys()) if rows and isinstance(rows[0], dict) else []
        return {"rows": len(rows), "columns": len(columns), "columnNames": columns}

    async def _parse_csv(self, content: bytes) -> List[Dict[str, Any]]:
        """Every cell is kept as text; blank cells become empty strings."""
        df = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False, skipinitialspace=True)
        df.columns = [str(column).strip() for column in df.columns]
        return df.to_dict(orient="records")

    async def _parse_json(self, content: bytes) -> Any:
        return json.loads(content.decode("utf-8"))

    async def _parse_excel(self, content: bytes) -> List[Dict[str, Any]]:
        df = pd.read_excel(io.BytesIO(content), dtype=str).fillna("")
        df.columns = [str(column).strip() for column in df.columns]
        return df.to_dict(orient="records")
