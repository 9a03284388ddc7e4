"""Unit tests for upload parsing."""

import io
import json

import pandas as pd
import pytest

from vizboard.services.file_service import FileService

pytestmark = pytest.mark.unit


@pytest.fixture
def service() -> FileService:
    return FileService()


async def test_csv_cells_are_kept_as_text(service: FileService) -> None:
    content = b"month, sales\nJan,100\nFeb,\n"

    parsed = await service.parse_upload("sales.csv", content)

    assert parsed.status == "ready"
    assert parsed.file_type == "csv"
    assert parsed.raw_data == [{"month": "Jan", "sales": "100"}, {"month": "Feb", "sales": ""}]
    assert parsed.metadata == {"size": len(content), "rows": 2, "columns": 2, "columnNames": ["month", "sales"]}


async def test_csv_handles_quoted_commas(service: FileService) -> None:
    parsed = await service.parse_upload("c.csv", b'name,city\n"Doe, Jane",Paris\n')

    assert parsed.raw_data == [{"name": "Doe, Jane", "city": "Paris"}]


async def test_json_object_payload_is_described_by_its_array(service: FileService) -> None:
    payload = {"source": "crm", "records": [{"id": 1, "stage": "lead"}, {"id": 2, "stage": "won"}]}

    parsed = await service.parse_upload("deals.json", json.dumps(payload).encode())

    assert parsed.raw_data == payload
    assert parsed.metadata["rows"] == 2
    assert parsed.metadata["columnNames"] == ["id", "stage"]


async def test_invalid_json_leaves_source_pending(service: FileService) -> None:
    parsed = await service.parse_upload("broken.json", b"{not json")

    assert parsed.raw_data is None
    assert parsed.status == "pending"
    assert parsed.error.startswith("Could not parse JSON file")
    assert parsed.metadata == {"size": 9}


async def test_xlsx_is_parsed_with_pandas(service: FileService) -> None:
    buffer = io.BytesIO()
    pd.DataFrame({"region": ["North", "South"], "amount": [10, 20]}).to_excel(buffer, index=False)

    parsed = await service.parse_upload("regions.xlsx", buffer.getvalue())

    assert parsed.file_type == "xlsx"
    assert parsed.raw_data == [{"region": "North", "amount": "10"}, {"region": "South", "amount": "20"}]


async def test_unsupported_extension_raises(service: FileService) -> None:
    with pytest.raises(ValueError, match="Unsupported file type"):
        await service.parse_upload("notes.pdf", b"%PDF")


def test_describe_empty_payload(service: FileService) -> None:
    assert service.describe([]) == {"rows": 0, "columns": 0, "columnNames": []}
