"""
End-to-end test for the import persons job.

Tests the complete flow: CSV file → chunked import → person table, through
the HTTP trigger.
"""

import pytest
from fastapi.testclient import TestClient

from person_etl.api import create_app
from person_etl.config import PipelineSettings
from person_etl.warehouse import PersonRepository

from tests.conftest import HEADER, person_line


@pytest.mark.e2e
@pytest.mark.integration
def test_thousand_rows_end_to_end(db_settings, db_pool, write_people_csv):
    """
    Steps:
    1. Trigger the job over HTTP against a 1000-row file
    2. Verify the run completed with 1000 records read and written in 100 chunks
    3. Verify the person table holds 1000 uppercased rows with generated ids
    """
    settings = PipelineSettings(
        input_path=str(write_people_csv(1000)),
        chunk_size=10,
        database=db_settings,
    )

    with TestClient(create_app(settings=settings)) as client:
        response = client.post("/jobs/import-persons")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "COMPLETED"
    assert body["total_read"] == 1000
    assert body["total_written"] == 1000
    assert body["chunk_count"] == 100

    stored = PersonRepository(db_pool).find_all()
    assert len(stored) == 1000
    assert len({p.id for p in stored}) == 1000
    assert stored[0].first_name == "JOHN"
    assert stored[0].last_name == "DOE"
    assert stored[0].email == "user1@example.com"


@pytest.mark.e2e
@pytest.mark.integration
def test_malformed_line_fails_run_after_committed_chunks(db_settings, db_pool, tmp_path):
    path = tmp_path / "people.csv"
    lines = [HEADER] + [person_line(i) for i in range(1, 16)] + ["U99,Only,Three"]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    settings = PipelineSettings(
        input_path=str(path),
        chunk_size=10,
        tokenizer={"strict": True},
        database=db_settings,
    )

    with TestClient(create_app(settings=settings)) as client:
        response = client.post("/jobs/import-persons")

    assert response.status_code == 500
    body = response.json()
    assert body["status"] == "FAILED"
    assert body["total_written"] == 10
    assert body["error"]["kind"] == "parse"
    assert body["error"]["line_number"] == 17
    assert PersonRepository(db_pool).count() == 10
