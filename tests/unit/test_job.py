"""
Unit tests for ImportPersonsJob wiring, result reporting and metrics.
"""

import logging
from unittest.mock import MagicMock

import pytest

from person_etl.batch.job import ImportPersonsJob, new_run_id
from person_etl.batch.readers import FlatFileItemReader
from person_etl.batch.writers import PersonWarehouseWriter
from person_etl.config import PipelineSettings
from person_etl.core.models import COMPLETED, FAILED
from person_etl.observability.metrics import REGISTRY
from person_etl.observability.logger import ROOT_LOGGER_NAME


def metric_value(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


def make_job(path, writer, chunk_size=10, job_name="importPersonsTest", make_reader=None):
    return ImportPersonsJob(
        reader_factory=lambda: make_reader(path),
        writer=writer,
        chunk_size=chunk_size,
        job_name=job_name,
        input_path=str(path),
    )


def test_launch_returns_completed_result(write_people_csv, make_reader, recording_writer):
    path = write_people_csv(25)
    job = make_job(path, recording_writer, make_reader=make_reader)

    result = job.launch(run_id="run-1")

    assert result.status == COMPLETED
    assert result.succeeded
    assert result.run_id == "run-1"
    assert result.job_name == "importPersonsTest"
    assert result.total_read == 25
    assert result.total_written == 25
    assert result.chunk_count == 3
    assert result.input_path == str(path)
    assert result.error is None


def test_launch_converts_pipeline_error_to_failed_result(write_people_csv, make_reader, failing_writer):
    job = make_job(write_people_csv(25), failing_writer(2), make_reader=make_reader)

    result = job.launch()

    assert result.status == FAILED
    assert not result.succeeded
    assert result.total_read == 20
    assert result.total_written == 10
    assert result.error.kind == "storage"
    assert result.error.chunk_index == 2


def test_missing_input_is_failed_result(tmp_path, make_reader, recording_writer):
    job = make_job(tmp_path / "missing.csv", recording_writer, make_reader=make_reader)

    result = job.launch()

    assert result.status == FAILED
    assert result.error.kind == "resource"
    assert result.total_read == 0


def test_each_launch_is_a_fresh_run(write_people_csv, make_reader, recording_writer):
    job = make_job(write_people_csv(3), recording_writer, make_reader=make_reader)

    first = job.launch()
    second = job.launch()

    assert first.run_id != second.run_id
    assert second.total_read == 3
    assert len(recording_writer.stored) == 6


def test_unexpected_errors_propagate(write_people_csv, make_reader):
    writer = MagicMock()
    writer.__enter__ = MagicMock(return_value=writer)
    writer.__exit__ = MagicMock(return_value=False)
    writer.write.side_effect = TypeError("bad writer")
    job = make_job(write_people_csv(1), writer, make_reader=make_reader)

    with pytest.raises(TypeError):
        job.launch()


def test_metrics_recorded(write_people_csv, make_reader, recording_writer, failing_writer):
    job_name = "importPersonsMetrics"
    before_completed = metric_value("person_etl_runs_total", job_name=job_name, status=COMPLETED)
    before_failed = metric_value("person_etl_runs_total", job_name=job_name, status=FAILED)
    before_written = metric_value("person_etl_records_total", job_name=job_name, stage="written")
    before_errors = metric_value("person_etl_errors_total", job_name=job_name, kind="storage")

    path = write_people_csv(12)
    make_job(path, recording_writer, chunk_size=5, job_name=job_name, make_reader=make_reader).launch()
    make_job(path, failing_writer(1), chunk_size=5, job_name=job_name, make_reader=make_reader).launch()

    assert metric_value("person_etl_runs_total", job_name=job_name, status=COMPLETED) == before_completed + 1
    assert metric_value("person_etl_runs_total", job_name=job_name, status=FAILED) == before_failed + 1
    assert metric_value("person_etl_records_total", job_name=job_name, stage="written") == before_written + 12
    assert metric_value("person_etl_errors_total", job_name=job_name, kind="storage") == before_errors + 1


def test_from_settings_wires_components(write_people_csv):
    path = write_people_csv(2)
    settings = PipelineSettings(
        input_path=str(path),
        chunk_size=7,
        create_table=False,
        tokenizer={"strict": True, "delimiter": ","},
        database={"table": "people_copy"},
    )

    job = ImportPersonsJob.from_settings(settings, pool=MagicMock())
    reader = job.reader_factory()

    assert job.chunk_size == 7
    assert job.input_path == str(path)
    assert isinstance(job.writer, PersonWarehouseWriter)
    assert job.writer.repository.table == "people_copy"
    assert isinstance(reader, FlatFileItemReader)
    assert reader.tokenizer.strict is True
    assert reader.lines_to_skip == 1
    with reader:
        assert [p.user_id for p in reader] == ["U00001", "U00002"]


def test_from_settings_rejects_unbindable_names():
    settings = PipelineSettings(tokenizer={"names": ["userId", "salary"]})

    with pytest.raises(ValueError):
        ImportPersonsJob.from_settings(settings, pool=MagicMock())


def test_run_ids_are_unique():
    assert len({new_run_id() for _ in range(50)}) == 50


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured_logs():
    handler = ListHandler()
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.addHandler(handler)
    yield handler.records
    root.removeHandler(handler)


def test_failure_logged_once_with_context(write_people_csv, make_reader, failing_writer, captured_logs):
    job = make_job(write_people_csv(25), failing_writer(2), make_reader=make_reader)

    job.launch(run_id="run-err")

    errors = [r for r in captured_logs if r.levelno >= logging.ERROR]
    assert len(errors) == 1
    assert errors[0].run_id == "run-err"
    assert errors[0].error_kind == "storage"
    assert errors[0].chunk_index == 2


def test_open_failure_counts_no_failed_chunk(tmp_path, make_reader, recording_writer):
    job_name = "importPersonsOpenFailure"
    job = make_job(tmp_path / "missing.csv", recording_writer, job_name=job_name, make_reader=make_reader)

    job.launch()

    assert metric_value("person_etl_chunks_total", job_name=job_name, status="failed") == 0
    assert metric_value("person_etl_errors_total", job_name=job_name, kind="resource") == 1


def test_filtered_chunk_not_metered_as_committed(write_people_csv, make_reader, recording_writer):
    job_name = "importPersonsFiltered"
    job = ImportPersonsJob(
        reader_factory=lambda: make_reader(write_people_csv(4)),
        writer=recording_writer,
        processor=lambda person: None,
        chunk_size=2,
        job_name=job_name,
    )

    result = job.launch()

    assert result.chunk_count == 0
    assert result.filter_count == 4
    assert metric_value("person_etl_chunks_total", job_name=job_name, status="committed") == 0
