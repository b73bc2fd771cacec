"""
Tests for the inference job, the JSON report writer and the command line runner.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

import run_schema_inference
from schema_sampler.clients.base_store import StoredDocument
from schema_sampler.core.base_job import JobStatus
from schema_sampler.core.config import InferenceConfig, TargetIdentity, resolve_credential
from schema_sampler.core.errors import ConfigurationError, TransportError
from schema_sampler.jobs.schema_inference_job import SchemaInferenceJob
from schema_sampler.models import SchemaSnapshot
from schema_sampler.output.report_writer import default_output_path, write_snapshot

from .fakes import FailingDocumentStore, InMemoryDocumentStore

TARGET = TargetIdentity(project_id='demo-project', database_id='main')


def items_store():
    return InMemoryDocumentStore(
        collections={'items': [
            StoredDocument('d1', {'a': {'integerValue': '5'}, 'b': {'stringValue': 'x'}}),
            StoredDocument('d2', {'a': {'doubleValue': 7.2}, 'b': {'nullValue': None}}),
        ]},
        subcollections={None: ['items']},
    )


@pytest.fixture
def clean_env(monkeypatch):
    for name in ('FIREBASE_PROJECT_ID', 'FIRESTORE_DATABASE_ID', 'FIRESTORE_API_TOKEN',
                 'FIRESTORE_EMULATOR_HOST', 'GOOGLE_APPLICATION_CREDENTIALS'):
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the runner tests
    monkeypatch.setattr(run_schema_inference, 'load_dotenv', lambda: False)


def test_job_writes_report(tmp_path):
    out = tmp_path / 'reports' / 'schema.json'
    job = SchemaInferenceJob('schema_inference', InferenceConfig(target=TARGET), items_store(),
                             {'output_path': str(out)})

    result = job.execute()

    assert result.status == JobStatus.SUCCESS
    assert result.collections_visited == 1
    assert result.documents_sampled == 2
    assert result.fields_observed == 2
    assert result.metadata['output_path'] == str(out)

    report = json.loads(out.read_text(encoding='utf-8'))
    assert set(report) == {'targetIdentity', 'collectedAt', 'collections'}
    assert report['targetIdentity'] == {'projectId': 'demo-project', 'database': 'main'}
    assert report['collections']['items'] == {
        'fields': {
            'a': {'count': 2, 'types': ['number'], 'samples': [5, 7.2]},
            'b': {'count': 2, 'types': ['string', 'null'], 'samples': ['x', None]},
        },
        'totalSampled': 2,
    }


def test_failed_run_writes_nothing(tmp_path):
    out = tmp_path / 'schema.json'
    store = FailingDocumentStore('items', TransportError("HTTP 500 Internal Server Error - boom", status=500),
                                 subcollections={None: ['items']})
    job = SchemaInferenceJob('schema_inference', InferenceConfig(target=TARGET), store,
                             {'output_path': str(out)})

    result = job.execute()

    assert result.status == JobStatus.FAILED
    assert 'HTTP 500' in result.error_message
    assert isinstance(result.error, TransportError)
    assert result.end_time is not None
    assert job.snapshot is None
    assert not out.exists()


def test_invalid_config_fails_job_before_store_access(tmp_path):
    store = items_store()
    job = SchemaInferenceJob('schema_inference', InferenceConfig(target=TARGET, sample_size=0), store,
                             {'output_path': str(tmp_path / 'schema.json')})

    result = job.execute()

    assert result.status == JobStatus.FAILED
    assert isinstance(result.error, ConfigurationError)
    assert store.subcollection_calls == []


def test_job_result_to_dict():
    job = SchemaInferenceJob('schema_inference', InferenceConfig(target=TARGET, sample_size=0), items_store())
    data = job.execute().to_dict()

    assert data['status'] == 'failed'
    assert data['success'] is False
    assert data['duration_seconds'] >= 0


def test_default_output_path():
    assert default_output_path(TARGET, now_ms=1700000000000) == Path(
        'firestore-schema-demo-project-main-1700000000000.json'
    )


def test_write_snapshot_uses_default_name(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    snapshot = SchemaSnapshot(target=TARGET, collected_at=datetime(2024, 1, 1, tzinfo=timezone.utc))

    path = write_snapshot(snapshot)

    assert path.name.startswith('firestore-schema-demo-project-main-')
    assert json.loads((tmp_path / path).read_text(encoding='utf-8')) == {
        'targetIdentity': {'projectId': 'demo-project', 'database': 'main'},
        'collectedAt': '2024-01-01T00:00:00+00:00',
        'collections': {},
    }


def test_resolve_credential_prefers_argument(monkeypatch):
    monkeypatch.setenv('FIRESTORE_API_TOKEN', 'from-env')
    assert resolve_credential('from-arg') == 'from-arg'
    assert resolve_credential(None) == 'from-env'


def test_resolve_credential_missing(clean_env):
    with pytest.raises(ConfigurationError):
        resolve_credential(None)


def test_resolve_credential_from_gcloud(clean_env):
    with patch('schema_sampler.core.config.subprocess.run') as run:
        run.return_value.stdout = 'ya29.token\n'
        assert resolve_credential(None, use_gcloud=True) == 'ya29.token'


def test_resolve_credential_gcloud_missing(clean_env):
    with patch('schema_sampler.core.config.subprocess.run', side_effect=FileNotFoundError('gcloud')):
        with pytest.raises(ConfigurationError, match="gcloud"):
            resolve_credential(None, use_gcloud=True)


def test_cli_success(tmp_path, clean_env, capsys):
    out = tmp_path / 'schema.json'
    with patch.object(run_schema_inference, 'create_store', return_value=items_store()):
        code = run_schema_inference.main([
            '--project', 'demo-project', '--token', 't', '--out', str(out), '--sample', '5',
        ])

    assert code == 0
    assert f"Wrote schema to {out}" in capsys.readouterr().out
    assert json.loads(out.read_text(encoding='utf-8'))['collections']['items']['totalSampled'] == 2


def test_cli_missing_project(clean_env, capsys):
    assert run_schema_inference.main(['--token', 't']) == 1
    assert 'Failed: Missing project' in capsys.readouterr().err


def test_cli_missing_token(clean_env, capsys):
    assert run_schema_inference.main(['--project', 'demo-project']) == 1
    assert 'Failed: Missing token' in capsys.readouterr().err


def test_cli_invalid_sample_size(clean_env, capsys):
    assert run_schema_inference.main(['--project', 'demo-project', '--token', 't', '--sample', '0']) == 1
    assert 'Sample size' in capsys.readouterr().err


def test_cli_transport_failure(tmp_path, clean_env, capsys):
    store = FailingDocumentStore('items', TransportError("HTTP 503 Service Unavailable - down", status=503),
                                 subcollections={None: ['items']})
    out = tmp_path / 'schema.json'
    with patch.object(run_schema_inference, 'create_store', return_value=store):
        code = run_schema_inference.main(['--project', 'demo-project', '--out', str(out)])

    assert code == 1
    assert 'Failed: HTTP 503' in capsys.readouterr().err
    assert not out.exists()


def test_cli_builds_rest_client_from_environment(clean_env, monkeypatch):
    monkeypatch.setenv('FIRESTORE_API_TOKEN', 'env-token')
    args = run_schema_inference.build_parser().parse_args(['--request-timeout', '30'])

    store = run_schema_inference.create_store(args, TARGET)

    assert store.session.headers['Authorization'] == 'Bearer env-token'
    assert store.request_timeout == 30


def test_cli_rejects_non_positive_request_timeout(clean_env, capsys):
    code = run_schema_inference.main(['--project', 'demo-project', '--token', 't', '--request-timeout', '0'])

    assert code == 1
    assert 'Failed: Request timeout must be positive' in capsys.readouterr().err


def test_cli_admin_backend_with_missing_credentials_file(tmp_path, clean_env, monkeypatch, capsys):
    monkeypatch.setenv('GOOGLE_APPLICATION_CREDENTIALS', str(tmp_path / 'missing.json'))
    out = tmp_path / 'schema.json'

    code = run_schema_inference.main(['--project', 'demo-project', '--backend', 'admin', '--out', str(out)])

    assert code == 1
    assert 'Failed:' in capsys.readouterr().err
    assert not out.exists()


def _reject_constant(name):
    raise ValueError(f"non-standard JSON constant {name}")


def test_report_is_strict_json_with_non_finite_doubles(tmp_path):
    store = InMemoryDocumentStore(
        collections={'metrics': [
            StoredDocument('m1', {'x': {'doubleValue': 'NaN'}, 'y': {'doubleValue': 'Infinity'}}),
        ]},
        subcollections={None: ['metrics']},
    )
    out = tmp_path / 'schema.json'
    job = SchemaInferenceJob('schema_inference', InferenceConfig(target=TARGET), store,
                             {'output_path': str(out)})

    assert job.execute().success

    report = json.loads(out.read_text(encoding='utf-8'), parse_constant=_reject_constant)
    fields = report['collections']['metrics']['fields']
    assert fields['x'] == {'count': 1, 'types': ['number'], 'samples': [None]}
    assert fields['y'] == {'count': 1, 'types': ['number'], 'samples': [None]}
