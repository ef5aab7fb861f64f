import json
import logging
import shutil
from pathlib import Path

import pytest
from click.testing import CliRunner

from ogm_schema_to_ts.ogm_schema_to_ts import ogm_schema_to_ts

TEST_DATA = Path(__file__).parent / "test_data"


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("ogm_schema_to_ts")
    logger.setLevel(logging.NOTSET)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


@pytest.fixture
def schema_path(tmp_path):
    path = tmp_path / "task_schema.json"
    shutil.copy(TEST_DATA / "task_schema.json", path)
    return path


def _run(*args):
    return CliRunner().invoke(ogm_schema_to_ts, [str(a) for a in args])


def test_nodes_to_stdout(schema_path):
    result = _run(schema_path)

    assert result.exit_code == 0, result.output
    assert "// Generated by ogm_schema_to_ts v" in result.output
    assert "export interface Task extends Base {" in result.output
    assert not (schema_path.parent / "nodes.ts").exists()


def test_resources_to_directory(schema_path, tmp_path):
    out_dir = tmp_path / "generated"

    result = _run("--resources", "--out", out_dir, schema_path)

    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in out_dir.iterdir()) == ["nodes.ts", "options.ts", "resources.ts"]
    assert "Generated nodes.ts, resources.ts, options.ts" in result.output
    assert "export interface TaskResource extends AbstractResource<" in (out_dir / "resources.ts").read_text()


def test_default_output_directory_is_next_to_the_schema(schema_path):
    result = _run("-r", schema_path)

    assert result.exit_code == 0, result.output
    assert (schema_path.parent / "nodes.ts").exists()
    assert (schema_path.parent / "resources.ts").exists()


def test_options_json(schema_path, tmp_path):
    out_dir = tmp_path / "generated"

    result = _run("-r", "--options-json", "-o", out_dir, schema_path)

    assert result.exit_code == 0, result.output
    options = json.loads((out_dir / "options.json").read_text())
    assert options["TaskResource"]["info"]["pivot_key"] == "task"


def test_missing_schema_file(tmp_path):
    result = _run(tmp_path / "missing.json")

    assert result.exit_code == 1
    assert "Failed to load schema" in result.output


def test_no_force_refuses_to_overwrite(schema_path, tmp_path):
    out_dir = tmp_path / "generated"
    assert _run("-r", "-o", out_dir, schema_path).exit_code == 0

    result = _run("-r", "--no-force", "-o", out_dir, schema_path)

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_strict_resources(tmp_path):
    schema = {
        "components": {
            "schemas": {
                "Task": {"_malevich_ogm_node": {"name": "Task"}, "properties": {"uid": {"type": "string"}}},
                "TaskResource": {"_resource": {"type": "proxy", "info": {"mounts": []}}, "properties": {}},
            }
        }
    }
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(schema))

    lenient = _run("-r", "-o", tmp_path / "lenient", path)
    assert lenient.exit_code == 0, lenient.output
    assert "Omitting resource" in lenient.output
    assert not (tmp_path / "lenient" / "resources.ts").exists()

    strict = _run("-r", "--strict", "-o", tmp_path / "strict", path)
    assert strict.exit_code == 1
    assert "Invalid resource metadata for 'TaskResource'" in strict.output
    assert not (tmp_path / "strict").exists()


def test_config_file(schema_path, tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"add_generation_comment": False, "inline_aliases": False}))

    result = _run("--config", config_path, schema_path)

    assert result.exit_code == 0, result.output
    assert "// Generated" not in result.output
    assert "export interface Base {" in result.output
    assert 'export type TodoOrDone = "todo" | "done"' in result.output


def test_invalid_config_file(schema_path, tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text("{not json")

    result = _run("-c", config_path, schema_path)

    assert result.exit_code == 1
    assert "Failed to load config" in result.output


def test_quiet_and_verbose(schema_path, tmp_path):
    verbose = _run("-vv", "-r", "-o", tmp_path / "verbose", schema_path)
    assert verbose.exit_code == 0, verbose.output
    assert "DEBUG" in verbose.output

    quiet = _run("-q", "-r", "-o", tmp_path / "quiet", schema_path)
    assert quiet.exit_code == 0, quiet.output
    assert "INFO" not in quiet.output
