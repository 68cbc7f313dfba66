"""Tests for the pipeline CLI."""

from typing import Any, Dict, Optional, Union

import pytest
import yaml
from pydantic import BaseModel, Field

from taskpath.cli import PipelineCLI
from taskpath.config import DocRecord, PipelineConfigSchema, docrec_configuration_reader
from taskpath.locations import Loc
from taskpath.resources import VirtualFile, virtual_tree


@pytest.fixture
def cli():
    tree = virtual_tree({
        ("inputs", "table"): VirtualFile.for_reading(dict, ext="csv"),
        ("outputs", "report"): VirtualFile.for_writing(str, ext="md"),
        ("params", "threshold"): VirtualFile.embedded(float, default=0.5),
    })
    return PipelineCLI("demo", tree, Loc("/data"))


@pytest.fixture
def config_path(tmp_path):
    return str(tmp_path / "pipeline.yaml")


class Recorder:
    """Run function keeping what it was given."""

    def __init__(self, code=None):
        self.runs = []
        self.code = code

    def __call__(self, run):
        self.runs.append(run)
        return self.code


class TestCLIParser:
    """Tests for CLI argument parsing."""

    def test_parser_prog(self, cli):
        assert cli.create_parser().prog == "demo"

    def test_help_no_error(self, cli):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--help"])
        assert exc_info.value.code == 0

    def test_no_args_shows_help(self, cli):
        assert cli.main([]) == 0

    def test_version_command(self, cli, capsys):
        assert cli.main(["version"]) == 0
        assert "demo" in capsys.readouterr().out

    def test_subcommand_flags(self, cli):
        args = cli.create_parser().parse_args(
            ["run", "-c", "x.yaml", "-l", "/a=/b", "-d", "p._data=1", "-q"]
        )
        assert args.config == "x.yaml"
        assert args.config_overrides == ["locations./a=/b", "data.p._data=1"]
        assert args.quiet == 1


class TestWriteConfigTemplate:
    """Tests for the write-config-template command."""

    def test_writes_default_document(self, cli, config_path):
        assert cli.main(["write-config-template", "-c", config_path]) == 0
        with open(config_path) as f:
            doc = yaml.safe_load(f)
        assert doc["locations"] == {
            "/inputs/table": "/data/inputs/table.csv",
            "/outputs/report": "/data/outputs/report.md",
        }
        assert doc["data"] == {"params": {"threshold": {"_data": 0.5}}}

    def test_refuses_to_overwrite(self, cli, config_path, capsys):
        assert cli.main(["write-config-template", "-c", config_path]) == 0
        assert cli.main(["write-config-template", "-c", config_path]) == 1
        assert "already exists" in capsys.readouterr().err
        assert cli.main(["write-config-template", "-c", config_path, "--force"]) == 0


class TestShowLocations:
    """Tests for the show-locations command."""

    def test_default_locations(self, cli, config_path, capsys):
        assert cli.main(["show-locations", "-c", config_path]) == 0
        out = capsys.readouterr().out
        assert "/inputs/table: /data/inputs/table.csv - reading" in out
        assert "threshold" not in out

    def test_location_override(self, cli, config_path, capsys):
        code = cli.main(["show-locations", "-c", config_path, "-l", "/inputs/table=/other/t.tsv"])
        assert code == 0
        assert "/inputs/table: /other/t.tsv - reading" in capsys.readouterr().out

    def test_unmapped_resource_listed(self, cli, config_path, capsys):
        with open(config_path, "w") as f:
            f.write("locations:\n  /inputs/table: /a/t.csv\n")
        assert cli.main(["show-locations", "-c", config_path]) == 0
        captured = capsys.readouterr()
        assert "/outputs/report: null" in captured.out
        assert "/outputs/report" in captured.err


class TestRun:
    """Tests for the run command."""

    def test_run_receives_resolved_pipeline(self, cli, config_path):
        recorder = Recorder()
        assert cli.main(["run", "-c", config_path], run=recorder) == 0
        (run,) = recorder.runs
        assert isinstance(run.config, PipelineConfigSchema)
        table = run.locations.lookup(("inputs", "table")).node
        assert table.layers[0].to_text() == "/data/inputs/table.csv"
        assert run.locations.lookup(("params", "threshold")) is None
        assert run.data == {("params", "threshold"): 0.5}

    def test_embedded_override(self, cli, config_path):
        recorder = Recorder()
        argv = ["run", "-c", config_path, "-d", "params.threshold._data=0.9"]
        assert cli.main(argv, run=recorder) == 0
        assert recorder.runs[0].data[("params", "threshold")] == 0.9

    def test_root_location_from_file(self, cli, config_path):
        with open(config_path, "w") as f:
            f.write("locations: /mnt/run2\n")
        recorder = Recorder()
        assert cli.main(["run", "-c", config_path], run=recorder) == 0
        table = recorder.runs[0].locations.lookup(("inputs", "table")).node
        assert table.layers[0].to_text() == "/mnt/run2/inputs/table.csv"
        assert recorder.runs[0].data[("params", "threshold")] == 0.5

    def test_run_exit_code(self, cli, config_path):
        assert cli.main(["run", "-c", config_path], run=Recorder(code=3)) == 3

    def test_no_run_function(self, cli, config_path, capsys):
        assert cli.main(["run", "-c", config_path]) == 1
        assert "no run function" in capsys.readouterr().err

    def test_bad_override_fails(self, cli, config_path, capsys):
        recorder = Recorder()
        assert cli.main(["run", "-c", config_path, "-o", "nope.deep=1"], run=recorder) == 1
        assert "unknown nested field" in capsys.readouterr().err
        assert recorder.runs == []

    def test_new_field_warning_logged(self, cli, config_path, capsys):
        recorder = Recorder()
        assert cli.main(["run", "-c", config_path, "-o", "extra=1"], run=recorder) == 0
        assert "beware of typos" in capsys.readouterr().err
        assert recorder.runs[0].config.section("extra") == 1

    def test_quiet_hides_warnings(self, cli, config_path, capsys):
        argv = ["run", "-c", config_path, "-qq", "-o", "extra=1"]
        assert cli.main(argv, run=Recorder()) == 0
        assert "beware of typos" not in capsys.readouterr().err

    def test_invalid_config_file(self, cli, config_path, capsys):
        with open(config_path, "w") as f:
            f.write("{ invalid yaml [")
        assert cli.main(["run", "-c", config_path], run=Recorder()) == 1
        assert "Configuration error" in capsys.readouterr().err


class RunSettings(BaseModel):
    locations: Union[str, Dict[str, Optional[str]]] = Field(
        "/data", description="Root location or table of locations"
    )
    data: Dict[str, Any] = Field(default_factory=dict, description="Embedded values")
    workers: int = Field(4, description="Number of worker processes")


class TestRunWithRecordReader:
    """Tests for the run command with a typed record reader."""

    @pytest.fixture
    def record_cli(self, cli):
        return PipelineCLI(
            "demo", cli.tree, Loc("/data"), reader=docrec_configuration_reader(RunSettings)
        )

    def test_file_values_are_used(self, record_cli, config_path):
        with open(config_path, "w") as f:
            f.write("locations: /mnt/run3\nworkers: 2\n")
        recorder = Recorder()
        assert record_cli.main(["run", "-c", config_path], run=recorder) == 0
        (run,) = recorder.runs
        assert isinstance(run.config, DocRecord)
        assert run.config["workers"] == 2
        table = run.locations.lookup(("inputs", "table")).node
        assert table.layers[0].to_text() == "/mnt/run3/inputs/table.csv"
        assert run.data == {("params", "threshold"): 0.5}

    def test_flags_beat_file(self, record_cli, config_path):
        with open(config_path, "w") as f:
            f.write("locations: /mnt/run3\nworkers: 2\n")
        recorder = Recorder()
        argv = [
            "run", "-c", config_path,
            "--locations", "/cli/root",
            "--workers", "8",
            "--data", "{params: {threshold: {_data: 0.9}}}",
        ]
        assert record_cli.main(argv, run=recorder) == 0
        (run,) = recorder.runs
        assert run.config["workers"] == 8
        table = run.locations.lookup(("inputs", "table")).node
        assert table.layers[0].to_text() == "/cli/root/inputs/table.csv"
        assert run.data[("params", "threshold")] == 0.9

    def test_default_document_without_file(self, record_cli, config_path, capsys):
        assert record_cli.main(["show-locations", "-c", config_path]) == 0
        assert "/outputs/report: /data/outputs/report.md - writing" in capsys.readouterr().out
