"""Integration tests for the context-analyzer command."""

from pathlib import Path
from typer.testing import CliRunner

import pytest

from context_analyzer import __version__
from context_analyzer.cli import app


runner = CliRunner()


@pytest.fixture
def two_module_project(make_project) -> Path:
    return make_project({
        "a.rs": "fn foo() { bar(); }\n",
        "b.rs": "fn bar() {}\n",
    })


class TestExtract:
    """Tests for a successful extraction."""

    def test_writes_output_file(self, two_module_project: Path, temp_dir: Path):
        """The bundle holds each reachable function under its file header."""
        out = temp_dir / "out" / "bundle.txt"
        result = runner.invoke(app, [str(two_module_project), "foo", "", str(out)])

        assert result.exit_code == 0
        assert out.read_text(encoding="utf-8") == (
            "=== a.rs ===\n\nfn foo() { bar(); }\n\n=== b.rs ===\n\nfn bar() {}\n"
        )
        assert "Found 2 source files in project" in result.output
        assert "Selected function: a::foo" in result.output
        assert "Output written to:" in result.output

    def test_prints_to_stdout(self, two_module_project: Path):
        result = runner.invoke(app, [str(two_module_project), "bar"])

        assert result.exit_code == 0
        assert "=== b.rs ===" in result.output
        assert "fn foo()" not in result.output

    def test_sample_crate(self, sample_crate_path: Path, temp_dir: Path):
        out = temp_dir / "main.txt"
        result = runner.invoke(app, [str(sample_crate_path), "main", "", str(out)])

        assert result.exit_code == 0
        assert "Collected 11 function(s)" in result.output
        assert "Skipped 1 file(s)" in result.output
        assert out.read_text(encoding="utf-8").startswith("=== src/main.rs ===\n\n")

    def test_preferred_module(self, sample_crate_path: Path, temp_dir: Path):
        out = temp_dir / "new.txt"
        result = runner.invoke(app, [str(sample_crate_path), "new", "net::client", str(out)])

        assert result.exit_code == 0
        assert "Selected function: src::net::client::Session::new" in result.output
        assert "Session { open: false }" in out.read_text(encoding="utf-8")

    def test_extension_option(self, make_project):
        root = make_project({"lib.rsx": "fn alt() {}\n"})

        result = runner.invoke(app, [str(root), "alt", "--ext", "rsx"])

        assert result.exit_code == 0
        assert "=== lib.rsx ===" in result.output

    def test_exclude_option(self, make_project):
        root = make_project({"gen/a.rs": "fn alt() {}\n"})

        result = runner.invoke(app, [str(root), "alt", "-x", "gen"])

        assert result.exit_code == 3


class TestErrors:
    """Exit codes for each failure."""

    def test_missing_root(self, temp_dir: Path):
        result = runner.invoke(app, [str(temp_dir / "missing"), "foo"])

        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_not_found(self, two_module_project: Path):
        result = runner.invoke(app, [str(two_module_project), "nope"])

        assert result.exit_code == 3
        assert "not found" in result.output

    def test_not_found_suggestions(self, two_module_project: Path):
        result = runner.invoke(app, [str(two_module_project), "fo"])

        assert result.exit_code == 3
        assert "Did you mean" in result.output
        assert "a::foo" in result.output

    def test_ambiguous(self, make_project):
        root = make_project({"m1.rs": "fn foo() {}\n", "m2.rs": "fn foo() {}\n"})

        result = runner.invoke(app, [str(root), "foo"])

        assert result.exit_code == 4
        assert "Multiple implementations of 'foo' found:" in result.output
        assert "m1::foo (in m1)" in result.output
        assert "m2::foo (in m2)" in result.output
        assert "preferred module" in result.output

    def test_unwritable_output(self, two_module_project: Path):
        blocker = two_module_project / "blocker"
        blocker.write_text("")

        result = runner.invoke(app, [str(two_module_project), "foo", "", str(blocker / "out.txt")])

        assert result.exit_code == 1
        assert "Error writing output" in result.output


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
