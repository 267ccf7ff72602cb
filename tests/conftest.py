"""Pytest configuration and fixtures for context-analyzer tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest

from context_analyzer.models import SourceFile


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch):
    """Point the user-level config at an empty location for every test."""
    monkeypatch.setattr("context_analyzer.config.USER_CONFIG_FILE", tmp_path / "no-config.toml")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_crate_path() -> Path:
    """Get path to the sample Rust crate."""
    return Path(__file__).parent / "fixtures" / "sample_crate"


@pytest.fixture
def make_project(temp_dir: Path) -> Callable[[Dict[str, str]], Path]:
    """Write a {relative path: source} mapping into a fresh project root."""

    def _make(files: Dict[str, str]) -> Path:
        for rel, text in files.items():
            path = temp_dir / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return temp_dir

    return _make


@pytest.fixture
def make_source() -> Callable[..., SourceFile]:
    """Build an in-memory SourceFile."""

    def _make(text: str, rel_path: str = "lib.rs") -> SourceFile:
        return SourceFile(path=Path(rel_path), rel_path=rel_path, text=text)

    return _make


@pytest.fixture
def sample_rust_code() -> str:
    """Sample Rust code for testing extraction."""
    return '''//! Sample module for testing.

/// Say hello.
pub fn hello(name: &str) -> String {
    format!("Hello, {}!", name)
}

pub struct Calculator;

impl Calculator {
    pub fn add(&self, a: i32, b: i32) -> i32 {
        a + b
    }

    pub fn multiply(&self, a: i32, b: i32) -> i32 {
        let mut result = self.add(a, 0); // call to add {
        for _ in 0..b - 1 {
            result = self.add(result, a);
        }
        result
    }
}

trait Shape {
    fn area(&self) -> f64;
    fn describe(&self) -> String {
        format!("area {}", self.area())
    }
}
'''
