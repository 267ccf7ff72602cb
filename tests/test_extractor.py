"""Tests for Rust function extraction."""

from pathlib import Path

import pytest

from context_analyzer.errors import ParseError
from context_analyzer.extractor import extract_functions, module_path_for
from context_analyzer.scanner import Scanner


def _by_name(definitions):
    return {d.name: d for d in definitions}


def test_extract_simple_function(make_source, sample_rust_code: str):
    """A free function is captured from its first signature character."""
    definitions = extract_functions(make_source(sample_rust_code, "src/shapes.rs"))
    hello = _by_name(definitions)["hello"]

    assert hello.text.startswith("pub fn hello(name: &str) -> String {")
    assert hello.text.endswith("}")
    assert hello.module_path == ("src", "shapes")
    assert hello.owner is None
    assert hello.symbol == "src::shapes::hello"
    assert hello.start_line == 4


def test_extract_impl_methods(make_source, sample_rust_code: str):
    """Methods carry their impl type as owner, not as a module segment."""
    definitions = _by_name(extract_functions(make_source(sample_rust_code, "src/shapes.rs")))

    assert definitions["add"].owner == "Calculator"
    assert definitions["add"].module_path == ("src", "shapes")
    assert definitions["multiply"].symbol == "src::shapes::Calculator::multiply"
    assert "// call to add {" in definitions["multiply"].text


def test_trait_declarations_are_skipped(make_source, sample_rust_code: str):
    """Trait methods without a body are not definitions; default methods are."""
    names = [d.name for d in extract_functions(make_source(sample_rust_code))]

    assert "area" not in names
    assert "describe" in names


def test_definitions_in_source_order(make_source, sample_rust_code: str):
    definitions = extract_functions(make_source(sample_rust_code))

    assert [d.name for d in definitions] == ["hello", "add", "multiply", "describe"]
    assert [d.start for d in definitions] == sorted(d.start for d in definitions)


def test_captured_text_is_balanced(sample_crate_path: Path, make_source):
    """Every captured definition re-scans cleanly and starts at its signature."""
    for path in sorted((sample_crate_path / "src").rglob("*.rs")):
        if path.name == "broken.rs":
            continue
        source = make_source(path.read_text(encoding="utf-8"), path.name)
        for definition in extract_functions(source):
            Scanner(definition.text)  # raises ParseError if unbalanced
            assert source.text[definition.start:definition.end] == definition.text
            assert definition.text.lstrip() == definition.text


def test_signature_variants(make_source):
    code = '''
pub(crate) async fn fetch() {}
const unsafe fn raw() {}
pub extern "C" fn exported(x: i32) -> i32 { x }
fn generic<T: Into<String>, F: Fn(u8) -> u8>(t: T, f: F) -> [u8; 4] where T: Clone { [0; 4] }
fn iter_items() -> impl Iterator<Item = u8> { vec![1].into_iter() }
'''
    definitions = _by_name(extract_functions(make_source(code)))

    assert set(definitions) == {"fetch", "raw", "exported", "generic", "iter_items"}
    assert definitions["fetch"].text == "pub(crate) async fn fetch() {}"
    assert definitions["exported"].text.startswith('pub extern "C" fn exported')
    assert definitions["generic"].text.endswith("{ [0; 4] }")
    # `impl` in a return type never opens an impl scope.
    assert definitions["iter_items"].owner is None


def test_fn_inside_comments_and_strings_ignored(make_source):
    code = '''
// fn commented() {}
/* fn blocked() {} */
fn real() {
    let s = "fn fake() {}";
}
'''
    names = [d.name for d in extract_functions(make_source(code))]
    assert names == ["real"]


def test_inline_modules(make_source):
    code = '''
pub mod outer {
    pub fn a() {}
    mod inner {
        fn b() {}
    }
    fn c() {}
}
fn d() {}
'''
    definitions = _by_name(extract_functions(make_source(code, "src/lib.rs")))

    assert definitions["a"].module_path == ("src", "outer")
    assert definitions["b"].module_path == ("src", "outer", "inner")
    assert definitions["c"].module_path == ("src", "outer")
    assert definitions["d"].module_path == ("src",)


def test_nested_functions_get_synthetic_segment(make_source):
    code = '''
fn outer() {
    fn helper() {}
    helper();
}

impl Widget {
    fn render(&self) {
        fn pad() {}
    }
}
'''
    definitions = _by_name(extract_functions(make_source(code, "ui.rs")))

    assert definitions["helper"].module_path == ("ui", "<outer>")
    assert definitions["helper"].symbol == "ui::<outer>::helper"
    assert definitions["pad"].module_path == ("ui", "<Widget::render>")
    assert definitions["pad"].owner is None
    assert "fn helper() {}" in definitions["outer"].text


def test_impl_owner_forms(make_source):
    code = '''
impl<T: Debug> fmt::Display for Wrapper<T> where T: Clone {
    fn fmt(&self) {}
}
impl<'a> Iterator for &'a mut Cursor {
    fn next(&mut self) {}
}
trait Visitor: Sized + Debug {
    fn visit(&self) {}
}
'''
    definitions = _by_name(extract_functions(make_source(code)))

    assert definitions["fmt"].owner == "Wrapper"
    assert definitions["next"].owner == "Cursor"
    assert definitions["visit"].owner == "Visitor"


def test_unbalanced_file_raises(make_source):
    with pytest.raises(ParseError):
        extract_functions(make_source("fn broken() {\n    if x {\n}\n", "broken.rs"))


@pytest.mark.parametrize(
    "rel_path, expected",
    [
        ("a.rs", ("a",)),
        ("src/net/client.rs", ("src", "net", "client")),
        ("src/net/mod.rs", ("src", "net")),
        ("src/lib.rs", ("src",)),
        ("lib.rs", ("lib",)),
        ("src\\win\\path.rs", ("src", "win", "path")),
    ],
)
def test_module_path_for(rel_path, expected):
    assert module_path_for(rel_path) == expected
