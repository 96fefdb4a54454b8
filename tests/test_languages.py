"""Tests for language strategies and symbol presentation."""

import pytest

from callgraph_cli.languages import DefaultLanguage, Go, Jsts, Rust, language_handler
from callgraph_cli.models import Outline, SymbolKind
from callgraph_cli.tables import CssClass


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Go", Go),
        ("rust", Rust),
        ("TypeScript JSX", Jsts),
        ("javascript", Jsts),
        ("python", DefaultLanguage),
        ("", DefaultLanguage),
    ],
)
def test_language_handler(name, expected):
    assert type(language_handler(name)) is expected


def test_go_excludes_test_files():
    go = Go()
    assert go.should_exclude("pkg/cart_test.go")
    assert not go.should_exclude("pkg/cart.go")
    assert not DefaultLanguage().should_exclude("pkg/cart_test.go")


def test_rust_hides_tests_module(make_symbol):
    outline = Outline(
        id=1,
        path="src/lib.rs",
        symbols=[
            make_symbol("parse", start=(0, 0), end=(5, 0)),
            make_symbol("tests", SymbolKind.MODULE, start=(10, 0), end=(40, 0), children=[make_symbol("it_parses", start=(12, 4), end=(15, 0))]),
            make_symbol("helpers", SymbolKind.MODULE, start=(50, 0), end=(60, 0)),
        ],
    )

    table = Rust().file_repr(outline)

    assert [c.title for c in table.sections] == ["parse", "helpers"]


def test_jsts_hides_anonymous_functions(make_symbol):
    outline = Outline(
        id=1,
        path="web/app.ts",
        symbols=[
            make_symbol("render", start=(0, 0), end=(20, 0), children=[
                make_symbol("<function>", start=(2, 0), end=(3, 0)),
                make_symbol("map() callback", start=(4, 0), end=(5, 0)),
                make_symbol("format", start=(6, 0), end=(7, 0)),
            ]),
        ],
    )

    table = Jsts().file_repr(outline)

    assert [c.title for c in table.sections[0].children] == ["format"]


def test_constants_and_variables_are_hidden(make_symbol):
    outline = Outline(
        id=3,
        path="/repo/pkg/limits.py",
        symbols=[
            make_symbol("MAX", SymbolKind.CONSTANT, start=(0, 0), end=(0, 9)),
            make_symbol("cache", SymbolKind.VARIABLE, start=(1, 0), end=(1, 9)),
            make_symbol("Limits", SymbolKind.ENUM, start=(2, 0), end=(6, 0), children=[
                make_symbol("LOW", SymbolKind.ENUM_MEMBER, start=(3, 4), end=(3, 12)),
            ]),
        ],
    )

    table = DefaultLanguage().file_repr(outline)

    assert table.title == "limits.py"
    assert table.path == "/repo/pkg/limits.py"
    assert [c.title for c in table.sections] == ["Limits"]
    assert table.sections[0].children == []


@pytest.mark.parametrize(
    "kind, icon, first_class",
    [
        (SymbolKind.FUNCTION, None, CssClass.FUNCTION),
        (SymbolKind.METHOD, None, CssClass.METHOD),
        (SymbolKind.CONSTRUCTOR, None, CssClass.CONSTRUCTOR),
        (SymbolKind.INTERFACE, None, CssClass.INTERFACE),
        (SymbolKind.MODULE, None, CssClass.MODULE),
        (SymbolKind.CLASS, "C", CssClass.TYPE),
        (SymbolKind.STRUCT, "S", CssClass.TYPE),
        (SymbolKind.FIELD, "f", CssClass.PROPERTY),
    ],
)
def test_presentation(make_symbol, kind, icon, first_class):
    style = DefaultLanguage().presentation(make_symbol("x", kind))

    assert style.icon == icon
    assert style.classes[0] == first_class


def test_unknown_kind_has_plain_style(make_symbol):
    style = DefaultLanguage().presentation(make_symbol("KEY", SymbolKind.KEY))

    assert style.classes == []
    assert style.icon is None
