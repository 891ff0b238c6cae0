from noise_patterns.stylesheet import flatten_rules, render_stylesheet
from noise_patterns.utils import class_selector, escape_class_name, format_opacity


def test_escape_class_name():
    assert escape_class_name("noise-subtle") == "noise-subtle"
    assert escape_class_name("noise-[128,20]") == "noise-\\[128\\,20\\]"
    assert class_selector("noise-opacity-[0.5]") == ".noise-opacity-\\[0\\.5\\]"


def test_format_opacity():
    assert format_opacity(5) == "0.05"
    assert format_opacity(0) == "0"
    assert format_opacity(100) == "1"


def test_flatten_rules():
    rules = flatten_rules(".noise", {
        "--noise-mean": "128",
        "&::before": {"content": '""'},
        "> *": {"z-index": "10"},
    })
    assert rules == [
        {"selector": ".noise", "declarations": [("--noise-mean", "128")]},
        {"selector": ".noise::before", "declarations": [("content", '""')]},
        {"selector": ".noise > *", "declarations": [("z-index", "10")]},
    ]


def test_render_stylesheet():
    css = render_stylesheet([
        (".noise", {"position": "relative", "&::before": {"background-repeat": "repeat"}}),
        (".noise-opacity-10", {"--noise-opacity": "0.1"}),
    ])
    assert css.startswith("/* Generated by noise-patterns")
    assert ".noise {\n  position: relative;\n}\n" in css
    assert ".noise::before {\n  background-repeat: repeat;\n}\n" in css
    assert ".noise-opacity-10 {\n  --noise-opacity: 0.1;\n}" in css
