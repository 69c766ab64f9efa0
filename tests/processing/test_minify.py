from __future__ import annotations

from embedgen.processing.minify import _MINIFIERS, minify, minify_html


def test_minify_css() -> None:
    result = minify("body {\n    color: red;\n}\n/* note */\n", ".css")

    assert "\n" not in result
    assert "color:red" in result
    assert "note" not in result


def test_minify_js() -> None:
    result = minify("// helper\nfunction add(a, b) {\n    return a + b;\n}\n", ".js")

    assert "\n" not in result
    assert "helper" not in result
    assert "return a+b" in result


def test_minify_html_collapses_whitespace_and_comments() -> None:
    html = """
    <html>
      <!-- navigation -->
      <body>
        <p>Hello   world</p>
      </body>
    </html>
    """

    result = minify_html(html)

    assert result == "<html> <body> <p>Hello world</p> </body> </html>"


def test_minify_html_keeps_preformatted_blocks() -> None:
    html = "<div>\n  <pre>  a\n   b</pre>\n</div>"

    assert minify_html(html) == "<div> <pre>  a\n   b</pre> </div>"


def test_minify_html_keeps_space_between_inline_elements() -> None:
    html = "<p>Hello <b>big</b>\n   <i>world</i></p>"

    assert minify_html(html) == "<p>Hello <b>big</b> <i>world</i></p>"


def test_minify_html_minifies_inline_style_and_script() -> None:
    html = "<style>\n  p {\n    margin: 0;\n  }\n</style>\n<script>\n  var x = 1;\n</script>"

    result = minify_html(html)

    assert "\n" not in result
    assert "margin:0" in result
    assert "var x=1" in result


def test_minify_html_keeps_conditional_comments() -> None:
    html = "<!--[if IE]><p>old</p><![endif]-->"

    assert minify_html(html) == html


def test_minify_html_leaves_non_javascript_scripts() -> None:
    html = '<script type="text/template">\n  <b>  {{ name }}  </b>\n</script>'

    assert minify_html(html) == html


def test_minify_ignores_other_extensions() -> None:
    assert minify("a   b\n", ".txt") == "a   b\n"


def test_minify_returns_original_when_minifier_fails(monkeypatch) -> None:
    def _boom(content: str) -> str:
        raise ValueError("bad input")

    monkeypatch.setitem(_MINIFIERS, ".css", _boom)

    assert minify("body { color: red }", ".css") == "body { color: red }"


def test_minify_returns_original_when_result_is_empty(monkeypatch) -> None:
    monkeypatch.setitem(_MINIFIERS, ".js", lambda content: "")

    assert minify("var a = 1;", ".js") == "var a = 1;"
