from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from qa_toolkit.services.result_renderer import (
    FencedCode,
    InlineCode,
    ResultRenderer,
    strip_code_fences,
    strip_script_fence,
    wrap_as_script_block,
)


def test_fenced_block_is_tagged_with_language_and_exact_text():
    text = "# Title\n\n```javascript\npm.test(\"ok\", function () {});\n```\n"

    rendered = ResultRenderer().render(text)

    assert rendered.raw_text == text
    assert rendered.code_blocks == [
        FencedCode(language="javascript", text='pm.test("ok", function () {});')
    ]
    assert "<h1>Title</h1>" in rendered.html
    assert 'class="language-javascript"' in rendered.html
    assert 'class="copy-btn"' in rendered.html


def test_copy_payload_preserves_inner_blank_lines_and_indentation():
    code = "if (x)\n{\n\n    run();\n}"
    rendered = ResultRenderer().render(f"```js\n{code}\n```")

    assert rendered.code_blocks[0].text == code
    assert 'data-copy="if (x)\n{\n\n    run();\n}"' in rendered.html


def test_inline_code_is_distinguished_from_blocks():
    rendered = ResultRenderer().render("Use `pm.expect` here.\n\n```\nplain\n```")

    assert rendered.fragments == [InlineCode(text="pm.expect"), FencedCode(language="", text="plain")]
    assert '<code class="inline-code">pm.expect</code>' in rendered.html


def test_raw_html_in_model_output_is_escaped():
    rendered = ResultRenderer().render("<script>alert(1)</script>\n\n```\n<b>x</b>\n```")

    assert "<script>" not in rendered.html
    assert "&lt;script&gt;" in rendered.html
    assert "&lt;b&gt;x&lt;/b&gt;" in rendered.html


def test_tables_and_lists_render_as_html():
    rendered = ResultRenderer().render("| a | b |\n|---|---|\n| 1 | 2 |\n\n- one\n- two")

    assert "<table>" in rendered.html
    assert "<td>1</td>" in rendered.html
    assert "<li>one</li>" in rendered.html


def test_empty_text_renders_empty_artifact():
    rendered = ResultRenderer().render("")

    assert rendered.html == ""
    assert rendered.fragments == []


def test_wrapped_script_copies_back_to_the_original_code():
    script = 'pm.test("Status code is 200", function () {\n    pm.response.to.have.status(200);\n});'
    wrapped = wrap_as_script_block(script)

    assert wrapped == "```javascript\n" + script + "\n```"
    assert strip_script_fence(wrapped) == script
    assert ResultRenderer().render(wrapped).code_blocks[0].text == script


def test_strip_script_fence_leaves_unwrapped_text_alone():
    assert strip_script_fence("console.log(1);") == "console.log(1);"
    assert strip_script_fence("```python\nx\n```") == "```python\nx\n```"


def test_strip_code_fences_removes_one_surrounding_fence():
    assert strip_code_fences("```javascript\nvar a = 1;\n```") == "var a = 1;"
    assert strip_code_fences("  var a = 1;  ") == "var a = 1;"
    assert strip_code_fences("```javascript\nvar a = 1;") == "```javascript\nvar a = 1;"


def test_strip_code_fences_is_idempotent():
    once = strip_code_fences("```js\nvar a = 1;\n```")

    assert strip_code_fences(once) == once


def test_strip_code_fences_removes_nested_fences():
    assert strip_code_fences("```javascript\n```javascript\nfoo\n```\n```") == "foo"


def test_script_fence_strip_is_idempotent_after_model_cleanup():
    for reply in ("foo();", "```javascript\nfoo();\n```", "```javascript\n```javascript\nfoo();\n```\n```"):
        wrapped = wrap_as_script_block(strip_code_fences(reply))
        once = strip_script_fence(wrapped)

        assert once == "foo();"
        assert strip_script_fence(once) == once


def test_render_replaces_lone_surrogates():
    rendered = ResultRenderer().render("ok \ud800")

    assert rendered.raw_text == "ok ?"
    rendered.html.encode("utf-8")
