"""
Markdown result rendering

- Converts completion output (CommonMark + tables) into HTML fragments
- Tags every code construct as InlineCode or FencedCode from the token stream
- Fenced blocks carry a copy button whose payload is the exact code text
- Raw HTML in model output is escaped, never passed through
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml, unescapeAll

from qa_toolkit.models.generation import replace_lone_surrogates

SCRIPT_LANGUAGE = "javascript"
FENCE = "```"


@dataclass(frozen=True)
class InlineCode:
    text: str


@dataclass(frozen=True)
class FencedCode:
    language: str
    text: str


CodeFragment = Union[InlineCode, FencedCode]


@dataclass
class RenderedArtifact:
    raw_text: str
    html: str
    fragments: List[CodeFragment] = field(default_factory=list)

    @property
    def code_blocks(self) -> List[FencedCode]:
        return [fragment for fragment in self.fragments if isinstance(fragment, FencedCode)]


def _fence_language(info: str) -> str:
    normalized = unescapeAll(info or "").strip()
    return normalized.split()[0] if normalized else ""


def _fence_text(content: str) -> str:
    # The parser terminates every fenced line with "\n"; drop only the final one
    return content[:-1] if content.endswith("\n") else content


def _render_code_inline(self, tokens, idx, options, env) -> str:
    return f'<code class="inline-code">{escapeHtml(tokens[idx].content)}</code>'


def _render_fence(self, tokens, idx, options, env) -> str:
    token = tokens[idx]
    language = _fence_language(token.info)
    code = _fence_text(token.content)
    class_attr = f' class="language-{escapeHtml(language)}"' if language else ""
    return (
        '<div class="code-block">'
        f'<button type="button" class="copy-btn" data-copy="{escapeHtml(code)}">Copy</button>'
        f"<pre><code{class_attr}>{escapeHtml(code)}</code></pre>"
        "</div>\n"
    )


class ResultRenderer:
    def __init__(self):
        self._md = MarkdownIt("commonmark", {"html": False}).enable(["table", "strikethrough"])
        self._md.add_render_rule("code_inline", _render_code_inline)
        self._md.add_render_rule("fence", _render_fence)
        self._md.add_render_rule("code_block", _render_fence)

    def extract_fragments(self, text: str) -> List[CodeFragment]:
        fragments: List[CodeFragment] = []
        for token in self._md.parse(text or ""):
            if token.type in ("fence", "code_block"):
                fragments.append(
                    FencedCode(language=_fence_language(token.info), text=_fence_text(token.content))
                )
            elif token.type == "inline":
                for child in token.children or []:
                    if child.type == "code_inline":
                        fragments.append(InlineCode(text=child.content))
        return fragments

    def render(self, text: str) -> RenderedArtifact:
        source = replace_lone_surrogates(text or "")
        return RenderedArtifact(
            raw_text=source,
            html=self._md.render(source),
            fragments=self.extract_fragments(source),
        )


def wrap_as_script_block(code: str, language: str = SCRIPT_LANGUAGE) -> str:
    return f"{FENCE}{language}\n{code}\n{FENCE}"


def strip_script_fence(text: str, language: str = SCRIPT_LANGUAGE) -> str:
    """Undo wrap_as_script_block; text without the exact prefix and suffix is returned as-is."""
    prefix = f"{FENCE}{language}\n"
    suffix = f"\n{FENCE}"
    if text.startswith(prefix) and text.endswith(suffix) and len(text) >= len(prefix) + len(suffix):
        return text[len(prefix):len(text) - len(suffix)]
    return text


def strip_code_fences(content: str) -> str:
    """Remove every surrounding fence a model added despite being told not to."""
    normalized = (content or "").strip()
    while normalized.startswith(FENCE):
        lines = normalized.splitlines()
        if len(lines) < 2 or lines[-1].strip() != FENCE:
            break
        normalized = "\n".join(lines[1:-1]).strip("\n")
    return normalized


_renderer: Optional[ResultRenderer] = None


def get_result_renderer() -> ResultRenderer:
    global _renderer
    if _renderer is None:
        _renderer = ResultRenderer()
    return _renderer
