"""
Markdown to structured document conversion.

Handles the subset of Markdown the generation prompt asks for: headings,
paragraphs, fenced code, bullet and numbered lists, horizontal rules and
inline bold / italic / code / links. Two extra directives are recognised:

- charts, either as a fenced block tagged ``chart`` holding JSON, or as a
  ``<div data-type="graph" data-graph-data='...' data-config='...'>`` tag
- images, as ``![alt](url)``
"""

from content_agent.agents.state import ChartData
from content_agent.schemas.document import (
    BulletList,
    ChartBlock,
    CodeBlock,
    Document,
    Heading,
    HorizontalRule,
    ImageBlock,
    ListItem,
    Mark,
    OrderedList,
    Paragraph,
    TextNode,
)
from typing import List, Optional, Tuple
import html
import json
import logging
import re

logger = logging.getLogger(__name__)

_FENCE_OPEN_RE = re.compile(r"^\s*```\s*([\w+#.-]*)\s*$")
_FENCE_CLOSE_RE = re.compile(r"^\s*```\s*$")
_HEADING_RE = re.compile(r"^\s{0,3}(#{1,6})\s+(.*?)\s*#*\s*$")
_RULE_RE = re.compile(r"^\s*(?:(?:-\s*){3,}|(?:\*\s*){3,}|(?:_\s*){3,})$")
_BULLET_RE = re.compile(r"^\s*[-*+]\s+(.*)$")
_ORDERED_RE = re.compile(r"^\s*(\d+)[.)]\s+(.*)$")
_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)\s]+)(?:\s+\"[^\"]*\")?\)")
_GRAPH_DIV_RE = re.compile(
    r"<div\b[^>]*\bdata-type\s*=\s*[\"']graph[\"'][^>]*>\s*(?:</div>)?",
    re.IGNORECASE,
)
_ATTR_RE = re.compile(r"([\w-]+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")
_INLINE_RE = re.compile(
    r"(?P<code>`(?P<code_text>[^`]+)`)"
    r"|(?P<link>\[(?P<link_text>[^\]]+)\]\((?P<href>[^)\s]+)\))"
    r"|(?P<bold>\*\*(?P<bold_star>.+?)\*\*|__(?P<bold_under>.+?)__)"
    r"|(?P<italic>\*(?P<italic_star>[^*\s][^*]*?)\*|(?<!\w)_(?P<italic_under>[^_\s][^_]*?)_(?!\w))"
)


def parse_inline(text: str) -> List[TextNode]:
    """Split ``text`` into text nodes carrying inline marks."""
    nodes: List[TextNode] = []
    position = 0
    for match in _INLINE_RE.finditer(text):
        if match.start() > position:
            nodes.append(TextNode(text=text[position:match.start()]))

        if match.group("code"):
            nodes.append(TextNode(text=match.group("code_text"), marks=[Mark(type="code")]))
        elif match.group("link"):
            nodes.append(TextNode(
                text=match.group("link_text"),
                marks=[Mark(type="link", href=match.group("href"))],
            ))
        elif match.group("bold"):
            inner = match.group("bold_star") or match.group("bold_under")
            nodes.append(TextNode(text=inner, marks=[Mark(type="bold")]))
        else:
            inner = match.group("italic_star") or match.group("italic_under")
            nodes.append(TextNode(text=inner, marks=[Mark(type="italic")]))

        position = match.end()

    if position < len(text):
        nodes.append(TextNode(text=text[position:]))
    return nodes


class MarkdownFormatter:
    """Single-use converter; call :meth:`format` once per instance."""

    def __init__(self):
        self.blocks: list = []
        self.charts: List[ChartData] = []
        self._paragraph: List[str] = []

    def format(self, text: str) -> Tuple[Document, List[ChartData]]:
        lines = (text or "").replace("\r\n", "\n").split("\n")
        i = 0
        while i < len(lines):
            line = lines[i]

            fence = _FENCE_OPEN_RE.match(line)
            if fence:
                self._flush_paragraph()
                body = []
                i += 1
                while i < len(lines) and not _FENCE_CLOSE_RE.match(lines[i]):
                    body.append(lines[i])
                    i += 1
                i += 1  # closing fence, or end of text for an unterminated block
                self._add_fenced_block(fence.group(1) or None, "\n".join(body))
                continue

            if not line.strip():
                self._flush_paragraph()
                i += 1
                continue

            heading = _HEADING_RE.match(line)
            if heading:
                self._flush_paragraph()
                self.blocks.append(Heading(
                    level=len(heading.group(1)),
                    content=parse_inline(heading.group(2)),
                ))
                i += 1
                continue

            if _RULE_RE.match(line):
                self._flush_paragraph()
                self.blocks.append(HorizontalRule())
                i += 1
                continue

            if _GRAPH_DIV_RE.search(line):
                self._flush_paragraph()
                self._add_line_with_graph_divs(line)
                i += 1
                continue

            if _BULLET_RE.match(line):
                self._flush_paragraph()
                items = []
                while i < len(lines) and _BULLET_RE.match(lines[i]) and not _RULE_RE.match(lines[i]):
                    items.append(ListItem(content=parse_inline(_BULLET_RE.match(lines[i]).group(1))))
                    i += 1
                self.blocks.append(BulletList(items=items))
                continue

            ordered = _ORDERED_RE.match(line)
            if ordered:
                self._flush_paragraph()
                items = []
                while i < len(lines) and _ORDERED_RE.match(lines[i]):
                    items.append(ListItem(content=parse_inline(_ORDERED_RE.match(lines[i]).group(2))))
                    i += 1
                self.blocks.append(OrderedList(start=int(ordered.group(1)), items=items))
                continue

            self._paragraph.append(line.strip())
            i += 1

        self._flush_paragraph()
        return Document(content=self.blocks), self.charts

    # ── Blocks ──

    def _flush_paragraph(self) -> None:
        if self._paragraph:
            self._add_text(" ".join(self._paragraph))
            self._paragraph = []

    def _add_text(self, text: str) -> None:
        """Add paragraphs for ``text``, pulling images out into their own blocks."""
        position = 0
        for match in _IMAGE_RE.finditer(text):
            self._add_paragraph(text[position:match.start()])
            self.blocks.append(ImageBlock(src=match.group(2), alt=match.group(1)))
            position = match.end()
        self._add_paragraph(text[position:])

    def _add_paragraph(self, text: str) -> None:
        text = text.strip()
        if text:
            self.blocks.append(Paragraph(content=parse_inline(text)))

    def _add_fenced_block(self, language: Optional[str], code: str) -> None:
        if language and language.lower() == "chart":
            try:
                spec = json.loads(code)
            except ValueError as e:
                logger.warning(f"Ignoring chart directive with invalid JSON: {e}")
                spec = None
            if isinstance(spec, dict):
                self._add_chart(spec)
                return
        self.blocks.append(CodeBlock(language=language, code=code))

    def _add_line_with_graph_divs(self, line: str) -> None:
        position = 0
        for match in _GRAPH_DIV_RE.finditer(line):
            self._add_text(line[position:match.start()])
            self._add_graph_div(match.group(0))
            position = match.end()
        self._add_text(line[position:])

    def _add_graph_div(self, tag: str) -> None:
        attrs = {
            name.lower(): html.unescape(double or single)
            for name, double, single in _ATTR_RE.findall(tag)
        }
        try:
            data = json.loads(attrs.get("data-graph-data") or "[]")
            config = json.loads(attrs.get("data-config") or "{}")
        except ValueError as e:
            logger.warning(f"Ignoring graph directive with invalid JSON: {e}")
            self.blocks.append(CodeBlock(language="html", code=tag))
            return

        if not isinstance(config, dict):
            config = {}
        self._add_chart({
            "id": attrs.get("data-id"),
            "type": attrs.get("data-chart-type") or config.get("type"),
            "data": data,
            "config": config,
        })

    def _add_chart(self, spec: dict) -> None:
        config = dict(spec.get("config") or {})
        if spec.get("title") and "title" not in config:
            config["title"] = spec["title"]

        chart_id = str(spec.get("id") or f"chart-{len(self.charts) + 1}")
        self.charts.append({
            "id": chart_id,
            "chart_type": str(spec.get("type") or spec.get("chart_type") or "bar"),
            "data": spec.get("data", []),
            "config": config,
            "position": len(self.blocks),
        })
        self.blocks.append(ChartBlock(chart_id=chart_id))


def markdown_to_document(text: str) -> Tuple[Document, List[ChartData]]:
    return MarkdownFormatter().format(text)
