"""
Structured document produced by the format node.

A ``Document`` is a flat list of blocks; each block is tagged by its ``type``
so clients can dispatch on it without guessing. Inline text carries marks
(bold, italic, code, link).
"""

from pydantic import BaseModel, Field
from typing import Annotated, List, Literal, Optional, Union


class Mark(BaseModel):
    type: Literal["bold", "italic", "code", "link"]
    href: Optional[str] = None  # only set for links


class TextNode(BaseModel):
    type: Literal["text"] = "text"
    text: str
    marks: List[Mark] = Field(default_factory=list)


class Paragraph(BaseModel):
    type: Literal["paragraph"] = "paragraph"
    content: List[TextNode] = Field(default_factory=list)


class Heading(BaseModel):
    type: Literal["heading"] = "heading"
    level: int = Field(..., ge=1, le=6)
    content: List[TextNode] = Field(default_factory=list)


class CodeBlock(BaseModel):
    type: Literal["code_block"] = "code_block"
    language: Optional[str] = None
    code: str = ""


class ListItem(BaseModel):
    content: List[TextNode] = Field(default_factory=list)


class BulletList(BaseModel):
    type: Literal["bullet_list"] = "bullet_list"
    items: List[ListItem] = Field(default_factory=list)


class OrderedList(BaseModel):
    type: Literal["ordered_list"] = "ordered_list"
    start: int = 1
    items: List[ListItem] = Field(default_factory=list)


class HorizontalRule(BaseModel):
    type: Literal["horizontal_rule"] = "horizontal_rule"


class ChartBlock(BaseModel):
    type: Literal["chart"] = "chart"
    chart_id: str


class ImageBlock(BaseModel):
    type: Literal["image"] = "image"
    src: str
    alt: str = ""


Block = Annotated[
    Union[
        Paragraph,
        Heading,
        CodeBlock,
        BulletList,
        OrderedList,
        HorizontalRule,
        ChartBlock,
        ImageBlock,
    ],
    Field(discriminator="type"),
]


class Document(BaseModel):
    type: Literal["doc"] = "doc"
    content: List[Block] = Field(default_factory=list)
