"""Block kinds produced while formatting a comment body.

Each kind knows the markup that closes one of its entries (``line_ender``),
the markup that closes the block as a whole (``tag_ender``) and, for list
kinds that can nest, the name used in the indentation wrapper tags
(``<BulletIndent1>`` ...).
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, Optional


class BlockTag(IntEnum):
    NEW = 0
    NONE = 1
    PARAGRAPH = 2
    BULLET_LIST = 3
    DESCRIPTION_LIST = 4
    ORDERED_LIST = 5
    HEADING = 6
    PREFIX_CODE = 7
    CODE = 8
    DITAA = 9
    DRAWING = 10
    MSCGEN = 11
    SDEDIT = 12
    ADMONITION = 13
    QUOTE = 14

    @property
    def line_ender(self) -> Optional[str]:
        """Closing markup for one list entry; None for kinds that do not nest."""
        return _LINE_ENDERS.get(self)

    @property
    def tag_ender(self) -> str:
        return _TAG_ENDERS.get(self, "")

    @property
    def description(self) -> Optional[str]:
        return _DESCRIPTIONS.get(self)

    @property
    def is_verbatim(self) -> bool:
        """True for blocks whose lines are collected until an end marker."""
        return self in _VERBATIM

    @property
    def escapes_content(self) -> bool:
        """True when verbatim content must have its markup characters escaped."""
        return self in (BlockTag.CODE, BlockTag.QUOTE, BlockTag.PREFIX_CODE)


_LINE_ENDERS: Dict[BlockTag, str] = {
    BlockTag.BULLET_LIST: "</li>",
    BlockTag.DESCRIPTION_LIST: "</dd>",
    BlockTag.ORDERED_LIST: "</li>",
}

_TAG_ENDERS: Dict[BlockTag, str] = {
    BlockTag.NEW: "",
    BlockTag.NONE: "",
    BlockTag.PARAGRAPH: "</p>",
    BlockTag.BULLET_LIST: "</ul>",
    BlockTag.DESCRIPTION_LIST: "</dl>",
    BlockTag.ORDERED_LIST: "</ol>",
    BlockTag.HEADING: "</h>",
    BlockTag.PREFIX_CODE: "</prefixcode>",
    BlockTag.CODE: "\n</code>",
    BlockTag.DITAA: "\n</ditaa>",
    BlockTag.DRAWING: "\n</drawing>",
    BlockTag.SDEDIT: "\n</sdedit>",
    BlockTag.MSCGEN: "\n</mscgen>",
    BlockTag.QUOTE: "\n</quote>",
}

_DESCRIPTIONS: Dict[BlockTag, str] = {
    BlockTag.BULLET_LIST: "Bullet",
    BlockTag.DESCRIPTION_LIST: "Desc",
    BlockTag.ORDERED_LIST: "Ordered",
}

_VERBATIM = frozenset(
    {
        BlockTag.CODE,
        BlockTag.QUOTE,
        BlockTag.DITAA,
        BlockTag.DRAWING,
        BlockTag.MSCGEN,
        BlockTag.SDEDIT,
    }
)


__all__ = ["BlockTag"]
