from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class RegionLink:
    text: str
    url: Optional[str]  # None when the anchor has no href


@dataclass
class RegionHeading:
    """A bold block on the Free TV page that groups region anchors."""
    text: str
    anchors: List[Tuple[str, Optional[str]]] = field(default_factory=list)  # (text, resolved url or None)
