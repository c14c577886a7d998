"""prdesc: PR本文をセクション単位で更新するツール。"""

from prdesc.errors import InvalidIdentifier, MalformedSection
from prdesc.patcher import find_sections, patch, read_section

__all__ = [
    "InvalidIdentifier",
    "MalformedSection",
    "find_sections",
    "patch",
    "read_section",
]

__version__ = "0.1.0"
