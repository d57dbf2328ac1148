"""Topic records and the HCL reader that produces them."""

from __future__ import annotations

from .hcl import read_topics
from .model import Attribute, Comment, ConfigBlock, Pos, Property, Range, TopicRecord

__all__ = ["Attribute", "Comment", "ConfigBlock", "Pos", "Property", "Range", "TopicRecord", "read_topics"]
