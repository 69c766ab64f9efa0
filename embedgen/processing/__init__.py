"""File-content transformation: token substitution, inclusion, minification, escaping."""

from .inliner import TemplateInliner
from .minify import minify
from .transformer import ContentTransformer, generate_identifier

__all__ = [
    "ContentTransformer",
    "TemplateInliner",
    "generate_identifier",
    "minify",
]
