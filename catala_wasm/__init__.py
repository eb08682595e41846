"""Static bundle builder for the Catala tree-sitter parsers and web interpreter."""

__version__ = "0.1.0"
