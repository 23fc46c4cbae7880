"""
Documentation Macro-Expander

Expands version placeholders, groups multi-language code tabs and validates
cross-document references across a Markdown/MDX documentation corpus.
Produces deterministic, fully-checked output or a complete error report.
"""

__version__ = "0.1.0"
