"""Text form of lifecycle rules.

This package compiles the compact rule strings used on the command line into
Rule models and renders Rule models back into that form.
"""

from .compiler import compile_rule
from .fingerprint import fingerprint
from .formatter import format_rule, render_effects, rule_id

__all__ = ["compile_rule", "fingerprint", "format_rule", "render_effects", "rule_id"]
