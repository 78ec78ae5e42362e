"""
Template-based rendering.
"""

from .base import BaseRenderer, select_strategy
from .acroform import AcroFormTemplateRenderer, TemplateField

__all__ = [
    'BaseRenderer',
    'select_strategy',
    'AcroFormTemplateRenderer',
    'TemplateField',
]
