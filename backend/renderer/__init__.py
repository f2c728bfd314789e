"""Document conversion: page text in, HTML out"""
from .formats import Format
from .pandoc import ConversionError, PandocRenderer, Renderer

__all__ = ["ConversionError", "Format", "PandocRenderer", "Renderer"]
