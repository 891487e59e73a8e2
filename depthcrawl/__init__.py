"""
depthcrawl

A depth-bounded, concurrent web crawler that stores page text and
downloads embedded media.
"""

__version__ = "1.0.0"
__description__ = "Depth-bounded concurrent web crawler with text extraction and media harvesting"
