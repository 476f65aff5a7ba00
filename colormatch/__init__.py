"""
ColorMatch

Outfit color analysis: classifies the dominant colors of a garment photo into
hue/shade buckets and decides whether they form a harmonious combination.
"""

__version__ = "1.0.0"
