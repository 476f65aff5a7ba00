"""
ColorMatch Colors Module

Converts pixels to HSV, classifies them into hue/shade buckets, merges the
buckets and evaluates color harmony between the dominant ones.
"""

__version__ = "1.0.0"
