"""
Signature feature.

Freehand capture with midpoint-smoothed strokes, typed signatures in script
typefaces, and raster export that stays below the 25KB ingestion limit.
"""
