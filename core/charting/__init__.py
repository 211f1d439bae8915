"""Chart specification compilation and export helpers.

Charts are described by plain JSON-serializable specifications produced by one
builder per chart type. This package contains the specification schema, the
builders and their registry, the memoizing compiler, export rules and the
editor-state snapshot codec.
"""
