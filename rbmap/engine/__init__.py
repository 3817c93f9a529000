"""
Tree construction, validation and persistence.

Modules here are imported directly (``rbmap.engine.serializer``); the
package itself re-exports nothing so the tree engine can depend on the
builder without an import cycle.
"""
