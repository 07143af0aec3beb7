"""Terminal rendering of change-detection results.

Modules
-------
renderer
    ``SelectionRenderer`` turns ``GroupSelection``, ``PersistReport`` and
    stored ``FingerprintEntry`` lists into Rich renderables.
"""
