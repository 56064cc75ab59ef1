"""
paramtweak - runtime parameter tweak engine.

Query and set named, typed server parameters from text, with strict
validation and all-or-nothing application.
"""

__version__ = "0.1.0"
