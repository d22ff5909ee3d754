"""
Datacenter simulation result precalculation.

Runs the four phase orchestrators over the configured trace dates, aggregates
their raw output into canonical result documents and persists them for the
serving layer.
"""

VERSION = "1.0.0"
__version__ = VERSION
