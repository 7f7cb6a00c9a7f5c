"""
starnav - Star system hierarchy reconstruction and hazard-aware route planning.

Subpackages:
- system: classification, hierarchy building, queries, validation
- alerts: hazard reports, safety scoring, decay and throttling
- routing: point-to-point route planning and alternative search
- api: HTTP layer over a loaded system snapshot
"""

__version__ = "0.1.0"
__author__ = "Starnav Project"
