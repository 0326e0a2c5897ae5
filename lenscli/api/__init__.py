"""
Control Plane API.

Typed HTTP facade (client.py), wire models (models.py) and the
sequential cluster fan-out (fanout.py).
"""

from lenscli.api.client import LensesClient

__all__ = ["LensesClient"]
