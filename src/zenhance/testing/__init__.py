"""Test utilities for zenhance applications::

    from zenhance.testing import TestClient
"""

from zenhance.testing.client import TestClient

__all__ = ["TestClient"]
