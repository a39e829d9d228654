# edge_engage/auth/__init__.py
"""
Authentication modules for Edge Engage.

This package contains:
- identity.py: Canonical authenticated identity model
- session.py: Session-cookie identity provider queried by the session gate
- consent.py: Pure OAuth consent decisions (redirect computation)
"""
from edge_engage.auth.identity import Identity

__all__ = ["Identity"]
