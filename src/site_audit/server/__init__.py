"""HTTP surface for Site Audit.

Serve with ``site-audit serve`` (Starlette app on uvicorn).
"""

from __future__ import annotations


def _check_deps() -> None:
    """Raise a clear error if the server dependencies are missing."""
    missing = []
    try:
        import starlette  # noqa: F401
    except ImportError:
        missing.append("starlette")
    try:
        import uvicorn  # noqa: F401
    except ImportError:
        missing.append("uvicorn")

    if missing:
        raise ImportError(
            f"Missing server dependencies: {', '.join(missing)}. "
            "Install with: pip install site-audit"
        )
