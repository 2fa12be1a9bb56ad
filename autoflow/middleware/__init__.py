"""HTTP middleware. Applied in autoflow.main (first added = outermost)."""

from autoflow.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
