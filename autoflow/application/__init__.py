"""Application layer: ports (protocols), DTOs, and use cases.

Depends on the domain only; infrastructure implementations are wired in
the API composition root.
"""
