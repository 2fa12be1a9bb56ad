"""autoflow: trigger-action workflow execution service.

Users connect third-party apps and define workflows of the form "when X happens
in app A, perform actions in apps B, C...". This package holds the execution
engine, its persistence, and the HTTP surface around it.
"""
