"""
Presentation layer for Drive Handoff.

Exposes the session broker over HTTP.
"""
