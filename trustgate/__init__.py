"""
trustgate

Trust-and-resilience boundary for calls to remote AI text-generation services:
rate limiting, circuit breaking, secret encryption, request signing,
certificate pinning, and validation of everything that comes back (responses,
user text, uploaded documents).
"""

__version__ = "1.0.0"
