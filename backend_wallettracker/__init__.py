"""
Backend Wallet Tracker — mock crypto wallet tracker API and resilient client.

Flat-file JSON store with synthetic seed data, a FastAPI server that injects
random faults, and an asyncio client whose fetchers retry with exponential
backoff to ride out those faults.
"""

__version__ = "0.1.0"
