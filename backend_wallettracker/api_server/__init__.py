"""
API server package — HTTP/REST interface.

Exposes wallet listing, creation, sync and deletion plus a health probe.
Delegates to the service layer; a fault-injection middleware rejects a
fraction of requests to exercise client retry paths.
"""
