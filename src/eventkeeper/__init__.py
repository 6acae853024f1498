"""EventKeeper — owner-scoped event tracking service.

Every authenticated principal records navigation/action events and may
read, change, or delete only the events it owns. Authentication is a
signed bearer token; authorization is an ownership check per record.
"""

__version__ = "0.1.0"
