"""Policy document assistant.

Uploads a policy document to a remote document-aware agent backend,
provisions an agent for it and relays chat turns, while keeping a
diagnostic record of every remote call.
"""

__version__ = "0.1.0"
