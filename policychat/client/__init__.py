"""Client for the remote document-aware agent backend.

Usage:
    from policychat.audit import DiagnosticLog
    from policychat.client import PolicyBackendClient

    log = DiagnosticLog()
    async with PolicyBackendClient(base_url, token="...", log=log) as client:
        object_name = await client.store_document(pdf_bytes, "application/pdf")
        agent_id = await client.provision_agent(instructions, "HR Policy Assistant")
        reply = await client.send_query(agent_id, "What is the meal allowance?")
        await client.delete_resource(object_name)
"""

from policychat.client.client import PolicyBackendClient
from policychat.client.models import StoreDocumentRequest

__all__ = ["PolicyBackendClient", "StoreDocumentRequest"]
