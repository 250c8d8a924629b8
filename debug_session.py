#!/usr/bin/env python3
"""Debug script to inspect a content session and its approval requests"""

import asyncio
import sys

from content_agent.db.session import create_session_factory, dispose_engine, get_engine
from content_agent.services.sql_store import SqlSessionStore


async def debug_session(session_id: str):
    """Print what the session store knows about a session"""
    store = SqlSessionStore(create_session_factory(get_engine()))
    try:
        record = await store.load(session_id)
        if record is None:
            print(f"Session {session_id} not found")
            return

        print(f"\n=== Session Info ===")
        print(f"Session ID: {record.session_id}")
        print(f"Title: {record.title}")
        print(f"Status: {record.status}")
        print(f"Created At: {record.created_at}")
        print(f"Updated At: {record.updated_at}")
        print(f"Content Length: {len(record.content or '')} chars")
        print(f"Node History: {' -> '.join(record.metadata.get('node_history', []))}")
        if record.metadata.get("error"):
            print(f"Error: {record.metadata['error']}")

        print(f"\n=== Charts ({len(record.charts)}) ===")
        for chart in record.charts:
            print(f"  [{chart['position']}] {chart['id']} ({chart['chart_type']})")

        approvals = await store.list_approval_requests(session_id)
        print(f"\n=== Approval Requests ({len(approvals)}) ===")
        for approval in approvals:
            print(f"  {approval.id}: {approval.kind} -> {approval.status.value}")
            if approval.response:
                print(f"    Response: {approval.response}")
    finally:
        await dispose_engine()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python debug_session.py <session_id>")
        sys.exit(1)

    asyncio.run(debug_session(sys.argv[1]))
