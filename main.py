#!/usr/bin/env python3
"""
Block Cursor - Infrastructure Test

This script tests the connection to your node's JSON-RPC WebSocket endpoint.

Usage:
    python main.py
"""

import asyncio
import logging
import sys

from config import settings
from blockcursor.blockchain import EthRPCClient, RPCError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def test_infrastructure() -> bool:
    """
    Test the infrastructure setup:
    1. Connect to the node
    2. Query chain ID and head
    3. Verify connection health
    """
    print("=" * 60)
    print("Block Cursor - Infrastructure Test")
    print("=" * 60)
    print()

    print(f"RPC URL: {settings.rpc_url}")
    print()

    client = EthRPCClient(
        url=settings.rpc_url,
        username=settings.rpc_username,
        password=settings.rpc_password,
    )

    # Test 1: Connection
    print("[1/3] Testing node connection...")
    if not await client.connect():
        print("❌ FAILED: Could not connect to node")
        print()
        print("Troubleshooting:")
        print("  1. Is the node running with WebSocket RPC enabled?")
        print(f"  2. Is it accessible at {settings.rpc_url}?")
        print("  3. Check firewall/network settings")
        return False
    print("✅ Connected to node")

    try:
        # Test 2: Chain ID and head
        print()
        print("[2/3] Querying chain ID and head...")
        chain_id = await client.chain_id()
        head = await client.header_by_number()
        print(f"✅ Chain ID: {chain_id}")
        print(f"   Head: {head.number:,}")
        print(f"   Hash: {head.hash[:18]}...")

        # Test 3: Health check
        print()
        print("[3/3] Running health check...")
        health = await client.health_check()
        if health["status"] == "healthy":
            print("✅ Health check passed")
        else:
            print(f"⚠️  Health check: {health}")

        print()
        print("=" * 60)
        print("✅ All infrastructure tests passed!")
        print("=" * 60)
        print()
        print("Next: python sync_blocks.py --start <height>")
        print()

        return True

    except RPCError as e:
        print(f"❌ Error during testing: {e}")
        logger.exception("Test failed with exception")
        return False

    finally:
        await client.disconnect()


async def main():
    """Main entry point"""
    success = await test_infrastructure()
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
