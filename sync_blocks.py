#!/usr/bin/env python3
"""Walk a block range in batches and report what was covered."""

import argparse
import asyncio
import logging
import signal
import sys

from config import settings
from blockcursor.blockchain import EthRPCClient, RPCError
from blockcursor.sync import (
    BatchProcessor,
    BlockBatchIterator,
    BlockIteratorError,
    IterationCancelledError,
    IteratorConfig,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def sync_blocks(args: argparse.Namespace) -> bool:
    """Iterate the requested range until done or interrupted."""
    client = EthRPCClient(
        url=settings.rpc_url,
        username=settings.rpc_username,
        password=settings.rpc_password,
    )
    if not await client.connect():
        print("❌ Failed to connect to node")
        return False

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, stop.set)

    try:
        processor = BatchProcessor(
            client=None if args.reverse else client,
            rewind_depth=settings.reorg_rewind_depth,
            max_batches=args.max_batches,
        )
        iterator = await BlockBatchIterator.create(
            IteratorConfig(
                client=client,
                start_height=args.start,
                end_height=args.end,
                on_blocks=processor,
                blocks_read_per_epoch=args.batch_size or settings.blocks_read_per_epoch,
                reverse=args.reverse,
                reorg_rewind_depth=settings.reorg_rewind_depth,
                retry_interval=settings.retry_interval,
                max_retries=settings.max_retries,
            ),
            stop_event=stop,
        )

        direction = "reverse" if args.reverse else "forward"
        print(f"Chain {iterator.chain_id}: {direction} from {args.start} to {args.end if args.end is not None else 'head'}")
        print()

        await iterator.iter()

        print()
        print("=" * 60)
        print("Summary")
        print("=" * 60)
        print(f"Batches processed: {processor.stats['batches_processed']}")
        print(f"Blocks covered: {processor.stats['blocks_covered']}")
        print(f"Reorgs detected: {processor.stats['reorgs_detected']}")
        print(f"Cursor: {iterator.current}")
        return True

    except IterationCancelledError as e:
        print(f"\nStopped: {e}")
        return False
    except (BlockIteratorError, RPCError) as e:
        print(f"❌ Error: {e}")
        logger.exception("Sync failed")
        return False
    finally:
        loop.remove_signal_handler(signal.SIGINT)
        await client.disconnect()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--start", type=int, required=True, help="First block height")
    parser.add_argument("--end", type=int, default=None, help="Last block height (default: follow head)")
    parser.add_argument("-b", "--batch-size", type=int, default=None, help="Blocks per batch")
    parser.add_argument("--reverse", action="store_true", help="Walk from end down to start (needs --end)")
    parser.add_argument("-n", "--max-batches", type=int, default=None, help="Stop after N batches")
    return parser.parse_args()


if __name__ == "__main__":
    success = asyncio.run(sync_blocks(parse_args()))
    sys.exit(0 if success else 1)
