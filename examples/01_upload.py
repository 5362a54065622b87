"""
Upload a file to Swarm
"""
import asyncio
from swarmpy import SwarmClient


async def main():
    async with SwarmClient() as swarm:

        # Batch id comes from SWARM_BATCH_ID or config.json
        if not swarm.batch_id:
            swarm.set_batch_id("your-postage-batch-id")

        # Simple upload, wait for the network to sync
        result = await swarm.start_file_upload("document.pdf").wait()
        print(f"Uploaded: {result.reference} (synced: {result.synced})")

        # Upload with custom name and progress
        session = swarm.start_file_upload("photo.jpg", name="vacation_2024.jpg")
        session.on('progress', lambda p: print(f"{p.label}: {p.percent:.1f}%"))
        result = await session.wait()
        print(f"Uploaded as {result.name}: {result.reference}")


if __name__ == "__main__":
    asyncio.run(main())
