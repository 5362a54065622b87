"""
Upload a static website as a collection
"""
import asyncio
from swarmpy import SwarmClient


async def main():
    async with SwarmClient() as swarm:

        # Preview before uploading
        scan = swarm.scan_directory("site")
        print(f"{scan.file_count} files, {scan.total_size} bytes")
        print(f"Index document: {scan.entry_point or '(none)'}")

        session = swarm.start_directory_upload("site", name="my-site")
        session.on('state', lambda state: print(f"State: {state.value}"))
        result = await session.wait()
        print(f"bzz://{result.reference}")


if __name__ == "__main__":
    asyncio.run(main())
