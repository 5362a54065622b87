"""
Detach from an upload and check on it later
"""
import asyncio
from swarmpy import SwarmClient, SessionState


async def main():
    async with SwarmClient() as swarm:
        session = swarm.create_session("large_file.zip")

        # Stop watching as soon as the tag exists
        def on_state(state):
            if state is SessionState.TRANSFERRING:
                session.detach()

        session.on('state', on_state)
        result = await session.start().wait()
        print(f"Detached from tag {result.handle}")

        # The payload keeps going; the reference is still recorded
        await session.settled()
        print(f"Recorded: {swarm.get_record(result.handle).reference}")

        # List everything the node knows about
        for transfer in await swarm.list_known_transfers():
            status = transfer.status
            print(f"{transfer.handle:>6} {transfer.name:<30} {status.sync_percent:>3}%")


if __name__ == "__main__":
    asyncio.run(main())
