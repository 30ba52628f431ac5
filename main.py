"""Bootstrap the registry MongoDB collection: wait for the server, then create, index and seed it once."""

import asyncio
import sys

from initdb.config import settings
from initdb.initializer import run


async def main() -> int:
    print(
        f"Initializing '{settings.database}.{settings.collection}' "
        f"on {settings.host}:{settings.port}"
    )
    code = await run(settings)
    print("Done.")
    return code


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
