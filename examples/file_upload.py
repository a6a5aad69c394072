#!/usr/bin/env python3
"""
File upload example.

Uploads an image and asks a question about it.

Usage:
    export DIFY_API_KEY="app-..."
    python examples/file_upload.py path/to/image.png
"""

import asyncio
import sys

from dify_lib_python import DifyClient, LoggingMiddleware, SinglePath
from dify_lib_python.telemetry import DifyLogger, LogLevel


async def main(path: str) -> None:
    """Run file upload example."""
    DifyLogger.configure(level=LogLevel.DEBUG)

    client = DifyClient.builder().middleware(LoggingMiddleware()).build()
    try:
        chat = client.chat()

        uploaded = (await chat.file_upload("example-user", SinglePath(path))).json()
        print(f"Uploaded {uploaded['name']} as {uploaded['id']}")

        response = await chat.send_message(
            "example-user",
            "What is in this picture?",
            files=[
                {
                    "type": "image",
                    "transfer_method": "local_file",
                    "upload_file_id": uploaded["id"],
                }
            ],
        )
        print(response.json()["answer"])
    finally:
        await client.close()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(main(sys.argv[1]))
