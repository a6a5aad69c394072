#!/usr/bin/env python3
"""
Streaming chat example.

Streams a chat answer as it is generated, then continues the same
conversation with a blocking request.

Usage:
    export DIFY_API_KEY="app-..."
    export DIFY_BASE_URI="https://api.dify.ai/v1"  # optional
    python examples/streaming_chat.py
"""

import asyncio

from dify_lib_python import ApiError, DifyClient
from dify_lib_python.client import ChatResult


async def main() -> None:
    """Run streaming chat example."""
    async with DifyClient() as client:
        chat = client.chat()

        print("Streaming response:\n")
        print("-" * 50)

        async with await chat.send_message_stream(
            "example-user", "Tell me a very short story about a robot learning to paint."
        ) as stream:
            async for text in stream.text():
                print(text, end="", flush=True)

        print("\n" + "-" * 50)
        print(f"Conversation: {stream.conversation_id}")
        if usage := stream.metadata.get("usage"):
            print(f"Tokens: {usage.get('total_tokens')}")

        # Follow-up in the same conversation
        try:
            response = await chat.send_message(
                "example-user",
                "Give it a title.",
                conversation_id=stream.conversation_id,
            )
        except ApiError as e:
            print(f"Request failed ({e.status_code}): {e.message}")
            return

        result = ChatResult.from_blocking(response.json())
        print(f"\nTitle: {result.answer}")


if __name__ == "__main__":
    asyncio.run(main())
