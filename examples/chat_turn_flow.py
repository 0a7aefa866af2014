"""
Example: One chat turn through soulbond-memory

Demonstrates:
1. Checking the user's chat quota for their plan
2. Scoring the turn and storing it when it is significant
3. Retrieving memories for the next prompt
4. Rate limit response headers

Runs without external services (SQLite file + in-memory counters).
Set REDIS_URL to share counters through Redis, and QDRANT_HOST plus
OPENAI_API_KEY to enable semantic search.
"""

import asyncio
import logging

from soulbond_memory import MemoryContext, SentimentAnalysis, UserProfile
from soulbond_memory.config import MemoryEngineSettings
from soulbond_memory.factory import create_memory_service, create_rate_limiter_suite
from soulbond_memory.ratelimit import rate_limit_headers


async def main():
    logging.basicConfig(level=logging.INFO)
    settings = MemoryEngineSettings.from_env()

    suite = create_rate_limiter_suite(settings)
    service = create_memory_service(settings)

    quota = suite.check_chat("user_42", plan="free")
    print(f"Chat allowed: {quota.success} (headers: {rate_limit_headers(quota)})")
    if not quota.success:
        return

    context = MemoryContext(
        user_id="user_42",
        content="Please remember this: my sister is getting married in June!",
        response="That's wonderful news, tell me everything!",
        sentiment=SentimentAnalysis(primary_emotion="joy", emotional_intensity=7),
        conversation_history=[{"role": "user"}] * 12,
        user_profile=UserProfile(trust_level=25),
    )

    record = await service.score_and_maybe_store(context)
    if record is None:
        print("Turn was not significant enough to remember")
    else:
        print(f"Stored {record.type} memory ({record.significance:.1f}): {record.keywords}")

    for item in await service.retrieve_context("user_42", "How is my sister doing?"):
        print(f"- [{item.relevance_score:.2f}] {item.record.content.splitlines()[0]}")

    print(service.get_stats("user_42"))


if __name__ == "__main__":
    asyncio.run(main())
