"""Clear cached rules and rate-limit counters from Redis (useful for testing)."""

import asyncio

from b2b_manager.state.manager import StateManager

PATTERNS = ["auto_tagging_rules:*", "rate_limit:*"]


async def reset_all_state() -> None:
    """Remove app keys from Redis."""
    print("\n⚠️  WARNING: This will delete cached rules and rate-limit counters!")
    response = input("Are you sure? (yes/no): ")

    if response.lower() != "yes":
        print("Cancelled.")
        return

    print("\nResetting state...")

    state_manager = StateManager()
    await state_manager.connect()

    for pattern in PATTERNS:
        deleted = await state_manager.delete_pattern(pattern)
        print(f"  ✓ {pattern}: {deleted} keys")

    await state_manager.disconnect()

    print("✓ State cleared from Redis\n")


if __name__ == "__main__":
    asyncio.run(reset_all_state())
