"""Test data helpers shared across test modules."""

USER_1 = "0b8a6c1e-4d2f-4a7b-9c3e-5f6a7b8c9d01"
USER_2 = "7e1d2c3b-4a5f-4e6d-8c7b-9a0b1c2d3e04"


async def create_transactions(store, user_id, amounts, currencies=("usd",)):
    """Create one transaction per amount, cycling through currencies."""
    created = []
    for i, amount in enumerate(amounts):
        created.append(
            await store.create(user_id, amount, currencies[i % len(currencies)])
        )
    return created
