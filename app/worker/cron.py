"""Cron: delete posts whose 24h window has passed."""

from app.services import lifecycle


async def run_sweep_expired_posts() -> int:
    """Run one expiry sweep; returns posts deleted. Expects init_db to have run (worker startup)."""
    return await lifecycle.sweep_expired()
