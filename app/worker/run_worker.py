"""Run ARQ worker. Usage: python -m app.worker.run_worker"""

from arq import run_worker
from arq.cron import cron

from app.worker.tasks import get_redis_settings, shutdown, startup, sweep_expired_posts, sweep_minutes


class WorkerSettings:
    redis_settings = get_redis_settings()
    functions = [sweep_expired_posts]
    cron_jobs = [
        cron(sweep_expired_posts, minute=sweep_minutes(), second=0, run_at_startup=True),
    ]
    on_startup = startup
    on_shutdown = shutdown


def main() -> None:
    run_worker(WorkerSettings)


if __name__ == "__main__":
    main()
