import signal
import time

from django.conf import settings
from django.core.management.base import BaseCommand

from bankroll.exceptions import RoundStillOpen
from crash.redis_lock import LockHeartbeat, LockLost, RedisKeeperLock
from crash.rounds import current_round, open_next_round

LOCK_KEY = "crash:round-keeper"


class Command(BaseCommand):
    help = "Open the next crash round whenever betting on the current one has closed"

    def add_arguments(self, parser):
        parser.add_argument(
            "--lock-ttl",
            type=int,
            default=settings.ROUND_KEEPER_LOCK_TTL,
            help="Lock TTL in seconds",
        )
        parser.add_argument(
            "--heartbeat-interval",
            type=float,
            default=5,
            help="Lock renewal interval in seconds (default: 5)",
        )
        parser.add_argument(
            "--poll-interval",
            type=float,
            default=1,
            help="Seconds between round checks (default: 1)",
        )
        parser.add_argument(
            "--max-iterations",
            type=int,
            default=0,
            help="Stop after this many checks; 0 runs until signalled",
        )

    def handle(self, *args, **options):
        lock = RedisKeeperLock(LOCK_KEY, options["lock_ttl"])

        if not lock.acquire():
            self.stdout.write(self.style.WARNING("[KEEPER] Another keeper is running. Exiting."))
            return

        self.stdout.write(self.style.SUCCESS("[KEEPER] Lock acquired."))

        heartbeat = LockHeartbeat(lock, every_seconds=options["heartbeat_interval"])
        running = True

        def shutdown(*_):
            nonlocal running
            running = False
            self.stdout.write(self.style.WARNING("[KEEPER] Shutdown requested."))

        previous = {
            sig: signal.signal(sig, shutdown) for sig in (signal.SIGINT, signal.SIGTERM)
        }

        iterations = 0
        try:
            while running:
                heartbeat.tick()

                round_obj = current_round()
                if not round_obj.is_betting():
                    try:
                        round_obj = open_next_round()
                    except RoundStillOpen:
                        # a player opened it first
                        pass
                    else:
                        self.stdout.write(
                            self.style.SUCCESS(f"[KEEPER] Opened round {round_obj.round_id}")
                        )

                iterations += 1
                if options["max_iterations"] and iterations >= options["max_iterations"]:
                    break

                time.sleep(options["poll_interval"])

        except LockLost as e:
            self.stdout.write(self.style.ERROR(f"[KEEPER] {e}. Another instance may have taken over."))

        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)
            lock.release()
            self.stdout.write(self.style.SUCCESS("[KEEPER] Lock released. Keeper stopped."))
