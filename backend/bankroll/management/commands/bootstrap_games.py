from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from bankroll.defaults import DEFAULT_LIMITS
from bankroll.models import Bankroll
from crash.rounds import current_round


class Command(BaseCommand):
    help = "Create the game bankrolls, assign their owner and open the first crash round"

    def add_arguments(self, parser):
        parser.add_argument("--owner", required=True, help="Username that owns every bankroll")

    @transaction.atomic
    def handle(self, *args, **options):
        User = get_user_model()
        try:
            owner = User.objects.get(username=options["owner"])
        except User.DoesNotExist:
            raise CommandError(f"No user named {options['owner']}")

        for game in DEFAULT_LIMITS:
            bankroll = Bankroll.for_update(game)
            bankroll.owner = owner
            bankroll.save(update_fields=["owner", "updated_at"])
            self.stdout.write(f"{game}: owner={owner.username} min={bankroll.min_bet} max={bankroll.max_bet}")

        round_obj = current_round()
        self.stdout.write(self.style.SUCCESS(f"Crash round {round_obj.round_id} is live"))
