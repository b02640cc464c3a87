"""
Stats Management Command

This command prints the lifetime statistics and player name, and can
reset the statistics or set the name from the command line.

Usage:
    python manage.py sweeper_stats
    python manage.py sweeper_stats --reset
    python manage.py sweeper_stats --name Ada

Author: LifeSweeper Team
"""

from django.core.management.base import BaseCommand, CommandError

from sweeper.stores import ProfileStore, StatsStore


class Command(BaseCommand):
    """
    Django management command to inspect or reset persisted game data.
    """
    
    help = 'Shows lifetime game statistics, optionally resetting them or setting the player name.'
    
    def add_arguments(self, parser):
        """Add command line arguments."""
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Zero every statistic before printing.',
        )
        parser.add_argument(
            '--name',
            help='Set the player name.',
        )
    
    def handle(self, *args, **options):
        """Execute the command."""
        stats_store = StatsStore()
        profile_store = ProfileStore()
        
        if options['name'] is not None:
            try:
                profile_store.set_name(options['name'])
            except ValueError as e:
                raise CommandError(str(e)) from e
            self.stdout.write(self.style.SUCCESS(f"Player name set to {profile_store.name}."))
        
        if options['reset']:
            stats_store.reset()
            self.stdout.write(self.style.WARNING('Statistics reset.'))
        
        stats = stats_store.stats
        name = profile_store.name or '(not set)'
        
        self.stdout.write(f"Player:         {name}")
        self.stdout.write(f"Games played:   {stats.games_played}")
        self.stdout.write(f"Games won:      {stats.games_won}")
        self.stdout.write(f"Correct flags:  {stats.correct_flags}")
        self.stdout.write(f"Bombs exploded: {stats.bombs_exploded}")
