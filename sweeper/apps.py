from django.apps import AppConfig


class SweeperConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'sweeper'
    verbose_name = 'LifeSweeper'
