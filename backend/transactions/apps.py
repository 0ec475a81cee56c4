from django.apps import AppConfig


class TransactionsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.transactions'

    def ready(self):
        """Import signals when app is ready"""
        import backend.transactions.cache_signals  # noqa: F401
