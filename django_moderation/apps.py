from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _
import logging


class DjangoModerationConfig(AppConfig):
    name = 'django_moderation'
    verbose_name = _('Moderation')
    default_auto_field = 'django.db.models.BigAutoField'

    def ready(self):

        # Import signals so receivers and custom signals are registered
        import django_moderation.signals

        from .conf import moderation_settings

        moderation_settings.validate()

        logger = logging.getLogger(moderation_settings.LOGGER_NAME)
        logger.info('Django Moderation initialized')
