"""
KSA Sequences - App Configuration
=================================
Persistent keyed counters for document numbering.
"""

from django.apps import AppConfig


class CoreSequencesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.sequences"
    label = "core_sequences"
    verbose_name = "KSA Sequence Counters"
