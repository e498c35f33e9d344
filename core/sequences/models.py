"""
KSA Sequences - Counter Model
=============================
One row per counter key, e.g. "invoice:PW:2025" or "customer:<owner>".

RULES (NON-NEGOTIABLE):
- seq only ever grows; values are never reused
- rows are never deleted, even when the owning booking is
- increments happen in the database (F expression), never in Python
"""

from __future__ import annotations

from django.db import models


class Counter(models.Model):
    key = models.CharField(
        max_length=191,
        primary_key=True,
        help_text="Counter key, e.g. 'invoice:PW:2025'.",
    )
    seq = models.PositiveBigIntegerField(
        default=0,
        help_text="Last value handed out. 0 means none yet.",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "ksa_counters"
        ordering = ["key"]

    def delete(self, *args, **kwargs):
        raise PermissionError(
            "Counters are never deleted. Issued numbers must not be reused."
        )

    def __str__(self) -> str:
        return f"{self.key}={self.seq}"
