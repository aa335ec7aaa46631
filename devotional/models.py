from django.db import models
from django.utils import timezone


class DevotionDocument(models.Model):
    """
    One devotion record in a user's "records" collection.

    The record id comes from the client, documents are unique per (owner, id).
    """
    owner_uid = models.CharField(max_length=128, db_index=True)
    record_id = models.CharField(max_length=64)
    date = models.DateTimeField(default=timezone.now)
    # List of {"reference", "text", "version"} passages.
    scripture = models.JSONField(default=list)
    observation = models.TextField(blank=True, default="")
    application = models.TextField(blank=True, default="")
    prayer_text = models.TextField(blank=True, default="")

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date"]
        constraints = [
            models.UniqueConstraint(
                fields=["owner_uid", "record_id"], name="unique_devotion_per_owner"
            ),
        ]

    def __str__(self) -> str:
        return f"DevotionDocument({self.owner_uid}/{self.record_id}) {self.date:%Y-%m-%d}"


class CheckInDocument(models.Model):
    """One daily check-in in a user's "checkins" collection."""
    owner_uid = models.CharField(max_length=128, db_index=True)
    record_id = models.CharField(max_length=64)
    date = models.DateTimeField(default=timezone.now)
    mood = models.CharField(max_length=16, blank=True, null=True)
    note = models.TextField(blank=True, null=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date"]
        constraints = [
            models.UniqueConstraint(
                fields=["owner_uid", "record_id"], name="unique_checkin_per_owner"
            ),
        ]

    def __str__(self) -> str:
        return f"CheckInDocument({self.owner_uid}/{self.record_id}) {self.date:%Y-%m-%d}"
