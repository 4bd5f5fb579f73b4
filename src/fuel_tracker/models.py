from __future__ import annotations

from django.db import models
from django.utils import timezone


class TripHistory(models.Model):
    objects = models.Manager["TripHistory"]()

    name = models.CharField(max_length=100, unique=True)
    # Ordered trip records, oldest first, rewritten in full on every change
    entries = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("name",)
        verbose_name_plural = "trip histories"

    @property
    def trip_count(self) -> int:
        return len(self.entries or [])

    def __str__(self) -> str:
        return f"{self.name} ({self.trip_count} trips)"


class FavoriteRoute(models.Model):
    objects = models.Manager["FavoriteRoute"]()

    profile = models.CharField(max_length=100, db_index=True)
    departure_label = models.CharField(max_length=300)
    destination_label = models.CharField(max_length=300)
    consumption_l_per_100km = models.FloatField(null=True, blank=True)
    fuel_kind = models.CharField(max_length=10, blank=True, default="")
    added_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ("added_at", "id")

    def __str__(self) -> str:
        return f"{self.departure_label} -> {self.destination_label}"


class UserPreferences(models.Model):
    objects = models.Manager["UserPreferences"]()

    profile = models.CharField(max_length=100, unique=True)
    default_fuel_kind = models.CharField(max_length=10)
    default_consumption = models.FloatField(null=True, blank=True)
    language = models.CharField(max_length=5)
    units = models.CharField(max_length=10)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("profile",)
        verbose_name_plural = "user preferences"

    def __str__(self) -> str:
        return f"{self.profile} preferences"
