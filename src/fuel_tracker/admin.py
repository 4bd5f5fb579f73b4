from django.contrib import admin

from fuel_tracker.models import FavoriteRoute, TripHistory, UserPreferences


@admin.register(TripHistory)
class TripHistoryAdmin(admin.ModelAdmin):
    list_display = ("name", "trip_count", "updated_at")
    search_fields = ("name",)
    readonly_fields = ("created_at", "updated_at")
    ordering = ("name",)


@admin.register(FavoriteRoute)
class FavoriteRouteAdmin(admin.ModelAdmin):
    list_display = ("profile", "departure_label", "destination_label", "fuel_kind", "added_at")
    list_filter = ("profile", "fuel_kind")
    search_fields = ("departure_label", "destination_label")


@admin.register(UserPreferences)
class UserPreferencesAdmin(admin.ModelAdmin):
    list_display = ("profile", "default_fuel_kind", "default_consumption", "language", "units")
    readonly_fields = ("updated_at",)
