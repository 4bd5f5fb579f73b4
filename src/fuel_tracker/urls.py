from django.urls import path

from fuel_tracker import views

urlpatterns = [
    path("api/v1/health", views.health_view, name="health"),
    path("api/v1/fuel-prices/<str:fuel_kind>", views.fuel_price_view, name="fuel-price"),
    path("api/v1/geocode/suggestions", views.suggestions_view, name="geocode-suggestions"),
    path("api/v1/trips", views.trips_view, name="trips"),
    path("api/v1/trips/<int:index>", views.trip_detail_view, name="trip-detail"),
    path("api/v1/favorites", views.favorites_view, name="favorites"),
    path("api/v1/favorites/<int:favorite_id>", views.favorite_detail_view, name="favorite-detail"),
    path("api/v1/preferences", views.preferences_view, name="preferences"),
    path("api/v1/storage", views.storage_view, name="storage"),
    path("api/v1/data/export", views.export_data_view, name="data-export"),
    path("api/v1/data/import", views.import_data_view, name="data-import"),
]
