from django.urls import path

from registros.views import (
    PurgeAllView,
    PurgeByWordView,
    RegistroCollectionView,
    RegistroDetailView,
)

app_name = "registros"

urlpatterns = [
    path("registros", RegistroCollectionView.as_view(), name="registro-list"),
    # Fixed paths must come before the id route.
    path("registros/limpiar-palabra", PurgeByWordView.as_view(), name="registro-purge-word"),
    path("registros/limpiar/todo", PurgeAllView.as_view(), name="registro-purge-all"),
    path("registros/<str:pk>", RegistroDetailView.as_view(), name="registro-detail"),
]
