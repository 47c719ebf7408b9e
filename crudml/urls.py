from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

urlpatterns = [
    path("", include("registros.urls")),
    path("schema", SpectacularAPIView.as_view(), name="schema"),
]
