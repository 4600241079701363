from django.urls import path

from .views import CollateralViewSet

urlpatterns = [
    path("", CollateralViewSet.as_view({"get": "list"}), name="collateral-kinds"),
    path("<slug:kind>/", CollateralViewSet.as_view({"post": "create"}), name="collateral"),
]
