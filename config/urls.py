from __future__ import annotations

from django.urls import include, path
from rest_framework import routers

from apps.deliveries.urls import router as deliveries_router
from apps.materials.urls import router as materials_router
from apps.measurements.urls import router as measurements_router
from apps.orders.urls import router as orders_router
from apps.payments.urls import router as payments_router
from apps.tailors.urls import router as tailors_router
from apps.users.urls import router as users_router

class OptionalDefaultRouter(routers.DefaultRouter):

    def extend(self, router: routers.DefaultRouter) -> None:
        for prefix, viewset, basename in router.registry:
            self.register(prefix, viewset, basename=basename)

api_router = OptionalDefaultRouter(trailing_slash=False)
api_router.extend(users_router)
api_router.extend(tailors_router)
api_router.extend(materials_router)
api_router.extend(measurements_router)
api_router.extend(orders_router)
api_router.extend(deliveries_router)
api_router.extend(payments_router)

urlpatterns = [
    path("api/v1/auth/", include("apps.users.auth_urls")),
    path("api/v1/", include(api_router.urls)),
]
