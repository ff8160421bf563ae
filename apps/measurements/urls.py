from rest_framework import routers

from .mongo_views import MeasurementViewSet

router = routers.DefaultRouter(trailing_slash=False)
router.register(r"measurements", MeasurementViewSet, basename="measurement")
