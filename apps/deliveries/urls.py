from rest_framework import routers

from .mongo_views import DeliveryViewSet

router = routers.DefaultRouter(trailing_slash=False)
router.register(r"deliveries", DeliveryViewSet, basename="delivery")
