from rest_framework import routers

from .mongo_views import PaymentViewSet

router = routers.DefaultRouter(trailing_slash=False)
router.register(r"payments", PaymentViewSet, basename="payment")
