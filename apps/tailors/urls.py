from rest_framework import routers

from .mongo_views import TailorViewSet

router = routers.DefaultRouter(trailing_slash=False)
router.register(r"tailors", TailorViewSet, basename="tailor")
