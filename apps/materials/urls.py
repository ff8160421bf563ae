from rest_framework import routers

from .mongo_views import MaterialViewSet

router = routers.DefaultRouter(trailing_slash=False)
router.register(r"materials", MaterialViewSet, basename="material")
