from rest_framework import routers

from .mongo_views import UserViewSet

router = routers.DefaultRouter(trailing_slash=False)
router.register(r"users", UserViewSet, basename="user")
