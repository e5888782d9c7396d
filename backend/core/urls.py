from rest_framework.routers import DefaultRouter

from .views import (
    DestinationViewSet,
    PortViewSet,
    RailAgentViewSet,
    ShippingLineViewSet,
    TruckAgentViewSet,
)

router = DefaultRouter()
router.register(r'ports', PortViewSet, basename='ports')
router.register(r'destinations', DestinationViewSet, basename='destinations')
router.register(r'rail-agents', RailAgentViewSet, basename='rail-agents')
router.register(r'truck-agents', TruckAgentViewSet, basename='truck-agents')
router.register(r'shipping-lines', ShippingLineViewSet, basename='shipping-lines')

urlpatterns = router.urls
