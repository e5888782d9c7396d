from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import (
    AgentSeaFreightViewSet,
    BorderDestinationFreightViewSet,
    CalculateCostView,
    CombinedFreightViewSet,
    DpCostViewSet,
    DthcViewSet,
    FreightAuditLogViewSet,
    PortBorderFreightViewSet,
    SeaFreightOptionsView,
    SeaFreightViewSet,
    ValidityStatusView,
    WeightSurchargeRuleViewSet,
)

router = DefaultRouter()
router.register(r'sea-freights', SeaFreightViewSet, basename='sea-freights')
router.register(r'agent-sea-freights', AgentSeaFreightViewSet, basename='agent-sea-freights')
router.register(r'dthc', DthcViewSet, basename='dthc')
router.register(r'dp-costs', DpCostViewSet, basename='dp-costs')
router.register(r'combined-freights', CombinedFreightViewSet, basename='combined-freights')
router.register(r'port-border-freights', PortBorderFreightViewSet, basename='port-border-freights')
router.register(r'border-destination-freights', BorderDestinationFreightViewSet, basename='border-destination-freights')
router.register(r'weight-surcharges', WeightSurchargeRuleViewSet, basename='weight-surcharges')
router.register(r'audit-logs', FreightAuditLogViewSet, basename='audit-logs')

urlpatterns = [
    path('calculate', CalculateCostView.as_view(), name='calculate-cost'),
    path('sea-freight-options', SeaFreightOptionsView.as_view(), name='sea-freight-options'),
    path('validity-status', ValidityStatusView.as_view(), name='validity-status'),
]
urlpatterns += router.urls
