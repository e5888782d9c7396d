from rest_framework.routers import DefaultRouter

from .views import CalculationHistoryViewSet, QuotationViewSet

router = DefaultRouter()
router.register(r'quotations', QuotationViewSet, basename='quotations')
router.register(r'history', CalculationHistoryViewSet, basename='history')

urlpatterns = router.urls
