# quotes/views.py
from rest_framework import mixins, viewsets
from rest_framework.permissions import IsAuthenticated

from accounts.permissions import ADMIN_ROLES, CanDeleteRecords

from .models import CalculationHistory, Quotation
from .serializers import CalculationHistorySerializer, QuotationSerializer


class OwnedQuerysetMixin:
    """Admins see everyone's records; other users see their own."""

    def scope_to_user(self, qs):
        user = self.request.user
        if getattr(user, "role", None) in ADMIN_ROLES:
            return qs
        return qs.filter(created_by=user)


class QuotationViewSet(OwnedQuerysetMixin, viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated, CanDeleteRecords]
    serializer_class = QuotationSerializer

    def get_queryset(self):
        return self.scope_to_user(Quotation.objects.select_related("created_by"))

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)


class CalculationHistoryViewSet(
    OwnedQuerysetMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, CanDeleteRecords]
    serializer_class = CalculationHistorySerializer

    def get_queryset(self):
        return self.scope_to_user(CalculationHistory.objects.select_related("created_by"))
