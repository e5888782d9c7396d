from __future__ import annotations

import logging

from rest_framework import mixins, status, views, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import CanDeleteRecords, CanManageRates
from quotes.models import CalculationHistory

from .models import (
    AgentSeaFreight,
    BorderDestinationFreight,
    CombinedFreight,
    DpCost,
    Dthc,
    FreightAuditLog,
    PortBorderFreight,
    SeaFreight,
    WeightSurchargeRule,
)
from .serializers import (
    AgentSeaFreightSerializer,
    BorderDestinationFreightSerializer,
    CalculateRequestSerializer,
    CalculationResultSerializer,
    CombinedFreightSerializer,
    DpCostSerializer,
    DthcSerializer,
    FreightAuditLogSerializer,
    PortBorderFreightSerializer,
    RankedResultSerializer,
    SeaFreightSerializer,
    WeightSurchargeRuleSerializer,
)
from .services.adjustments import rank_result
from .services.cost_engine import calculate_cost
from .services.policy import CalculationPolicyError, get_calculation_policy
from .services.rate_store import (
    RateOverlapWarning,
    RateValidationError,
    RateWarning,
    create_rate,
    delete_rate,
    update_rate,
)
from .services.snapshot import load_historical_snapshot, load_rate_snapshot
from .services.validity import coerce_date, get_validity_status, is_valid_on_date, today

logger = logging.getLogger(__name__)

TRUTHY = {"1", "true", "yes", "on"}


def _error(detail: str, status_code: int, **extra):
    """Consistent error payload shape across API: {'detail': ...}."""
    return Response({"detail": detail, **extra}, status=status_code)


# ---------- Calculation ----------
class CalculateCostView(views.APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        ser = CalculateRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        payload = ser.to_input()
        exclusions = ser.validated_data.get("exclusions")

        try:
            policy = get_calculation_policy()
        except CalculationPolicyError as exc:
            logger.error(f"Calculation policy unavailable: {exc}")
            return _error("Calculation policy is misconfigured.", status.HTTP_500_INTERNAL_SERVER_ERROR)

        snapshot = load_rate_snapshot()
        historical = load_historical_snapshot(payload.historical_date)
        result = calculate_cost(payload, snapshot, historical_snapshot=historical, policy=policy)

        body = CalculationResultSerializer(result).data
        body["adjusted"] = RankedResultSerializer(rank_result(result, exclusions)).data

        history = CalculationHistory.objects.create(
            created_by=request.user,
            input=request.data if isinstance(request.data, dict) else {},
            result=body,
            query_date=payload.historical_date or today().isoformat(),
        )
        body["history_id"] = history.id

        logger.info(
            f"Calculated {payload.pol}→{payload.pod}→{payload.destination_id}: "
            f"{len(result.breakdown)} rows, lowest {result.lowest_cost_agent or '-'}"
        )
        return Response(body, status=status.HTTP_200_OK)


class SeaFreightOptionsView(views.APIView):
    """General sea freight rates a caller may pin with selected_sea_freight_id."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        pol = request.query_params.get("pol")
        pod = request.query_params.get("pod")
        if not pol or not pod:
            return _error("pol and pod are required", status.HTTP_400_BAD_REQUEST)
        on = request.query_params.get("date") or today().isoformat()

        options = []
        for obj in SeaFreight.objects.filter(pol=pol, pod=pod).order_by("-created_at", "-id"):
            if is_valid_on_date(obj.valid_from, obj.valid_to, on):
                options.append(obj)
        return Response(SeaFreightSerializer(options, many=True).data)


class ValidityStatusView(views.APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        valid_from = request.query_params.get("valid_from")
        valid_to = request.query_params.get("valid_to")
        on = request.query_params.get("date")
        if on and coerce_date(on) is None:
            return _error("date must be YYYY-MM-DD", status.HTTP_400_BAD_REQUEST)
        result = get_validity_status(
            valid_from, valid_to, on=on, expiring_days=get_calculation_policy().expiring_soon_days
        )
        return Response({
            "status": result.status,
            "days_until_expiry": result.days_until_expiry,
            "is_valid": is_valid_on_date(valid_from, valid_to, on),
        })


# ---------- Rate tables ----------
class RateViewSet(viewsets.ModelViewSet):
    """
    CRUD for one rate table. Writes go through the rate store so versions and
    the audit log stay consistent. Overlapping windows, and new versions that
    do not follow on from the latest one, answer 409 unless the request carries
    ``force``.
    """
    permission_classes = [CanManageRates, CanDeleteRecords]
    model = None
    filter_fields = ()

    def get_queryset(self):
        qs = self.model.objects.all().order_by("-created_at", "-id")
        params = self.request.query_params
        for field in self.filter_fields:
            value = params.get(field)
            if value:
                qs = qs.filter(**{field: value})
        return qs

    def _force(self) -> bool:
        raw = self.request.query_params.get("force")
        if raw is None and hasattr(self.request.data, "get"):
            raw = self.request.data.get("force")
        return str(raw).lower() in TRUTHY

    def _conflict(self, exc):
        return _error(str(exc), status.HTTP_409_CONFLICT, overlap=isinstance(exc, RateOverlapWarning))

    def _saved(self, instance, warning, status_code):
        data = dict(self.get_serializer(instance).data)
        if warning:
            data["warning"] = warning
        return Response(data, status=status_code)

    def create(self, request, *args, **kwargs):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            instance, warning = create_rate(self.model, ser.validated_data, user=request.user, force=self._force())
        except RateWarning as exc:
            return self._conflict(exc)
        except RateValidationError as exc:
            return _error(str(exc), status.HTTP_400_BAD_REQUEST)
        return self._saved(instance, warning, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        ser = self.get_serializer(instance, data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        try:
            instance, warning = update_rate(instance, ser.validated_data, user=request.user, force=self._force())
        except RateWarning as exc:
            return self._conflict(exc)
        except RateValidationError as exc:
            return _error(str(exc), status.HTTP_400_BAD_REQUEST)
        return self._saved(instance, warning, status.HTTP_200_OK)

    def perform_destroy(self, instance):
        delete_rate(instance, user=self.request.user)


class SeaFreightViewSet(RateViewSet):
    model = SeaFreight
    serializer_class = SeaFreightSerializer
    filter_fields = ("pol", "pod", "carrier")


class AgentSeaFreightViewSet(RateViewSet):
    model = AgentSeaFreight
    serializer_class = AgentSeaFreightSerializer
    filter_fields = ("agent", "pol", "pod", "carrier")


class DthcViewSet(RateViewSet):
    model = Dthc
    serializer_class = DthcSerializer
    filter_fields = ("agent", "pol", "pod", "carrier")


class DpCostViewSet(RateViewSet):
    model = DpCost
    serializer_class = DpCostSerializer
    filter_fields = ("port",)


class CombinedFreightViewSet(RateViewSet):
    model = CombinedFreight
    serializer_class = CombinedFreightSerializer
    filter_fields = ("agent", "pol", "pod", "destination")


class PortBorderFreightViewSet(RateViewSet):
    model = PortBorderFreight
    serializer_class = PortBorderFreightSerializer
    filter_fields = ("agent", "pol", "pod")


class BorderDestinationFreightViewSet(RateViewSet):
    model = BorderDestinationFreight
    serializer_class = BorderDestinationFreightSerializer
    filter_fields = ("agent", "destination")


class WeightSurchargeRuleViewSet(RateViewSet):
    model = WeightSurchargeRule
    serializer_class = WeightSurchargeRuleSerializer
    filter_fields = ("agent",)


class FreightAuditLogViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = FreightAuditLogSerializer

    def get_queryset(self):
        qs = FreightAuditLog.objects.all()
        entity_type = self.request.query_params.get("entity_type")
        entity_id = self.request.query_params.get("entity_id")
        if entity_type:
            qs = qs.filter(entity_type=entity_type)
        if entity_id:
            qs = qs.filter(entity_id=str(entity_id))
        return qs
