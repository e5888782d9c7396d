from django.conf import settings
from django.db import models


class VersionedRate(models.Model):
    """
    Shared columns for every rate table.

    ``KEY_FIELDS`` name the natural key used for overlap and version checks.
    ``MAGNITUDE_FIELDS`` are the money columns whose change bumps ``version``.
    """
    KEY_FIELDS = ()
    MAGNITUDE_FIELDS = ()
    ENTITY_TYPE = ''

    valid_from = models.DateField()
    valid_to = models.DateField()
    version = models.PositiveIntegerField(default=1)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-created_at', '-id']

    def natural_key_values(self):
        return tuple(getattr(self, f) for f in self.KEY_FIELDS)


class SeaFreight(VersionedRate):
    KEY_FIELDS = ('pol', 'pod', 'carrier')
    MAGNITUDE_FIELDS = ('rate', 'local_charge')
    ENTITY_TYPE = 'seaFreight'

    pol = models.CharField(max_length=100)
    pod = models.CharField(max_length=100)
    carrier = models.CharField(max_length=255)
    rate = models.DecimalField(max_digits=12, decimal_places=2)
    local_charge = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    note = models.TextField(blank=True, null=True)
    freight_code = models.CharField(max_length=50, blank=True, null=True)

    class Meta(VersionedRate.Meta):
        indexes = [models.Index(fields=['pol', 'pod'], name='pricing_sea_route_idx')]

    def __str__(self):
        return f"{self.carrier} {self.pol}→{self.pod} v{self.version}"


class AgentSeaFreight(VersionedRate):
    KEY_FIELDS = ('agent', 'pol', 'pod', 'carrier')
    MAGNITUDE_FIELDS = ('rate', 'local_charge', 'llocal')
    ENTITY_TYPE = 'agentSeaFreight'

    agent = models.CharField(max_length=255)
    pol = models.CharField(max_length=100)
    pod = models.CharField(max_length=100)
    carrier = models.CharField(max_length=255, blank=True, null=True)
    rate = models.DecimalField(max_digits=12, decimal_places=2)
    local_charge = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    # Signed: a negative LLOCAL is a discount.
    llocal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    note = models.TextField(blank=True, null=True)

    class Meta(VersionedRate.Meta):
        indexes = [models.Index(fields=['agent', 'pol', 'pod'], name='pricing_agentsea_route_idx')]

    def __str__(self):
        return f"{self.agent} {self.pol}→{self.pod} v{self.version}"


class Dthc(VersionedRate):
    KEY_FIELDS = ('agent', 'pol', 'pod', 'carrier')
    MAGNITUDE_FIELDS = ('amount',)
    ENTITY_TYPE = 'dthc'

    agent = models.CharField(max_length=255)
    pol = models.CharField(max_length=100)
    pod = models.CharField(max_length=100)
    carrier = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.TextField(blank=True, null=True)

    class Meta(VersionedRate.Meta):
        verbose_name = 'DTHC'
        verbose_name_plural = 'DTHC'

    def __str__(self):
        return f"DTHC {self.agent}/{self.carrier} {self.pol}→{self.pod}"


class DpCost(VersionedRate):
    KEY_FIELDS = ('port',)
    MAGNITUDE_FIELDS = ('amount',)
    ENTITY_TYPE = 'dpCost'

    port = models.CharField(max_length=100)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.TextField(blank=True, null=True)

    class Meta(VersionedRate.Meta):
        verbose_name = 'DP cost'

    def __str__(self):
        return f"DP {self.port}"


class CombinedFreight(VersionedRate):
    KEY_FIELDS = ('agent', 'pol', 'pod', 'destination')
    MAGNITUDE_FIELDS = ('rate',)
    ENTITY_TYPE = 'combinedFreight'

    agent = models.CharField(max_length=255)
    pol = models.CharField(max_length=100)
    pod = models.CharField(max_length=100)
    destination = models.ForeignKey('core.Destination', on_delete=models.PROTECT, related_name='+')
    rate = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.TextField(blank=True, null=True)

    def __str__(self):
        return f"{self.agent} {self.pol}→{self.pod}→{self.destination_id}"


class PortBorderFreight(VersionedRate):
    KEY_FIELDS = ('agent', 'pol', 'pod')
    MAGNITUDE_FIELDS = ('rate',)
    ENTITY_TYPE = 'portBorderFreight'

    agent = models.CharField(max_length=255)
    pol = models.CharField(max_length=100)
    pod = models.CharField(max_length=100)
    rate = models.DecimalField(max_digits=12, decimal_places=2)

    def __str__(self):
        return f"Rail {self.agent} {self.pol}→{self.pod}"


class BorderDestinationFreight(VersionedRate):
    KEY_FIELDS = ('agent', 'destination')
    MAGNITUDE_FIELDS = ('rate',)
    ENTITY_TYPE = 'borderDestinationFreight'

    agent = models.CharField(max_length=255)
    destination = models.ForeignKey('core.Destination', on_delete=models.PROTECT, related_name='+')
    rate = models.DecimalField(max_digits=12, decimal_places=2)

    def __str__(self):
        return f"Truck {self.agent}→{self.destination_id}"


class WeightSurchargeRule(VersionedRate):
    KEY_FIELDS = ('agent', 'min_weight', 'max_weight')
    MAGNITUDE_FIELDS = ('surcharge',)
    ENTITY_TYPE = 'weightSurcharge'

    agent = models.CharField(max_length=255)
    min_weight = models.DecimalField(max_digits=12, decimal_places=2)
    # NULL means no upper bound.
    max_weight = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    surcharge = models.DecimalField(max_digits=12, decimal_places=2)

    def __str__(self):
        upper = self.max_weight if self.max_weight is not None else '∞'
        return f"{self.agent} {self.min_weight}-{upper}kg"


class FreightAuditLog(models.Model):
    ACTION_CHOICES = [('create', 'Create'), ('update', 'Update'), ('delete', 'Delete')]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    username = models.CharField(max_length=150, blank=True, default='')
    action = models.CharField(max_length=10, choices=ACTION_CHOICES)
    entity_type = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=64)
    entity_snapshot = models.JSONField(default=dict)
    changes = models.JSONField(default=list)
    version = models.PositiveIntegerField(null=True, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp', '-id']
        indexes = [models.Index(fields=['entity_type', 'entity_id'], name='pricing_audit_entity_idx')]

    def __str__(self):
        return f"{self.action} {self.entity_type}#{self.entity_id} by {self.username or '-'}"


RATE_MODELS = (
    SeaFreight,
    AgentSeaFreight,
    Dthc,
    DpCost,
    CombinedFreight,
    PortBorderFreight,
    BorderDestinationFreight,
    WeightSurchargeRule,
)
