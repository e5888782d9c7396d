from django.db import models


class Port(models.Model):
    PORT_TYPE_CHOICES = [('POL', 'Port of loading'), ('POD', 'Port of discharge')]

    code = models.CharField(max_length=10, unique=True)
    name = models.CharField(max_length=255)
    country = models.CharField(max_length=100, blank=True, default='')
    port_type = models.CharField(max_length=3, choices=PORT_TYPE_CHOICES)
    description = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['port_type', 'name']

    def __str__(self):
        return f"{self.name} ({self.code})"


class Destination(models.Model):
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=255)
    province = models.CharField(max_length=100, blank=True, default='')
    city = models.CharField(max_length=100, blank=True, default='')
    description = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class NamedPartner(models.Model):
    """Rail agents, truck agents and shipping lines are looked up by name."""
    name = models.CharField(max_length=255, unique=True)
    code = models.CharField(max_length=10, blank=True, null=True)
    description = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.code})" if self.code else self.name


class RailAgent(NamedPartner):
    pass


class TruckAgent(NamedPartner):
    pass


class ShippingLine(NamedPartner):
    pass
