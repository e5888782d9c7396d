import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _versioned(*fields):
    """Own columns followed by the columns every rate table shares."""
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        *fields,
        ('valid_from', models.DateField()),
        ('valid_to', models.DateField()),
        ('version', models.PositiveIntegerField(default=1)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
    ]


def _money(**kwargs):
    return models.DecimalField(decimal_places=2, max_digits=12, **kwargs)


RATE_ORDERING = {'ordering': ['-created_at', '-id'], 'abstract': False}


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='SeaFreight',
            fields=_versioned(
                ('pol', models.CharField(max_length=100)),
                ('pod', models.CharField(max_length=100)),
                ('carrier', models.CharField(max_length=255)),
                ('rate', _money()),
                ('local_charge', _money(default=0)),
                ('note', models.TextField(blank=True, null=True)),
                ('freight_code', models.CharField(blank=True, max_length=50, null=True)),
            ),
            options={
                **RATE_ORDERING,
                'indexes': [models.Index(fields=['pol', 'pod'], name='pricing_sea_route_idx')],
            },
        ),
        migrations.CreateModel(
            name='AgentSeaFreight',
            fields=_versioned(
                ('agent', models.CharField(max_length=255)),
                ('pol', models.CharField(max_length=100)),
                ('pod', models.CharField(max_length=100)),
                ('carrier', models.CharField(blank=True, max_length=255, null=True)),
                ('rate', _money()),
                ('local_charge', _money(default=0)),
                ('llocal', _money(default=0)),
                ('note', models.TextField(blank=True, null=True)),
            ),
            options={
                **RATE_ORDERING,
                'indexes': [models.Index(fields=['agent', 'pol', 'pod'], name='pricing_agentsea_route_idx')],
            },
        ),
        migrations.CreateModel(
            name='Dthc',
            fields=_versioned(
                ('agent', models.CharField(max_length=255)),
                ('pol', models.CharField(max_length=100)),
                ('pod', models.CharField(max_length=100)),
                ('carrier', models.CharField(max_length=255)),
                ('amount', _money()),
                ('description', models.TextField(blank=True, null=True)),
            ),
            options={**RATE_ORDERING, 'verbose_name': 'DTHC', 'verbose_name_plural': 'DTHC'},
        ),
        migrations.CreateModel(
            name='DpCost',
            fields=_versioned(
                ('port', models.CharField(max_length=100)),
                ('amount', _money()),
                ('description', models.TextField(blank=True, null=True)),
            ),
            options={**RATE_ORDERING, 'verbose_name': 'DP cost'},
        ),
        migrations.CreateModel(
            name='CombinedFreight',
            fields=_versioned(
                ('agent', models.CharField(max_length=255)),
                ('pol', models.CharField(max_length=100)),
                ('pod', models.CharField(max_length=100)),
                ('destination', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to='core.destination')),
                ('rate', _money()),
                ('description', models.TextField(blank=True, null=True)),
            ),
            options=RATE_ORDERING,
        ),
        migrations.CreateModel(
            name='PortBorderFreight',
            fields=_versioned(
                ('agent', models.CharField(max_length=255)),
                ('pol', models.CharField(max_length=100)),
                ('pod', models.CharField(max_length=100)),
                ('rate', _money()),
            ),
            options=RATE_ORDERING,
        ),
        migrations.CreateModel(
            name='BorderDestinationFreight',
            fields=_versioned(
                ('agent', models.CharField(max_length=255)),
                ('destination', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to='core.destination')),
                ('rate', _money()),
            ),
            options=RATE_ORDERING,
        ),
        migrations.CreateModel(
            name='WeightSurchargeRule',
            fields=_versioned(
                ('agent', models.CharField(max_length=255)),
                ('min_weight', _money()),
                ('max_weight', _money(blank=True, null=True)),
                ('surcharge', _money()),
            ),
            options=RATE_ORDERING,
        ),
        migrations.CreateModel(
            name='FreightAuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('username', models.CharField(blank=True, default='', max_length=150)),
                ('action', models.CharField(choices=[('create', 'Create'), ('update', 'Update'), ('delete', 'Delete')], max_length=10)),
                ('entity_type', models.CharField(max_length=50)),
                ('entity_id', models.CharField(max_length=64)),
                ('entity_snapshot', models.JSONField(default=dict)),
                ('changes', models.JSONField(default=list)),
                ('version', models.PositiveIntegerField(blank=True, null=True)),
                ('timestamp', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-timestamp', '-id'],
                'indexes': [models.Index(fields=['entity_type', 'entity_id'], name='pricing_audit_entity_idx')],
            },
        ),
    ]
