from django.db import migrations, models


def _partner_fields():
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('name', models.CharField(max_length=255, unique=True)),
        ('code', models.CharField(blank=True, max_length=10, null=True)),
        ('description', models.TextField(blank=True, null=True)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Port',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=10, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('country', models.CharField(blank=True, default='', max_length=100)),
                ('port_type', models.CharField(choices=[('POL', 'Port of loading'), ('POD', 'Port of discharge')], max_length=3)),
                ('description', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={'ordering': ['port_type', 'name']},
        ),
        migrations.CreateModel(
            name='Destination',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=20, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('province', models.CharField(blank=True, default='', max_length=100)),
                ('city', models.CharField(blank=True, default='', max_length=100)),
                ('description', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={'ordering': ['name']},
        ),
        migrations.CreateModel(
            name='RailAgent',
            fields=_partner_fields(),
            options={'ordering': ['name'], 'abstract': False},
        ),
        migrations.CreateModel(
            name='TruckAgent',
            fields=_partner_fields(),
            options={'ordering': ['name'], 'abstract': False},
        ),
        migrations.CreateModel(
            name='ShippingLine',
            fields=_partner_fields(),
            options={'ordering': ['name'], 'abstract': False},
        ),
    ]
