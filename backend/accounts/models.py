# backend/accounts/models.py

from django.contrib.auth.models import AbstractUser
from django.db import models

class CustomUser(AbstractUser):
    ROLE_CHOICES = [
        ('superadmin', 'Super admin'),
        ('admin', 'Admin'),
        ('user', 'User'),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='user')

    @property
    def is_admin_role(self):
        return self.role in ('admin', 'superadmin')

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"
