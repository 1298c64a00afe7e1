from datetime import date
import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.core.validators import RegexValidator
from django.db import models


class TimeStampedModel(models.Model):
    """Base model with created_at and updated_at fields"""
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# Roles shared by staff records and back-office accounts
ROLE_MANAGER = 'gerant'
ROLE_SUPERVISOR = 'superviseur'
ROLE_WAITER = 'serveur'
ROLE_COOK = 'cuisinier'

ROLE_CHOICES = [
    (ROLE_MANAGER, 'Gérant'),
    (ROLE_SUPERVISOR, 'Superviseur'),
    (ROLE_WAITER, 'Serveur'),
    (ROLE_COOK, 'Cuisinier'),
]

MANAGER_ROLES = (ROLE_MANAGER, ROLE_SUPERVISOR)

phone_regex = RegexValidator(regex=r'^\+?[\d\s.-]{6,20}$')


# =============== USER MANAGEMENT ===============

class CustomUser(AbstractUser):
    """Back-office account. Passwords are stored as salted hashes by AbstractUser."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    phone = models.CharField(validators=[phone_regex], max_length=20, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_WAITER)

    objects = UserManager()

    class Meta:
        db_table = 'users'

    @property
    def is_manager(self):
        return self.is_superuser or self.role in MANAGER_ROLES


# =============== STAFF ===============

class Staff(TimeStampedModel):
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    phone = models.CharField(validators=[phone_regex], max_length=20, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES)
    is_active = models.BooleanField(default=True)
    hire_date = models.DateField(default=date.today)

    class Meta:
        db_table = 'staff'
        verbose_name_plural = "Staff"
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.first_name} {self.last_name} ({self.role})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


# =============== RESTAURANT SETTINGS ===============

class RestaurantSettings(models.Model):
    """Single row holding the restaurant identity and currency"""
    restaurant_name = models.CharField(max_length=255, default='Mon Restaurant')
    currency = models.CharField(max_length=3, default='EUR')
    currency_symbol = models.CharField(max_length=5, default='€')
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'restaurant_settings'
        verbose_name_plural = "Restaurant settings"

    def __str__(self):
        return f"{self.restaurant_name} ({self.currency})"

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        settings_row, _ = cls.objects.get_or_create(pk=1)
        return settings_row
