from django.contrib.auth.models import AbstractUser
from django.db import models
from .managers import UserManager


class User(AbstractUser):
    ROLE_ADMIN = "ADMIN"
    ROLE_CLIENT = "CLIENT"
    ROLE_GRUZCHIK = "GRUZCHIK"
    ROLE_PROVIDER = "PROVIDER"

    ROLE_CHOICES = [
        (ROLE_ADMIN, "Администратор"),
        (ROLE_CLIENT, "Клиент"),
        (ROLE_GRUZCHIK, "Грузчик"),
        (ROLE_PROVIDER, "Поставщик"),
    ]

    username = models.CharField(max_length=150, unique=True)
    phone = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_CLIENT)
    label = models.CharField(max_length=64, blank=True, help_text="Метка клиента для админки")

    USERNAME_FIELD = "phone"
    REQUIRED_FIELDS = []

    objects = UserManager()

    def __str__(self):
        return self.name or self.phone

    @property
    def display_name(self):
        return self.name or self.phone
