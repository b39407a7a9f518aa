from django.contrib.auth.models import AbstractUser
from django.db import models
import uuid


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.
    Every crop, sale, expenditure and diagnosis record is owned by one user.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class PreferredLanguage(models.TextChoices):
        ENGLISH = 'en', 'English'
        HINDI = 'hi', 'Hindi'
        TAMIL = 'ta', 'Tamil'
        TELUGU = 'te', 'Telugu'
        KANNADA = 'kn', 'Kannada'
        MARATHI = 'mr', 'Marathi'

    phone = models.CharField(
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        help_text="Phone number used as an alternative login identifier"
    )

    preferred_language = models.CharField(
        max_length=5,
        choices=PreferredLanguage.choices,
        default=PreferredLanguage.ENGLISH,
        help_text="Language used for diagnosis responses"
    )

    farm_name = models.CharField(max_length=200, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-date_joined']

    def __str__(self):
        return f"{self.get_full_name() or self.username}"
