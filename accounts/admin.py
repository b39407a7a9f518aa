from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth import get_user_model
from django.contrib import admin

User = get_user_model()


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin interface for the custom User model."""

    list_display = (
        'username', 'email', 'phone', 'farm_name', 'is_active', 'is_staff', 'date_joined'
    )
    list_filter = ('is_active', 'is_staff', 'preferred_language', 'date_joined')
    search_fields = ('username', 'email', 'phone', 'first_name', 'last_name', 'farm_name')
    ordering = ('-date_joined',)

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Farm Profile', {
            'fields': ('phone', 'farm_name', 'preferred_language')
        }),
    )
