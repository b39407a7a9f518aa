from django.contrib import admin

from .models import Crop


@admin.register(Crop)
class CropAdmin(admin.ModelAdmin):
    list_display = ['name', 'variety', 'crop_type', 'current_stage', 'progress',
                    'field_size', 'expected_harvest', 'owner', 'created_at']
    list_filter = ['crop_type', 'current_stage']
    search_fields = ['name', 'variety', 'location', 'owner__username']
    readonly_fields = ['progress', 'created_at', 'updated_at']
    date_hierarchy = 'created_at'
