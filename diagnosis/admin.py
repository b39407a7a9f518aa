from django.contrib import admin

from .models import Diagnosis


@admin.register(Diagnosis)
class DiagnosisAdmin(admin.ModelAdmin):
    list_display = ['crop', 'disease', 'diagnosis_type', 'severity', 'status',
                    'confidence', 'owner', 'created_at']
    list_filter = ['diagnosis_type', 'severity', 'status']
    search_fields = ['crop', 'disease', 'session_id', 'owner__username']
