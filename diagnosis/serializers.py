from rest_framework import serializers

from .models import Diagnosis


class DiagnosisSerializer(serializers.ModelSerializer):
    """Stored diagnosis result (read-only history)"""

    class Meta:
        model = Diagnosis
        fields = [
            'id', 'diagnosis_type', 'crop', 'symptoms', 'image_url',
            'disease', 'cause', 'organic_remedy', 'chemical_remedy',
            'prevention', 'confidence', 'severity', 'status',
            'session_id', 'language', 'created_at'
        ]
        read_only_fields = fields
