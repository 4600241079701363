from __future__ import annotations

from rest_framework import serializers


class CollateralRequestSerializer(serializers.Serializer):
    data = serializers.JSONField()

    def validate_data(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("data must be an analysis object")
        if not str(value.get("title", "")).strip():
            raise serializers.ValidationError("data.title is required")
        return value
