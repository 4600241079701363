from __future__ import annotations

from rest_framework import serializers


class AnalysisRequestSerializer(serializers.Serializer):
    text = serializers.CharField(trim_whitespace=False)
    wordCount = serializers.FloatField(min_value=0)

    def validate_text(self, value):
        if not value.strip():
            raise serializers.ValidationError("text must not be blank")
        return value

    def validate_wordCount(self, value):
        # any JSON number is accepted; the count is kept whole
        return int(round(value))


class TranslationRequestSerializer(serializers.Serializer):
    data = serializers.JSONField()

    def validate_data(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("data must be an analysis object")
        return value


class CitationRequestSerializer(serializers.Serializer):
    title = serializers.CharField()
    authorName = serializers.CharField()
    publisher = serializers.CharField(required=False, allow_blank=True, default="")
    year = serializers.CharField(required=False, allow_blank=True, default="")
    city = serializers.CharField(required=False, allow_blank=True, default="")
