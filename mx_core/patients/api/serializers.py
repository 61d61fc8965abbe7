# mx_core/patients/api/serializers.py
from rest_framework import serializers


class RequiredTestsSerializer(serializers.Serializer):
    pregnancy = serializers.BooleanField()
    syphilis = serializers.BooleanField()
    hiv = serializers.BooleanField()
    chest_xray = serializers.BooleanField()


class PatientInfoSerializer(serializers.Serializer):
    nric = serializers.CharField()
    name = serializers.CharField()
    gender = serializers.CharField(allow_null=True)
    last_height = serializers.CharField(allow_null=True)
    last_weight = serializers.CharField(allow_null=True)
    last_exam_date = serializers.DateField(allow_null=True)
    required_tests = RequiredTestsSerializer()
