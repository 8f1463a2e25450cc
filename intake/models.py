import uuid

from django.db import models
from django.db.models import Q


class PatientQuerySet(models.QuerySet):

    def newest_first(self):
        return self.order_by('-created_at')


class Patient(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    mrn = models.CharField(max_length=6, unique=True)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    dob = models.DateField()
    # 查重只看最近创建的 N 个患者
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PatientQuerySet.as_manager()

    class Meta:
        db_table = 'patients'

    def __str__(self):
        return f"{self.full_name} ({self.mrn})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"


class Provider(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    npi = models.CharField(max_length=10, unique=True)
    name = models.CharField(max_length=200)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'providers'

    def __str__(self):
        return f"{self.name} (NPI {self.npi})"


class OrderQuerySet(models.QuerySet):

    def same_medication(self, patient_id, medication_name, since=None):
        """同一患者 + 同一药物（忽略大小写 / 首尾空格），since 为闭区间下界。"""
        orders = self.filter(patient_id=patient_id, medication_name__iexact=medication_name.strip())
        if since is not None:
            orders = orders.filter(created_at__gte=since)
        return orders

    def search(self, query):
        query = (query or '').strip()
        if not query:
            return self
        return self.filter(
            Q(medication_name__icontains=query) |
            Q(patient__mrn__icontains=query) |
            Q(patient__first_name__icontains=query) |
            Q(patient__last_name__icontains=query)
        )


class Order(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('processing', 'Processing'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='orders')
    provider = models.ForeignKey(Provider, on_delete=models.CASCADE, related_name='orders')
    medication_name = models.CharField(max_length=200)
    primary_diagnosis = models.CharField(max_length=20)            # ICD-10
    additional_diagnoses = models.JSONField(default=list, blank=True)
    medication_history = models.JSONField(default=list, blank=True)
    patient_records = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    error_message = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(blank=True, null=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        db_table = 'orders'
        indexes = [
            # 订单查重：patient + created_at 窗口
            models.Index(fields=['patient', 'created_at'], name='orders_patient_created_idx'),
        ]

    def __str__(self):
        return f"{self.medication_name} for {self.patient_id} [{self.status}]"


class CarePlan(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name='care_plan')
    content = models.TextField()
    generated_at = models.DateTimeField(auto_now_add=True)
    llm_model = models.CharField(max_length=50, blank=True, null=True)
    llm_prompt_version = models.CharField(max_length=20, blank=True, null=True)

    class Meta:
        db_table = 'care_plans'
