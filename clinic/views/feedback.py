from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Avg
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.models import Feedback
from clinic.permissions import IsDoctorOrAdmin, is_admin
from clinic.serializers.operations import FeedbackSerializer
from clinic.views.common import audit, check_patient, ok


def _feedback_for(user):
    qs = Feedback.objects.select_related('patient', 'doctor')
    return qs if is_admin(user) else qs.filter(doctor=user)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def feedback(request):
    if request.method == 'POST':
        s = FeedbackSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        if s.validated_data.get('patient'):
            check_patient(request, s.validated_data['patient'])
        item = s.save(doctor=s.validated_data.get('doctor') or request.user)
        audit(request, 'CREATE', 'feedback', item.id, doctor=item.doctor_id, rating=item.rating)
        return ok(FeedbackSerializer(item).data, status=201)

    qs = _feedback_for(request.user)
    avg = qs.aggregate(avg=Avg('rating'))['avg']
    average = Decimal(str(avg)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP) if avg is not None else None
    return ok(FeedbackSerializer(qs.order_by('-created_at'), many=True).data,
              summary={'count': qs.count(), 'averageRating': average})
