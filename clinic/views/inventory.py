from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.models import InventoryItem
from clinic.permissions import IsDoctorOrAdmin
from clinic.serializers.operations import InventoryItemSerializer
from clinic.services.inventory import filter_items, inventory_stats
from clinic.views.common import audit, changed_fields, get_or_404, ok


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def inventory(request):
    if request.method == 'POST':
        s = InventoryItemSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        item = s.save()
        audit(request, 'CREATE', 'inventory_item', item.id, name=item.name, quantity=item.quantity)
        return ok(InventoryItemSerializer(item).data, status=201)

    qs = filter_items(InventoryItem.objects.all(), q=request.query_params.get('q'),
                      category=request.query_params.get('category'))
    return ok(InventoryItemSerializer(qs.order_by('name'), many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def inventory_detail(request, item_id: int):
    item = get_or_404(InventoryItem.objects.all(), item_id, 'Inventory item not found')
    if request.method == 'GET':
        return ok(InventoryItemSerializer(item).data)

    if request.method == 'DELETE':
        audit(request, 'DELETE', 'inventory_item', item.id, name=item.name)
        item.delete()
        return ok(None)

    s = InventoryItemSerializer(item, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    item = s.save()
    audit(request, 'UPDATE', 'inventory_item', item.id, fields=changed_fields(s), quantity=item.quantity)
    return ok(InventoryItemSerializer(item).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def inventory_stats_view(request):
    return ok(inventory_stats(InventoryItem.objects.all()))
