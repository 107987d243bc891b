from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .models import Customer, CustomerGroup
from .serializers import (
    CustomerSerializer,
    CustomerGroupSerializer,
    CustomerGroupCreateSerializer,
    CustomerGroupUpdateSerializer,
    CustomerInputSerializer,
    CustomerGroupFilterSerializer,
    CustomerFilterSerializer,
)
from .exceptions import DefaultCustomerGroupError

from apps.customers.services import (
    create_customer_group,
    update_customer_group,
    delete_customer_group,
    create_customer,
    update_customer,
    delete_customer,
    search_customer_groups,
    search_customers,
)


class CustomerPagination(PageNumberPagination):
    """Custom pagination for customers and groups."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


class OperationViewMixin:
    """
    Turns operation results into HTTP responses.

    A failed operation becomes 422 with its error list. A misconfigured
    default group becomes 409.
    """

    def handle_exception(self, exc):
        if isinstance(exc, DefaultCustomerGroupError):
            return Response({'error': str(exc)}, status=status.HTTP_409_CONFLICT)
        return super().handle_exception(exc)

    def operation_response(self, result, serializer_class, success_status=status.HTTP_200_OK):
        if not result.success:
            return Response({'errors': result.errors}, status=status.HTTP_422_UNPROCESSABLE_ENTITY)
        if success_status == status.HTTP_204_NO_CONTENT:
            return Response(status=status.HTTP_204_NO_CONTENT)
        output_serializer = serializer_class(result.result, context={'request': self.request})
        return Response(output_serializer.data, status=success_status)


class CustomerGroupViewSet(OperationViewMixin, viewsets.ModelViewSet):
    """
    ViewSet for CustomerGroup operations.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get groups, filtered by name, customer count and due amount
    create: Create a group and move customers into it
    retrieve: Get a specific group
    update / partial_update: Rename, add/remove customers, reposition one customer
    destroy: Delete a non-default group, moving its customers to the default group
    """

    queryset = CustomerGroup.objects.all()
    serializer_class = CustomerGroupSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = CustomerPagination

    def get_queryset(self):
        """Apply list filters from query parameters."""
        if self.action != 'list':
            return CustomerGroup.objects.all()

        filters = CustomerGroupFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data

        return search_customer_groups(
            name=params.get('n'),
            min_customer_count=params.get('ccge'),
            max_customer_count=params.get('ccle'),
            min_due_amount=params.get('dage'),
            max_due_amount=params.get('dale'),
        )

    @extend_schema(request=CustomerGroupCreateSerializer, responses={201: CustomerGroupSerializer})
    def create(self, request, *args, **kwargs):
        """Create a new customer group."""
        serializer = CustomerGroupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        customer_group = CustomerGroup(
            name=serializer.validated_data['name'],
            is_default=serializer.validated_data['is_default'],
        )
        result = create_customer_group(customer_group, serializer.validated_data['customer_ids'])

        return self.operation_response(result, CustomerGroupSerializer, status.HTTP_201_CREATED)

    @extend_schema(request=CustomerGroupUpdateSerializer, responses={200: CustomerGroupSerializer})
    def update(self, request, *args, **kwargs):
        """Apply the combined edit; PUT and PATCH behave the same."""
        customer_group = self.get_object()
        serializer = CustomerGroupUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = update_customer_group(customer_group, **serializer.validated_data)

        return self.operation_response(result, CustomerGroupSerializer)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        """Delete a customer group."""
        result = delete_customer_group(self.get_object())
        return self.operation_response(result, CustomerGroupSerializer, status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: CustomerSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def customers(self, request, pk=None):
        """Get active customers of the group, by name."""
        customer_group = self.get_object()
        customers = customer_group.customers.active().select_related('customer_group').order_by('name')
        serializer = CustomerSerializer(customers, many=True)
        return Response(serializer.data)


class CustomerViewSet(OperationViewMixin, viewsets.ModelViewSet):
    """
    ViewSet for Customer operations.

    list: Get customers ordered by group name and position
    create: Create a customer (falls back to the default group)
    retrieve: Get a specific customer
    update / partial_update: Change attributes or move to another group
    destroy: Delete a customer
    """

    queryset = Customer.objects.select_related('customer_group')
    serializer_class = CustomerSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = CustomerPagination

    def get_queryset(self):
        """Apply list filters from query parameters."""
        if self.action != 'list':
            return Customer.objects.select_related('customer_group')

        filters = CustomerFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data

        return search_customers(
            search=params.get('nom'),
            customer_group_ids=params.get('cg_id'),
            is_active=params.get('act'),
            is_withheld=params.get('wh'),
        )

    @extend_schema(request=CustomerInputSerializer, responses={201: CustomerSerializer})
    def create(self, request, *args, **kwargs):
        """Create a new customer."""
        serializer = CustomerInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        params = {key: value for key, value in serializer.validated_data.items() if value is not None}
        result = create_customer(params)

        return self.operation_response(result, CustomerSerializer, status.HTTP_201_CREATED)

    @extend_schema(request=CustomerInputSerializer, responses={200: CustomerSerializer})
    def update(self, request, *args, **kwargs):
        """Update a customer; missing or null fields are left unchanged."""
        customer = self.get_object()
        serializer = CustomerInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_customer(customer, serializer.validated_data)

        return self.operation_response(result, CustomerSerializer)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        """Delete a customer."""
        result = delete_customer(self.get_object())
        return self.operation_response(result, CustomerSerializer, status.HTTP_204_NO_CONTENT)
