# ==========================================
# apps/customers/admin.py
# ==========================================

from django.contrib import admin, messages
from django.http import HttpResponseRedirect
from django.urls import reverse
from apps.customers.models import Customer, CustomerGroup
from apps.customers.services import delete_customer, delete_customer_group


class CustomerInline(admin.TabularInline):
    """Read-only listing of a group's customers."""
    model = Customer
    extra = 0
    fields = ['name', 'mobile_no', 'position', 'is_active', 'is_withheld']
    readonly_fields = fields
    ordering = ['is_withheld', 'position']
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(CustomerGroup)
class CustomerGroupAdmin(admin.ModelAdmin):
    """Admin interface for Customer Groups."""

    list_display = ['name', 'is_default', 'customer_count', 'created_at']
    list_filter = ['is_default']
    search_fields = ['name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [CustomerInline]
    ordering = ['name']

    def customer_count(self, obj):
        """Show number of customers."""
        return obj.customers.count()
    customer_count.short_description = 'Customers'

    def get_readonly_fields(self, request, obj=None):
        """The default flag is only set when a group is created."""
        readonly = list(super().get_readonly_fields(request, obj))
        if obj is not None:
            readonly.append('is_default')
        return readonly

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.is_default:
            return False
        return super().has_delete_permission(request, obj)

    def get_deleted_objects(self, objs, request):
        # customers move to the default group instead of blocking deletion
        deleted_objects, model_count, perms_needed, _ = super().get_deleted_objects(objs, request)
        return deleted_objects, model_count, perms_needed, []

    def delete_model(self, request, obj):
        """Delete through the service so customers move to the default group."""
        result = delete_customer_group(obj)
        for error in result.errors:
            self.message_user(request, error, level=messages.ERROR)

    def delete_queryset(self, request, queryset):
        for customer_group in queryset:
            self.delete_model(request, customer_group)

    def response_delete(self, request, obj_display, obj_id):
        """Skip the success message when the service kept the group."""
        if CustomerGroup.objects.filter(pk=obj_id).exists():
            return HttpResponseRedirect(
                reverse('admin:customers_customergroup_change', args=[obj_id])
            )
        return super().response_delete(request, obj_display, obj_id)


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    """Admin interface for Customers."""

    list_display = [
        'name',
        'mobile_no',
        'customer_group',
        'position',
        'is_active',
        'is_withheld',
        'due_amount',
    ]
    list_filter = ['customer_group', 'is_active', 'is_withheld']
    search_fields = ['name', 'mobile_no', 'email']
    readonly_fields = ['position', 'created_at', 'updated_at']
    ordering = ['customer_group__name', 'is_withheld', 'position']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('customer_group')

    def delete_model(self, request, obj):
        result = delete_customer(obj)
        for error in result.errors:
            self.message_user(request, error, level=messages.ERROR)

    def delete_queryset(self, request, queryset):
        for customer in queryset:
            self.delete_model(request, customer)
