# ==========================================
# apps/customers/models.py
# ==========================================

from decimal import Decimal

from django.core.validators import MinLengthValidator
from django.db import models, transaction
from django.db.models import F, Max, Q, Sum
from django.db.models.functions import Lower

from apps.customers.exceptions import DefaultGroupDeletionError


def titleize(value):
    """'ram  kumar ' -> 'Ram Kumar'."""
    return ' '.join(word.capitalize() for word in value.split())


class TitleizedNameModel(models.Model):
    """Abstract base that title-cases `name` before validation and save."""

    class Meta:
        abstract = True

    def titleize_name(self):
        if self.name:
            self.name = titleize(self.name)

    def full_clean(self, *args, **kwargs):
        self.titleize_name()
        super().full_clean(*args, **kwargs)

    def save(self, *args, **kwargs):
        self.titleize_name()
        super().save(*args, **kwargs)


class CustomerGroupQuerySet(models.QuerySet):

    def default(self):
        return self.filter(is_default=True)


class CustomerGroup(TitleizedNameModel):
    """Named collection of customers. Exactly one group is the default."""

    name = models.CharField(max_length=50, validators=[MinLengthValidator(3)])
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomerGroupQuerySet.as_manager()

    class Meta:
        db_table = 'customer_groups'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                Lower('name'),
                name='unique_customer_group_name_ci',
                violation_error_message='Name should be unique. Group already present with same name.',
            ),
            models.UniqueConstraint(
                fields=['is_default'],
                condition=Q(is_default=True),
                name='unique_default_customer_group',
                violation_error_message='Default customer group already exists.',
            ),
        ]

    def __str__(self):
        return self.name

    def delete(self, *args, **kwargs):
        if self.is_default:
            raise DefaultGroupDeletionError("You can't delete the default customer group.")
        return super().delete(*args, **kwargs)

    def total_due_amount(self):
        total = self.customers.aggregate(total=Sum('due_amount'))['total']
        return total if total is not None else Decimal('0.00')


class CustomerQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def kept(self):
        return self.filter(is_withheld=False)

    def withheld(self):
        return self.filter(is_withheld=True)

    def in_partition(self, customer_group_id, is_withheld):
        return self.filter(customer_group_id=customer_group_id, is_withheld=is_withheld)


class Customer(TitleizedNameModel):
    """
    Customer belonging to exactly one customer group.

    `position` is the 1-based rank of the customer inside its partition,
    the pair (customer_group, is_withheld). Saving keeps each partition
    ordered: new members go to the bottom, a member leaving a partition
    closes its gap and a changed position shifts the neighbours.
    """

    name = models.CharField(max_length=50, validators=[MinLengthValidator(3)])
    email = models.EmailField(blank=True)
    mobile_no = models.CharField(max_length=20)
    address = models.CharField(max_length=255, blank=True)
    due_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    is_active = models.BooleanField(default=True)
    is_withheld = models.BooleanField(default=False)
    customer_group = models.ForeignKey(
        CustomerGroup,
        on_delete=models.PROTECT,
        related_name='customers'
    )
    position = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomerQuerySet.as_manager()

    class Meta:
        db_table = 'customers'
        ordering = ['customer_group_id', 'is_withheld', 'position', 'id']
        indexes = [
            models.Index(fields=['customer_group', 'is_withheld', 'position'], name='customers_partition_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                Lower('name'),
                name='unique_customer_name_ci',
                violation_error_message='Name should be unique. Please enter another name to identify customer.',
            ),
            models.UniqueConstraint(
                Lower('mobile_no'),
                name='unique_customer_mobile_no_ci',
                violation_error_message='Mobile no should be unique. Customer already exists with same mobile no.',
            ),
        ]

    def __str__(self):
        return self.name

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._remember_list_state()
        return instance

    def refresh_from_db(self, *args, **kwargs):
        super().refresh_from_db(*args, **kwargs)
        self._remember_list_state()

    def save(self, *args, **kwargs):
        with transaction.atomic():
            self._place_in_list()
            super().save(*args, **kwargs)
        self._remember_list_state()

    def delete(self, *args, **kwargs):
        with transaction.atomic():
            self._close_gap(*self._stored_list_state())
            return super().delete(*args, **kwargs)

    # -- ordered list ---------------------------------------------------

    def _remember_list_state(self):
        self._loaded_position = self.position

    def _stored_list_state(self):
        """(scope, position) of the row as currently stored, or (None, None)."""
        if self.pk is None:
            return None, None
        stored = (
            Customer.objects
            .filter(pk=self.pk)
            .values('customer_group_id', 'is_withheld', 'position')
            .first()
        )
        if stored is None:
            return None, None
        return (stored['customer_group_id'], stored['is_withheld']), stored['position']

    def _siblings(self, scope=None):
        customer_group_id, is_withheld = scope or (self.customer_group_id, self.is_withheld)
        siblings = Customer.objects.in_partition(customer_group_id, is_withheld)
        if self.pk is not None:
            siblings = siblings.exclude(pk=self.pk)
        return siblings

    def _place_in_list(self):
        scope = (self.customer_group_id, self.is_withheld)

        if self._state.adding:
            self._append_or_insert()
            return

        # earlier saves in the same transaction may have shifted this row
        stored_scope, stored_position = self._stored_list_state()

        if stored_scope != scope:
            self._close_gap(stored_scope, stored_position)
            self.position = self._bottom()
        elif self.position != getattr(self, '_loaded_position', stored_position):
            self._move_within_partition(stored_position)
        else:
            self.position = stored_position

    def _append_or_insert(self):
        bottom = self._bottom()
        if self.position and self.position < bottom:
            self._siblings().filter(position__gte=self.position).update(position=F('position') + 1)
        else:
            self.position = bottom

    def _bottom(self):
        return (self._siblings().aggregate(last=Max('position'))['last'] or 0) + 1

    def _move_within_partition(self, old):
        size = self._siblings().count() + 1
        requested = size if self.position is None else self.position
        new = min(max(requested, 1), size)
        self.position = new

        if old is None:
            self._siblings().filter(position__gte=new).update(position=F('position') + 1)
        elif new < old:
            self._siblings().filter(
                position__gte=new, position__lt=old
            ).update(position=F('position') + 1)
        elif new > old:
            self._siblings().filter(
                position__gt=old, position__lte=new
            ).update(position=F('position') - 1)

    def _close_gap(self, scope, position):
        if scope is None or position is None:
            return
        self._siblings(scope).filter(position__gt=position).update(position=F('position') - 1)
