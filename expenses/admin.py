from django.contrib import admin

from .models import Expenditure, ExpenditureAllocation


class ExpenditureAllocationInline(admin.TabularInline):
    model = ExpenditureAllocation
    extra = 0
    raw_id_fields = ['crop']


@admin.register(Expenditure)
class ExpenditureAdmin(admin.ModelAdmin):
    list_display = ['category', 'sub_category', 'amount', 'frequency',
                    'payment_mode', 'allocation_method', 'expense_date', 'recorded_by']
    list_filter = ['frequency', 'payment_mode', 'allocation_method']
    search_fields = ['category', 'sub_category', 'paid_to', 'invoice_number']
    filter_horizontal = ['crops_involved']
    inlines = [ExpenditureAllocationInline]
    date_hierarchy = 'created_at'
