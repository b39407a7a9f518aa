from django.contrib import admin

from .models import Sale


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['crop', 'quantity', 'selling_price', 'total_amount',
                    'buyer_name', 'payment_status', 'sale_date', 'owner']
    list_filter = ['payment_status', 'sale_date']
    search_fields = ['buyer_name', 'crop__name', 'owner__username']
    readonly_fields = ['total_amount', 'created_at', 'updated_at']
    raw_id_fields = ['crop']
