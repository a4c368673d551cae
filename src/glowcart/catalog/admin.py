from django.contrib import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "stock_quantity", "featured", "updated_at")
    list_filter = ("category", "featured")
    search_fields = ("name", "description", "ingredients")
    readonly_fields = ("id", "created_at", "updated_at")
    ordering = ("name",)
